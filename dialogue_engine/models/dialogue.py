from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, Field, model_validator

Approach = Literal["humble", "confidence", "precision", "creative"]
ConclusionGrade = Literal["excellence", "standard", "needs_improvement"]


class KnowledgeGain(BaseModel):
    concept_id: str
    domain_id: str
    amount: int = 0


class DialogueOption(BaseModel):
    id: str
    text: str
    response_text: str | None = None
    next_stage_id: str | None = None
    is_end_node: bool = False

    insight_change: int | None = None
    momentum_change: int | None = None
    relationship_change: int | None = None
    knowledge_gain: KnowledgeGain | None = None
    discovers_concept_id: str | None = None
    discovers_concepts: list[str] = Field(default_factory=list)
    momentum_effect: Literal["reset"] | None = None

    required_star_id: str | None = None
    is_critical_path: bool = False
    approach: Approach | None = None

    # display-only
    disabled: bool = False
    boast_mode: bool = False


class Stage(BaseModel):
    id: str
    speaker_id: str | None = None
    text: str = ""
    context_note: str | None = None
    options: list[DialogueOption] = Field(default_factory=list)
    next_stage_id: str | None = None
    tangent_stage_id: str | None = None
    boast_stage_id: str | None = None
    is_conclusion: bool = False
    is_critical_path: bool = False
    conclusion_grade: ConclusionGrade | None = None

    def find_option(self, option_id: str) -> DialogueOption | None:
        return next((option for option in self.options if option.id == option_id), None)


class DialogueGraph(BaseModel):
    id: str
    start_stage_id: str
    stages: dict[str, Stage]
    domain: str = "general"
    difficulty: int = Field(default=1, ge=1, le=3)
    mentor_id: str | None = None

    @model_validator(mode="after")
    def _check_stage_keys(self) -> DialogueGraph:
        if self.start_stage_id not in self.stages:
            raise ValueError(f"start stage {self.start_stage_id!r} is not defined in graph {self.id!r}")
        for key, stage in self.stages.items():
            if key != stage.id:
                raise ValueError(f"stage key {key!r} does not match stage id {stage.id!r}")
        return self

    @classmethod
    def from_stage_list(cls, graph_id: str, stages: list[Stage], **kwargs) -> DialogueGraph:
        if not stages:
            raise ValueError(f"graph {graph_id!r} has no stages")
        start = kwargs.pop("start_stage_id", stages[0].id)
        return cls(id=graph_id, start_stage_id=start, stages={stage.id: stage for stage in stages}, **kwargs)

    def get_stage(self, stage_id: str | None) -> Stage | None:
        if stage_id is None:
            return None
        return self.stages.get(stage_id)


class Mentor(BaseModel):
    id: str
    name: str
    title: str | None = None
    relationship: int = Field(default=0, ge=0, le=100)
    domains: set[str] = Field(default_factory=set)


@dataclass(frozen=True)
class HistoryEntry:
    stage_id: str
    selected_option_id: str | None
