from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel

from dialogue_engine.models.dialogue import DialogueOption


class StrategicActionKind(str, Enum):
    REFRAME = "reframe"
    EXTRAPOLATE = "extrapolate"
    BOAST = "boast"
    SYNTHESIS = "synthesis"

    @classmethod
    def parse(cls, value: StrategicActionKind | str | None) -> StrategicActionKind | None:
        if isinstance(value, cls):
            return value
        if not value:
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class ActionCost:
    insight: int = 0
    min_momentum: int = 0
    requires_max_momentum: bool = False


ACTION_COSTS: dict[StrategicActionKind, ActionCost] = {
    StrategicActionKind.REFRAME: ActionCost(insight=50, min_momentum=2),
    StrategicActionKind.EXTRAPOLATE: ActionCost(insight=25),
    StrategicActionKind.SYNTHESIS: ActionCost(insight=75),
    StrategicActionKind.BOAST: ActionCost(requires_max_momentum=True),
}


@dataclass
class ActionHistoryRecord:
    action_kind: StrategicActionKind
    character_id: str
    stage_id: str
    insight_cost: int
    successful: bool | None = None


class StageUpdate(BaseModel):
    text: str | None = None
    context_note: str | None = None
    current_stage_id: str | None = None


class ActionOutcome(BaseModel):
    stage_update: StageUpdate | None = None
    new_options: list[DialogueOption] | None = None
