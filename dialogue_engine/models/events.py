from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class Notification(BaseModel):
    event_type: str

    def payload(self) -> dict[str, object]:
        return self.model_dump(exclude={"event_type"})


class DialogueStarted(Notification):
    event_type: Literal["DIALOGUE_STARTED"] = "DIALOGUE_STARTED"
    graph_id: str


class DialogueEnded(Notification):
    event_type: Literal["DIALOGUE_ENDED"] = "DIALOGUE_ENDED"
    graph_id: str
    completed: bool


class InsightGained(Notification):
    event_type: Literal["INSIGHT_GAINED"] = "INSIGHT_GAINED"
    change: int
    source: str


class InsightSpent(Notification):
    event_type: Literal["INSIGHT_SPENT"] = "INSIGHT_SPENT"
    change: int
    source: str


class MomentumChanged(Notification):
    event_type: Literal["MOMENTUM_CHANGED"] = "MOMENTUM_CHANGED"
    change: int
    source: str


class KnowledgeDiscovered(Notification):
    event_type: Literal["KNOWLEDGE_DISCOVERED"] = "KNOWLEDGE_DISCOVERED"
    concept_id: str
    source: str


class MasteryIncreased(Notification):
    event_type: Literal["MASTERY_INCREASED"] = "MASTERY_INCREASED"
    concept_id: str
    amount: int
    domain_id: str | None = None
    source: str


class MentorRelationshipChanged(Notification):
    event_type: Literal["MENTOR_RELATIONSHIP_CHANGED"] = "MENTOR_RELATIONSHIP_CHANGED"
    mentor_id: str
    previous_value: int
    new_value: int
    change: int


class StrategicActionApplied(Notification):
    event_type: Literal["STRATEGIC_ACTION_APPLIED"] = "STRATEGIC_ACTION_APPLIED"
    action_kind: str
    character_id: str
    stage_id: str
    successful: bool
