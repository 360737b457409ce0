from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from dialogue_engine.engine.context import EngineContext
from dialogue_engine.models.actions import ActionOutcome, StageUpdate, StrategicActionKind
from dialogue_engine.models.dialogue import DialogueOption


@dataclass(frozen=True)
class ActionContext:
    character_id: str
    stage_id: str
    action_kind: StrategicActionKind
    # None when no dialogue is active; handlers then fall back to canned content.
    current_options: tuple[DialogueOption, ...] | None = None
    graph_id: str | None = None


@dataclass
class DispatchResult:
    ok: bool
    reason: str | None = None
    outcome: ActionOutcome | None = None


ActionHandler = Callable[[EngineContext, ActionContext], Awaitable[ActionOutcome]]

__all__ = [
    "ActionContext",
    "ActionHandler",
    "ActionOutcome",
    "DispatchResult",
    "StageUpdate",
    "StrategicActionKind",
]
