from dialogue_engine.strategic.enhancer import enhance_options
from dialogue_engine.strategic.handlers import (
    DEFAULT_HANDLERS,
    handle_boast,
    handle_extrapolate,
    handle_reframe,
    handle_synthesis,
)
from dialogue_engine.strategic.resolver import StrategicActionResolver
from dialogue_engine.strategic.schemas import (
    ActionContext,
    ActionHandler,
    ActionOutcome,
    DispatchResult,
    StageUpdate,
    StrategicActionKind,
)

__all__ = [
    "ActionContext",
    "ActionHandler",
    "ActionOutcome",
    "DEFAULT_HANDLERS",
    "DispatchResult",
    "StageUpdate",
    "StrategicActionKind",
    "StrategicActionResolver",
    "enhance_options",
    "handle_boast",
    "handle_extrapolate",
    "handle_reframe",
    "handle_synthesis",
]
