from __future__ import annotations

from dialogue_engine.models.dialogue import DialogueOption
from dialogue_engine.strategic.schemas import StrategicActionKind

REFRAMED_MARKER = " [Reframed]"
CHALLENGE_MARKER = " [Challenge Mode]"


def enhance_options(
    options: list[DialogueOption],
    active_action: StrategicActionKind | str | None,
) -> list[DialogueOption]:
    """Decorate visible options for an armed strategic action.

    Only display fields (``text``, ``boast_mode``) change, always on copies.
    """
    kind = StrategicActionKind.parse(active_action)
    if kind is StrategicActionKind.REFRAME:
        return [option.model_copy(update={"text": option.text + REFRAMED_MARKER}) for option in options]
    if kind is StrategicActionKind.BOAST:
        return [
            option.model_copy(update={"text": option.text + CHALLENGE_MARKER, "boast_mode": True})
            for option in options
        ]
    return list(options)
