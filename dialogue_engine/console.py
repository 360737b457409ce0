from __future__ import annotations

import logging
from typing import Callable, Iterable

from dialogue_engine.config import Settings
from dialogue_engine.engine.dialogue_engine import DialogueEngine
from dialogue_engine.models.events import Notification

log = logging.getLogger(__name__)

QUIT_COMMANDS = {"!quit", "!exit"}
ECHOED_EVENTS = {"KNOWLEDGE_DISCOVERED", "MENTOR_RELATIONSHIP_CHANGED", "STRATEGIC_ACTION_APPLIED"}


def run_console(
    engine: DialogueEngine,
    settings: Settings,
    lines: Iterable[str] | None = None,
    output: Callable[[str], None] = print,
) -> int:
    """Read commands line by line and print the engine's replies.

    Returns the number of commands handled. ``lines`` defaults to stdin.
    """

    def echo(notification: Notification) -> None:
        if notification.event_type in ECHOED_EVENTS:
            output(f"  * {notification.event_type} {notification.payload()}")

    unsubscribe = engine.subscribe(echo) if settings.dev_mode else None
    source = lines if lines is not None else _stdin_lines()
    handled = 0
    output("Type !help for commands, !quit to leave.")
    try:
        for raw in source:
            text = raw.strip()
            if not text:
                continue
            if text.lower() in QUIT_COMMANDS:
                break
            result = engine.handle_command(text)
            handled += 1
            output(result.message)
    finally:
        if unsubscribe is not None:
            unsubscribe()
    log.info("console_closed commands=%s", handled)
    return handled


def _stdin_lines() -> Iterable[str]:
    while True:
        try:
            yield input("> ")
        except EOFError:
            return
