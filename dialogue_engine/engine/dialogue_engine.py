from __future__ import annotations

import asyncio
import logging

from dialogue_engine.content.registry import ContentRegistry
from dialogue_engine.engine.context import EngineContext
from dialogue_engine.engine.grading import dialogue_mode
from dialogue_engine.engine.notifications import Subscriber
from dialogue_engine.engine.session import DialogueSession
from dialogue_engine.models.core import ActionResult
from dialogue_engine.models.dialogue import DialogueGraph, DialogueOption, Stage
from dialogue_engine.strategic import DispatchResult, StrategicActionKind, StrategicActionResolver, enhance_options

log = logging.getLogger(__name__)

HELP_TEXT = (
    "Commands: !help !dialogues !start <id> !look !stats !next !tangent !end\n"
    "Strategic actions: !reframe !extrapolate !boast !synthesis\n"
    "Answer with the option number or its id."
)


class DialogueEngine:
    """Host-facing facade over the session, ledgers and strategic resolver."""

    def __init__(self, ctx: EngineContext, registry: ContentRegistry | None = None) -> None:
        self.ctx = ctx
        self.registry = registry or ContentRegistry()
        self.session = DialogueSession(ctx)
        self.resolver = StrategicActionResolver(ctx, self.session)

    def load_content(self) -> None:
        self.registry.load_into(self.ctx.graphs)
        log.info("content_registered graphs=%s mentors=%s", len(self.ctx.graphs.graphs), len(self.ctx.graphs.mentors))

    def subscribe(self, callback: Subscriber):
        return self.ctx.bus.subscribe(callback)

    def start_dialogue(self, key: str) -> bool:
        graph = self.ctx.graphs.get_graph(key) or self.registry.get(key)
        if graph is None:
            log.warning("dialogue_not_found key=%s", key)
            return False
        self._settle_action(successful=False)
        return self.session.start_dialogue(graph.id)

    def end_dialogue(self) -> bool:
        self._settle_action(successful=False)
        return self.session.end_dialogue()

    def get_active_dialogue(self) -> DialogueGraph | None:
        return self.session.get_active_dialogue()

    def get_current_node(self) -> Stage | None:
        return self.session.get_current_node()

    def get_available_options(self) -> list[DialogueOption]:
        return self.session.get_available_options()

    def get_display_options(self) -> list[DialogueOption]:
        return enhance_options(self.session.get_available_options(), self.ctx.resources.active_action)

    def select_option(self, option_id: str) -> bool:
        stage = self.session.get_current_node()
        option = stage.find_option(option_id) if stage else None
        if not self.session.select_option(option_id):
            return False
        armed = self.ctx.resources.active_action
        if option is not None and armed is not None:
            # a boast only succeeds on the expert answer
            self._settle_action(successful=armed is not StrategicActionKind.BOAST or option.is_critical_path)
        return True

    def advance(self) -> bool:
        return self.session.advance()

    def follow_tangent(self) -> bool:
        return self.session.follow_tangent()

    async def apply_strategic_action(
        self,
        action_kind: StrategicActionKind | str | None,
        character_id: str | None,
        stage_id: str | None,
    ) -> bool:
        return await self.resolver.apply_strategic_action(action_kind, character_id, stage_id)

    async def use_strategic_action(self, action_kind: StrategicActionKind | str) -> DispatchResult:
        """Arm an action for the current speaker and stage, paying its cost, then dispatch it.

        The cost is refunded when the dispatch fails. On success the action
        stays armed until the player answers one of the new options.
        """
        kind = StrategicActionKind.parse(action_kind)
        if kind is None:
            return DispatchResult(ok=False, reason="unknown_kind")
        stage = self.session.get_current_node()
        if stage is None:
            return DispatchResult(ok=False, reason="no_active_dialogue")
        character_id = stage.speaker_id or self._mentor_id()
        if not character_id:
            return DispatchResult(ok=False, reason="no_speaker")
        if not self.ctx.resources.activate_action(kind, character_id, stage.id):
            return DispatchResult(ok=False, reason="unavailable")
        result = await self.resolver.dispatch(kind, character_id, stage.id)
        if not result.ok:
            self.ctx.resources.cancel_action(kind)
        return result

    def handle_command(self, text: str) -> ActionResult:
        command, _, arg = text.strip().partition(" ")
        command = command.lower()
        arg = arg.strip()
        log.debug("command_received command=%s arg=%s", command, arg)
        if command in ("", "!help"):
            return ActionResult(True, HELP_TEXT)
        if command == "!dialogues":
            return ActionResult(True, "\n".join(sorted(self.ctx.graphs.graphs)) or "No dialogues loaded.")
        if command == "!start":
            if not self.start_dialogue(arg):
                return ActionResult(False, f"Unknown dialogue: {arg or '<missing>'}")
            return ActionResult(True, self.render())
        if command == "!end":
            if not self.end_dialogue():
                return ActionResult(False, "No dialogue is active.")
            return ActionResult(True, "Dialogue ended.")
        if command == "!look":
            return ActionResult(self.session.is_active, self.render())
        if command == "!stats":
            return ActionResult(True, self.render_stats())
        if command == "!next":
            return self._after(self.advance(), "There is nothing to continue to.")
        if command == "!tangent":
            return self._after(self.follow_tangent(), "There is no tangent to follow here.")
        kind = StrategicActionKind.parse(command.lstrip("!")) if command.startswith("!") else None
        if kind is not None:
            result = asyncio.run(self.use_strategic_action(kind))
            return self._after(result.ok, f"{kind.value} failed: {result.reason}")
        if command.startswith("!"):
            return ActionResult(False, f"Unknown command {command}. Try !help.")
        return self._answer(text.strip())

    def render(self) -> str:
        stage = self.session.get_current_node()
        if stage is None:
            grade = self.session.conclusion_grade()
            suffix = f" Result: {grade}." if grade else ""
            return f"No dialogue is active.{suffix}"
        mentor = self.ctx.graphs.get_mentor(stage.speaker_id)
        speaker = mentor.name if mentor else (stage.speaker_id or "Narrator")
        lines = [f"{speaker}: {stage.text}"]
        if stage.context_note:
            lines.append(f"({stage.context_note})")
        options = self.get_display_options()
        for index, option in enumerate(options, start=1):
            locked = " (locked)" if option.disabled else ""
            lines.append(f"  {index}. {option.text}{locked}")
        if not options:
            lines.append("  [!next to continue]" if stage.next_stage_id or stage.is_conclusion else "  [no way forward]")
        lines.append(f"[{dialogue_mode(stage)}] {self.render_stats()}")
        return "\n".join(lines)

    def render_stats(self) -> str:
        resources = self.ctx.resources
        armed = resources.active_action.value if resources.active_action else "none"
        return (
            f"Insight {resources.insight} | Momentum {resources.momentum}/{resources.max_momentum}"
            f" | Armed {armed} | Concepts {len(self.ctx.knowledge.discovered)}"
        )

    def _answer(self, text: str) -> ActionResult:
        options = self.session.get_current_options()
        if not options:
            return ActionResult(False, "Nothing to answer right now.")
        option_id = text
        if text.isdigit() and 1 <= int(text) <= len(options):
            option_id = options[int(text) - 1].id
        option = next((item for item in options if item.id == option_id), None)
        if not self.select_option(option_id):
            return ActionResult(False, f"Cannot choose {text!r}.")
        reply = option.response_text if option and option.response_text else ""
        return ActionResult(True, "\n".join(part for part in (reply, self.render()) if part))

    def _after(self, ok: bool, failure: str) -> ActionResult:
        if not ok:
            return ActionResult(False, failure)
        return ActionResult(True, self.render())

    def _mentor_id(self) -> str | None:
        graph = self.session.get_active_dialogue()
        return graph.mentor_id if graph else None

    def _settle_action(self, *, successful: bool) -> None:
        kind = self.ctx.resources.active_action
        if kind is not None:
            self.ctx.resources.complete_action(kind, successful)
