from __future__ import annotations

import logging

from dialogue_engine.engine.context import EngineContext
from dialogue_engine.engine.effects import apply_effects, option_effects
from dialogue_engine.engine.grading import grade_history, pick_conclusion_stage
from dialogue_engine.models.actions import ActionOutcome
from dialogue_engine.models.dialogue import ConclusionGrade, DialogueGraph, DialogueOption, HistoryEntry, Stage
from dialogue_engine.models.events import DialogueEnded, DialogueStarted

log = logging.getLogger(__name__)


class DialogueSession:
    """State machine for the one active conversation.

    Idle when ``active_graph_id`` is None, otherwise positioned on
    ``current_stage_id``. Strategic actions never touch the authored graph:
    their narration and option replacements live on a per-stage overlay that
    is dropped whenever the stage pointer moves.
    """

    def __init__(self, ctx: EngineContext) -> None:
        self.ctx = ctx
        self.active_graph_id: str | None = None
        self.current_stage_id: str | None = None
        self.last_graph_id: str | None = None
        self.history: list[HistoryEntry] = []
        self._overlay: Stage | None = None

    @property
    def is_active(self) -> bool:
        return self.active_graph_id is not None and self.current_stage_id is not None

    def start_dialogue(self, graph_id: str) -> bool:
        graph = self.ctx.graphs.get_graph(graph_id)
        if graph is None:
            log.warning("dialogue_not_found graph=%s", graph_id)
            return False
        if self.is_active:
            log.info("dialogue_replaced previous=%s next=%s", self.active_graph_id, graph_id)
        self.active_graph_id = graph.id
        self.last_graph_id = graph.id
        self.current_stage_id = graph.start_stage_id
        self.history = [HistoryEntry(stage_id=graph.start_stage_id, selected_option_id=None)]
        self._overlay = None
        log.info("dialogue_started graph=%s stage=%s", graph.id, graph.start_stage_id)
        self.ctx.bus.publish(DialogueStarted(graph_id=graph.id))
        return True

    def end_dialogue(self) -> bool:
        if not self.is_active:
            return False
        self._finish(completed=False)
        return True

    def get_active_dialogue(self) -> DialogueGraph | None:
        return self.ctx.graphs.get_graph(self.active_graph_id)

    def get_authored_stage(self) -> Stage | None:
        graph = self.get_active_dialogue()
        if graph is None:
            return None
        return graph.get_stage(self.current_stage_id)

    def get_current_node(self) -> Stage | None:
        if not self.is_active:
            return None
        if self._overlay is not None:
            return self._overlay
        return self.get_authored_stage()

    def get_current_options(self) -> list[DialogueOption]:
        stage = self.get_current_node()
        return list(stage.options) if stage else []

    def get_available_options(self) -> list[DialogueOption]:
        return [
            option if self._is_unlocked(option) else option.model_copy(update={"disabled": True})
            for option in self.get_current_options()
        ]

    def snapshot_options(self) -> tuple[DialogueOption, ...] | None:
        if not self.is_active:
            return None
        return tuple(option.model_copy(deep=True) for option in self.get_current_options())

    def select_option(self, option_id: str) -> bool:
        if not self.is_active:
            log.warning("select_option_without_dialogue option=%s", option_id)
            return False
        stage = self.get_current_node()
        if stage is None:
            log.warning("select_option_missing_stage graph=%s stage=%s", self.active_graph_id, self.current_stage_id)
            return False
        option = stage.find_option(option_id)
        if option is None:
            log.warning("option_not_found option=%s stage=%s", option_id, stage.id)
            return False
        if not self._is_unlocked(option):
            log.warning("option_locked option=%s star=%s", option_id, option.required_star_id)
            return False

        if not option.is_end_node and option.next_stage_id:
            graph = self.get_active_dialogue()
            if graph is None or graph.get_stage(option.next_stage_id) is None:
                log.warning("next_stage_not_found option=%s next=%s", option_id, option.next_stage_id)
                return False

        source = f"dialogue_option:{option_id}"
        apply_effects(self.ctx, option_effects(option), speaker_id=stage.speaker_id, source=source)
        self.history.append(HistoryEntry(stage_id=stage.id, selected_option_id=option_id))

        if option.is_end_node:
            self._finish(completed=True)
            return True
        if option.next_stage_id:
            self._move_to(option.next_stage_id, record=False)
            return True
        if self._overlay is not None:
            # synthesized options hand control back to the authored stage
            self._overlay = None
            log.info("overlay_resolved option=%s stage=%s", option_id, stage.id)
            return True
        log.warning("option_without_transition option=%s stage=%s", option_id, stage.id)
        return True

    def advance(self) -> bool:
        stage = self.get_current_node()
        if stage is None:
            log.warning("advance_without_dialogue")
            return False
        if stage.options:
            log.warning("advance_blocked stage=%s reason=has_options", stage.id)
            return False
        if stage.next_stage_id:
            return self._move_to(stage.next_stage_id)
        if stage.is_conclusion:
            self._finish(completed=True)
            return True
        log.warning("advance_dead_end stage=%s", stage.id)
        return False

    def follow_tangent(self) -> bool:
        stage = self.get_authored_stage() if self.is_active else None
        if stage is None or not stage.tangent_stage_id:
            log.warning("tangent_unavailable stage=%s", self.current_stage_id)
            return False
        return self._move_to(stage.tangent_stage_id)

    def jump_to_stage(self, stage_id: str) -> bool:
        if not self.is_active:
            log.warning("jump_without_dialogue stage=%s", stage_id)
            return False
        return self._move_to(stage_id)

    def apply_strategic_outcome(self, expected_stage_id: str, outcome: ActionOutcome) -> str | None:
        """Commit a strategic-action outcome; returns a failure reason or None.

        Everything is computed before the first assignment so a failure leaves
        the session exactly as it was.
        """
        if not self.is_active:
            return "no_active_dialogue"
        if self.current_stage_id != expected_stage_id:
            return "stale_stage"
        graph = self.get_active_dialogue()
        if graph is None:
            return "unknown_graph"

        update = outcome.stage_update
        target_stage_id = self.current_stage_id
        if update is not None and update.current_stage_id:
            if graph.get_stage(update.current_stage_id) is None:
                return "unknown_stage"
            target_stage_id = update.current_stage_id
        jumping = target_stage_id != self.current_stage_id

        if jumping:
            base = graph.get_stage(target_stage_id)
        else:
            base = self._overlay or self.get_authored_stage()
        if base is None:
            return "unknown_stage"

        changes: dict[str, object] = {}
        if update is not None and not jumping:
            if update.text is not None:
                changes["text"] = update.text
            if update.context_note is not None:
                changes["context_note"] = update.context_note
        if outcome.new_options is not None:
            changes["options"] = [option.model_copy(deep=True) for option in outcome.new_options]
        overlay = base.model_copy(deep=True, update=changes) if changes else None
        if not jumping and overlay is None:
            overlay = self._overlay

        if jumping:
            self.current_stage_id = target_stage_id
            self.history.append(HistoryEntry(stage_id=target_stage_id, selected_option_id=None))
            log.info("stage_jump graph=%s stage=%s", self.active_graph_id, target_stage_id)
        self._overlay = overlay
        return None

    def conclusion_grade(self) -> ConclusionGrade | None:
        graph = self.ctx.graphs.get_graph(self.last_graph_id)
        if graph is None:
            return None
        return grade_history(graph, self.history)

    def _is_unlocked(self, option: DialogueOption) -> bool:
        if option.required_star_id is None:
            return True
        return self.ctx.knowledge.is_star_active(option.required_star_id)

    def _move_to(self, stage_id: str, *, record: bool = True) -> bool:
        graph = self.get_active_dialogue()
        if graph is None or graph.get_stage(stage_id) is None:
            log.warning("stage_not_found graph=%s stage=%s", self.active_graph_id, stage_id)
            return False
        stage_id = self._route_conclusion(graph, stage_id)
        self.current_stage_id = stage_id
        self._overlay = None
        if record:
            self.history.append(HistoryEntry(stage_id=stage_id, selected_option_id=None))
        log.debug("stage_entered graph=%s stage=%s", graph.id, stage_id)
        return True

    def _finish(self, *, completed: bool) -> None:
        graph_id = self.active_graph_id
        self.active_graph_id = None
        self.current_stage_id = None
        self._overlay = None
        log.info("dialogue_ended graph=%s completed=%s", graph_id, completed)
        if graph_id is not None:
            self.ctx.bus.publish(DialogueEnded(graph_id=graph_id, completed=completed))

    def _route_conclusion(self, graph: DialogueGraph, stage_id: str) -> str:
        # Entering any graded conclusion lands on the one matching the run so far.
        stage = graph.get_stage(stage_id)
        if stage is None or not stage.is_conclusion or stage.conclusion_grade is None:
            return stage_id
        grade = grade_history(graph, self.history)
        graded = pick_conclusion_stage(graph, grade)
        if graded is None or graded.id == stage_id:
            return stage_id
        log.info("conclusion_routed graph=%s from=%s to=%s grade=%s", graph.id, stage_id, graded.id, grade)
        return graded.id
