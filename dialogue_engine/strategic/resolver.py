from __future__ import annotations

import asyncio
import logging

from dialogue_engine.engine.context import EngineContext
from dialogue_engine.engine.session import DialogueSession
from dialogue_engine.models.events import StrategicActionApplied
from dialogue_engine.strategic.handlers import DEFAULT_HANDLERS
from dialogue_engine.strategic.schemas import (
    ActionContext,
    ActionHandler,
    ActionOutcome,
    DispatchResult,
    StrategicActionKind,
)

log = logging.getLogger(__name__)


class StrategicActionResolver:
    """Dispatches strategic actions to their handlers and commits the outcome.

    Dispatches are serialized: a second call waits for the first to finish
    and then snapshots the options as they are at that point. A handler
    failure, a stale stage or a bad stage jump leaves the session untouched.
    """

    def __init__(
        self,
        ctx: EngineContext,
        session: DialogueSession,
        handlers: dict[StrategicActionKind, ActionHandler] | None = None,
    ) -> None:
        table = dict(DEFAULT_HANDLERS if handlers is None else handlers)
        missing = set(StrategicActionKind) - set(table)
        if missing:
            raise ValueError(f"missing strategic action handlers: {sorted(kind.value for kind in missing)}")
        self.ctx = ctx
        self.session = session
        self._handlers = table
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    def register(self, kind: StrategicActionKind, handler: ActionHandler) -> None:
        self._handlers[kind] = handler

    def _loop_lock(self) -> asyncio.Lock:
        # an asyncio.Lock stays bound to the first loop that contends for it
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def apply_strategic_action(
        self,
        action_kind: StrategicActionKind | str | None,
        character_id: str | None,
        stage_id: str | None,
    ) -> bool:
        result = await self.dispatch(action_kind, character_id, stage_id)
        return result.ok

    async def dispatch(
        self,
        action_kind: StrategicActionKind | str | None,
        character_id: str | None,
        stage_id: str | None,
    ) -> DispatchResult:
        if not action_kind or not character_id or not stage_id:
            log.error(
                "strategic_action_rejected reason=missing_parameter kind=%s character=%s stage=%s",
                action_kind,
                character_id,
                stage_id,
            )
            return DispatchResult(ok=False, reason="missing_parameter")
        kind = StrategicActionKind.parse(action_kind)
        if kind is None:
            log.warning("strategic_action_rejected reason=unknown_kind kind=%s", action_kind)
            return DispatchResult(ok=False, reason="unknown_kind")

        async with self._loop_lock():
            result = await self._dispatch_locked(kind, character_id, stage_id)
        self._record(kind, character_id, stage_id, result)
        return result

    async def _dispatch_locked(self, kind: StrategicActionKind, character_id: str, stage_id: str) -> DispatchResult:
        log.info("strategic_action_start kind=%s character=%s stage=%s", kind.value, character_id, stage_id)
        snapshot = self.session.snapshot_options()
        if snapshot is None:
            log.warning("strategic_action_without_dialogue kind=%s stage=%s", kind.value, stage_id)
        action = ActionContext(
            character_id=character_id,
            stage_id=stage_id,
            action_kind=kind,
            current_options=snapshot,
            graph_id=self.session.active_graph_id,
        )
        handler = self._handlers[kind]
        try:
            outcome = await handler(self.ctx, action)
        except Exception:
            log.exception("strategic_action_handler_failed kind=%s stage=%s", kind.value, stage_id)
            return DispatchResult(ok=False, reason="handler_failed")
        if not isinstance(outcome, ActionOutcome):
            log.error("strategic_action_bad_outcome kind=%s type=%s", kind.value, type(outcome).__name__)
            return DispatchResult(ok=False, reason="bad_outcome")
        if outcome.stage_update is None and outcome.new_options is None:
            log.warning("strategic_action_empty_outcome kind=%s", kind.value)
            return DispatchResult(ok=False, reason="empty_outcome", outcome=outcome)

        try:
            reason = self.session.apply_strategic_outcome(stage_id, outcome)
        except Exception:
            log.exception("strategic_action_commit_failed kind=%s stage=%s", kind.value, stage_id)
            return DispatchResult(ok=False, reason="commit_failed", outcome=outcome)
        if reason is not None:
            log.warning("strategic_action_not_applied kind=%s stage=%s reason=%s", kind.value, stage_id, reason)
            return DispatchResult(ok=False, reason=reason, outcome=outcome)
        log.info("strategic_action_applied kind=%s stage=%s", kind.value, self.session.current_stage_id)
        return DispatchResult(ok=True, outcome=outcome)

    def _record(self, kind: StrategicActionKind, character_id: str, stage_id: str, result: DispatchResult) -> None:
        if self.ctx.store is not None:
            try:
                self.ctx.store.record_strategic_action(
                    self.ctx.settings.player_id,
                    kind.value,
                    character_id,
                    stage_id,
                    result.ok,
                    result.reason,
                )
            except Exception:
                log.exception("strategic_action_journal_failed kind=%s", kind.value)
        self.ctx.bus.publish(
            StrategicActionApplied(
                action_kind=kind.value,
                character_id=character_id,
                stage_id=stage_id,
                successful=result.ok,
            )
        )
