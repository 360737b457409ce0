from __future__ import annotations

import logging
from typing import Literal

from dialogue_engine.engine.notifications import NotificationBus
from dialogue_engine.models.actions import ACTION_COSTS, ActionHistoryRecord, StrategicActionKind
from dialogue_engine.models.events import InsightGained, InsightSpent, MomentumChanged

log = logging.getLogger(__name__)

MAX_MOMENTUM_LEVEL = 3


def _clamp(value: int, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, int(value)))


class ResourceLedger:
    """Insight and momentum for the player, plus the armed strategic action.

    Every mutation names a ``source`` so the journal can attribute it.
    Insight never drops below zero and has no ceiling; momentum stays within
    ``[0, max_momentum]``.
    """

    def __init__(
        self,
        bus: NotificationBus,
        *,
        max_momentum: int = MAX_MOMENTUM_LEVEL,
        insight: int = 0,
    ) -> None:
        self.bus = bus
        self.max_momentum = max_momentum
        self.insight = max(0, int(insight))
        self.momentum = 0
        self.consecutive_correct = 0
        self.active_action: StrategicActionKind | None = None
        self.action_history: list[ActionHistoryRecord] = []

    def update_insight(self, delta: int, source: str = "unknown") -> int:
        previous = self.insight
        self.insight = max(0, previous + int(delta))
        change = self.insight - previous
        if change == 0:
            return 0
        log.debug("insight_changed change=%s total=%s source=%s", change, self.insight, source)
        if change > 0:
            self.bus.publish(InsightGained(change=change, source=source))
        else:
            self.bus.publish(InsightSpent(change=change, source=source))
        return change

    def update_momentum(self, delta: int | Literal["reset"], source: str = "unknown") -> int:
        previous = self.momentum
        if delta == "reset":
            self.momentum = 0
        else:
            self.momentum = _clamp(previous + int(delta), 0, self.max_momentum)
        change = self.momentum - previous
        if delta == "reset" or change < 0:
            self.consecutive_correct = 0
        elif change > 0:
            self.consecutive_correct += 1
        if change == 0:
            return 0
        log.debug("momentum_changed change=%s level=%s source=%s", change, self.momentum, source)
        self.bus.publish(MomentumChanged(change=change, source=source))
        return change

    def reset_momentum(self, source: str = "unknown") -> int:
        return self.update_momentum("reset", source)

    def can_afford(self, kind: StrategicActionKind) -> bool:
        cost = ACTION_COSTS[kind]
        if cost.requires_max_momentum and self.momentum < self.max_momentum:
            return False
        return self.insight >= cost.insight and self.momentum >= cost.min_momentum

    def available_actions(self) -> dict[StrategicActionKind, bool]:
        return {kind: self.active_action is None and self.can_afford(kind) for kind in StrategicActionKind}

    def activate_action(self, kind: StrategicActionKind, character_id: str = "unknown", stage_id: str = "unknown") -> bool:
        if self.active_action is not None:
            log.warning("action_activate_blocked kind=%s active=%s", kind.value, self.active_action.value)
            return False
        if not self.can_afford(kind):
            log.warning(
                "action_unaffordable kind=%s insight=%s momentum=%s",
                kind.value,
                self.insight,
                self.momentum,
            )
            return False
        cost = ACTION_COSTS[kind].insight
        if cost:
            self.update_insight(-cost, f"strategic_action:{kind.value}")
        self.active_action = kind
        self.action_history.append(
            ActionHistoryRecord(action_kind=kind, character_id=character_id, stage_id=stage_id, insight_cost=cost)
        )
        log.info("action_activated kind=%s character=%s stage=%s cost=%s", kind.value, character_id, stage_id, cost)
        return True

    def complete_action(self, kind: StrategicActionKind, successful: bool) -> bool:
        if self.active_action is not kind:
            log.warning("action_complete_ignored kind=%s active=%s", kind.value, self.active_action)
            return False
        self.active_action = None
        if self.action_history and self.action_history[-1].action_kind is kind:
            self.action_history[-1].successful = successful
        if kind is StrategicActionKind.BOAST and not successful:
            self.reset_momentum("strategic_action:boast_failed")
        log.info("action_completed kind=%s successful=%s", kind.value, successful)
        return True

    def cancel_action(self, kind: StrategicActionKind) -> bool:
        if self.active_action is not kind:
            log.warning("action_cancel_ignored kind=%s active=%s", kind.value, self.active_action)
            return False
        self.active_action = None
        record = self.action_history.pop() if self.action_history else None
        if record is not None and record.insight_cost:
            self.update_insight(record.insight_cost, f"strategic_action:{kind.value}_refund")
        log.info("action_cancelled kind=%s", kind.value)
        return True
