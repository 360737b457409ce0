from __future__ import annotations

import logging
from collections import deque
from typing import Callable

from dialogue_engine.db.store import Store
from dialogue_engine.models.events import Notification

log = logging.getLogger(__name__)

Subscriber = Callable[[Notification], None]


class NotificationBus:
    """Fire-and-forget fan-out of engine notifications.

    Every published notification is journaled to the store (when one is
    attached) and then handed to each subscriber in registration order. A
    failing subscriber or journal write is logged and never reaches the
    engine operation that published the notification.
    """

    def __init__(self, store: Store | None = None, actor_id: str = "player") -> None:
        self.store = store
        self.actor_id = actor_id
        self._subscribers: list[Subscriber] = []
        self.published: deque[Notification] = deque(maxlen=500)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, notification: Notification) -> None:
        log.info("notification type=%s payload=%s", notification.event_type, notification.payload())
        self.published.append(notification)
        if self.store is not None:
            try:
                self.store.write_event(self.actor_id, notification.event_type, notification.payload())
            except Exception:
                log.exception("notification_journal_failed type=%s", notification.event_type)
        for callback in list(self._subscribers):
            try:
                callback(notification)
            except Exception:
                log.exception("notification_subscriber_failed type=%s", notification.event_type)

    def of_type(self, event_type: str) -> list[Notification]:
        return [item for item in self.published if item.event_type == event_type]
