from __future__ import annotations

from dataclasses import dataclass

from dialogue_engine.config import Settings
from dialogue_engine.db.store import Store
from dialogue_engine.engine.graph_store import DialogueGraphStore
from dialogue_engine.engine.knowledge import KnowledgeLedger
from dialogue_engine.engine.notifications import NotificationBus
from dialogue_engine.engine.resources import ResourceLedger


@dataclass
class EngineContext:
    settings: Settings
    bus: NotificationBus
    resources: ResourceLedger
    knowledge: KnowledgeLedger
    graphs: DialogueGraphStore
    store: Store | None = None


def build_context(settings: Settings | None = None, *, store: Store | None = None) -> EngineContext:
    settings = settings or Settings()
    if store is None:
        store = Store(settings.db_path)
    bus = NotificationBus(store, actor_id=settings.player_id)
    return EngineContext(
        settings=settings,
        bus=bus,
        resources=ResourceLedger(bus, max_momentum=settings.max_momentum_level, insight=settings.starting_insight),
        knowledge=KnowledgeLedger(bus),
        graphs=DialogueGraphStore(bus),
        store=store,
    )
