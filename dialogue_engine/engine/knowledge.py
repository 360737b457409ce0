from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from dialogue_engine.engine.notifications import NotificationBus
from dialogue_engine.models.events import KnowledgeDiscovered, MasteryIncreased

log = logging.getLogger(__name__)

MasteryLevel = Literal["undiscovered", "introduced", "practicing", "mastered"]


def mastery_level(mastery: int) -> MasteryLevel:
    if mastery < 10:
        return "undiscovered"
    if mastery < 40:
        return "introduced"
    if mastery < 80:
        return "practicing"
    return "mastered"


@dataclass
class ConceptState:
    concept_id: str
    domain_id: str | None = None
    mastery: int = 0
    unlocked: bool = False


class KnowledgeLedger:
    def __init__(self, bus: NotificationBus) -> None:
        self.bus = bus
        self.concepts: dict[str, ConceptState] = {}
        self.newly_discovered: list[str] = []

    @property
    def discovered(self) -> set[str]:
        return set(self.concepts)

    def is_discovered(self, concept_id: str) -> bool:
        return concept_id in self.concepts

    def discover_concept(self, concept_id: str, source: str = "unknown", *, domain_id: str | None = None) -> bool:
        if concept_id in self.concepts:
            log.debug("concept_already_discovered concept=%s source=%s", concept_id, source)
            return False
        self.concepts[concept_id] = ConceptState(concept_id=concept_id, domain_id=domain_id)
        self.newly_discovered.append(concept_id)
        log.info("concept_discovered concept=%s source=%s", concept_id, source)
        self.bus.publish(KnowledgeDiscovered(concept_id=concept_id, source=source))
        return True

    def update_mastery(
        self,
        concept_id: str,
        delta: int,
        *,
        domain_id: str | None = None,
        source: str = "unknown",
    ) -> int:
        if concept_id not in self.concepts:
            self.discover_concept(concept_id, source, domain_id=domain_id)
        concept = self.concepts[concept_id]
        if concept.domain_id is None and domain_id is not None:
            concept.domain_id = domain_id
        previous = concept.mastery
        concept.mastery = max(0, min(100, previous + int(delta)))
        change = concept.mastery - previous
        if change:
            log.debug("mastery_changed concept=%s change=%s mastery=%s", concept_id, change, concept.mastery)
            self.bus.publish(
                MasteryIncreased(concept_id=concept_id, amount=change, domain_id=concept.domain_id, source=source)
            )
        return change

    def mastery(self, concept_id: str) -> int:
        concept = self.concepts.get(concept_id)
        return concept.mastery if concept else 0

    def mastery_level(self, concept_id: str) -> MasteryLevel:
        return mastery_level(self.mastery(concept_id))

    def unlock_concept(self, concept_id: str) -> bool:
        concept = self.concepts.get(concept_id)
        if concept is None:
            log.warning("concept_unlock_rejected concept=%s reason=undiscovered", concept_id)
            return False
        concept.unlocked = True
        return True

    def is_star_active(self, concept_id: str) -> bool:
        concept = self.concepts.get(concept_id)
        return bool(concept and concept.unlocked)

    def domain_mastery(self) -> dict[str, int]:
        totals: dict[str, list[int]] = {}
        for concept in self.concepts.values():
            totals.setdefault(concept.domain_id or "general", []).append(concept.mastery)
        return {domain: round(sum(values) / len(values)) for domain, values in totals.items()}

    def drain_newly_discovered(self) -> list[str]:
        drained, self.newly_discovered = self.newly_discovered, []
        return drained
