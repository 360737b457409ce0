from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

from dialogue_engine.engine.context import EngineContext
from dialogue_engine.models.dialogue import DialogueOption

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsightDelta:
    amount: int


@dataclass(frozen=True)
class MomentumDelta:
    amount: int


@dataclass(frozen=True)
class MomentumReset:
    pass


@dataclass(frozen=True)
class RelationshipDelta:
    amount: int


@dataclass(frozen=True)
class KnowledgeGain:
    concept_id: str
    domain_id: str
    amount: int


@dataclass(frozen=True)
class ConceptDiscovery:
    concept_id: str


Effect = Union[InsightDelta, MomentumDelta, MomentumReset, RelationshipDelta, KnowledgeGain, ConceptDiscovery]


def option_effects(option: DialogueOption) -> list[Effect]:
    """Translate an option's optional effect fields into an ordered effect list.

    A momentum reset always follows any momentum delta on the same option.
    Zero-valued numeric fields produce no effect.
    """
    effects: list[Effect] = []
    if option.insight_change:
        effects.append(InsightDelta(option.insight_change))
    if option.momentum_change:
        effects.append(MomentumDelta(option.momentum_change))
    if option.momentum_effect == "reset":
        effects.append(MomentumReset())
    if option.relationship_change:
        effects.append(RelationshipDelta(option.relationship_change))
    if option.knowledge_gain is not None and option.knowledge_gain.amount:
        gain = option.knowledge_gain
        effects.append(KnowledgeGain(gain.concept_id, gain.domain_id, gain.amount))
    discoveries = [option.discovers_concept_id] if option.discovers_concept_id else []
    discoveries.extend(option.discovers_concepts)
    for concept_id in dict.fromkeys(discoveries):
        effects.append(ConceptDiscovery(concept_id))
    return effects


def apply_effects(ctx: EngineContext, effects: list[Effect], *, speaker_id: str | None, source: str) -> None:
    for effect in effects:
        if isinstance(effect, InsightDelta):
            ctx.resources.update_insight(effect.amount, source)
        elif isinstance(effect, MomentumDelta):
            ctx.resources.update_momentum(effect.amount, source)
        elif isinstance(effect, MomentumReset):
            ctx.resources.reset_momentum(source)
        elif isinstance(effect, RelationshipDelta):
            if speaker_id is None:
                log.warning("relationship_effect_without_speaker source=%s", source)
                continue
            ctx.graphs.update_mentor_relationship(speaker_id, effect.amount)
        elif isinstance(effect, KnowledgeGain):
            ctx.knowledge.update_mastery(effect.concept_id, effect.amount, domain_id=effect.domain_id, source=source)
        elif isinstance(effect, ConceptDiscovery):
            ctx.knowledge.discover_concept(effect.concept_id, source)
        else:
            raise TypeError(f"unsupported effect {effect!r}")
