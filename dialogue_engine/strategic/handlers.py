from __future__ import annotations

import logging

from dialogue_engine.engine.context import EngineContext
from dialogue_engine.strategic import content
from dialogue_engine.strategic.schemas import (
    ActionContext,
    ActionHandler,
    ActionOutcome,
    StageUpdate,
    StrategicActionKind,
)

log = logging.getLogger(__name__)

REFRAME_APPROACHES = {"humble", "precision"}
REFRAME_MIN_OPTIONS = 2

REFRAME_REWARD = {"relationship_change": 1, "insight_change": 5}
EXTRAPOLATE_REWARD = {"relationship_change": 2, "insight_change": 15, "knowledge_amount": 10}
SYNTHESIS_REWARD = {"relationship_change": 1, "insight_change": 25, "knowledge_amount": 20}
BOAST_EXPERT_INSIGHT = 30
BOAST_EXPERT_MASTERY = 25


async def handle_reframe(ctx: EngineContext, action: ActionContext) -> ActionOutcome:
    kept = [option for option in action.current_options or () if option.approach in REFRAME_APPROACHES]
    if len(kept) < REFRAME_MIN_OPTIONS:
        kept = content.options_for(content.REFRAME_FALLBACKS, action.character_id, **REFRAME_REWARD)
    return ActionOutcome(stage_update=StageUpdate(text=content.REFRAME_NARRATION), new_options=kept)


async def handle_extrapolate(ctx: EngineContext, action: ActionContext) -> ActionOutcome:
    options = content.options_for(content.EXTRAPOLATE_OPTIONS, action.character_id, **EXTRAPOLATE_REWARD)
    return ActionOutcome(stage_update=StageUpdate(text=content.EXTRAPOLATE_NARRATION), new_options=options)


async def handle_boast(ctx: EngineContext, action: ActionContext) -> ActionOutcome:
    found = ctx.graphs.find_stage(action.stage_id, action.graph_id)
    if found is not None:
        graph, stage = found
        if stage.boast_stage_id:
            log.info("boast_redirect graph=%s stage=%s target=%s", graph.id, stage.id, stage.boast_stage_id)
            return ActionOutcome(stage_update=StageUpdate(current_stage_id=stage.boast_stage_id))
    else:
        log.warning("boast_stage_unknown stage=%s graph=%s", action.stage_id, action.graph_id)

    expert, overconfident = content.options_for(content.BOAST_OPTIONS, action.character_id)
    expert = expert.model_copy(update={"insight_change": BOAST_EXPERT_INSIGHT, "is_critical_path": True})
    if expert.knowledge_gain is not None:
        expert.knowledge_gain.amount = BOAST_EXPERT_MASTERY
    overconfident = overconfident.model_copy(
        update={"insight_change": 0, "momentum_effect": "reset", "is_critical_path": False}
    )
    return ActionOutcome(stage_update=StageUpdate(text=content.BOAST_NARRATION), new_options=[expert, overconfident])


async def handle_synthesis(ctx: EngineContext, action: ActionContext) -> ActionOutcome:
    options = content.options_for(content.SYNTHESIS_OPTIONS, action.character_id, **SYNTHESIS_REWARD)
    return ActionOutcome(stage_update=StageUpdate(text=content.SYNTHESIS_NARRATION), new_options=options)


DEFAULT_HANDLERS: dict[StrategicActionKind, ActionHandler] = {
    StrategicActionKind.REFRAME: handle_reframe,
    StrategicActionKind.EXTRAPOLATE: handle_extrapolate,
    StrategicActionKind.BOAST: handle_boast,
    StrategicActionKind.SYNTHESIS: handle_synthesis,
}
