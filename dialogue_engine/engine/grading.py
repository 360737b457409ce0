from __future__ import annotations

from typing import Literal

from dialogue_engine.models.dialogue import ConclusionGrade, DialogueGraph, HistoryEntry, Stage

DialogueMode = Literal["narrative", "question", "reaction"]

EXCELLENCE_RATIO = 0.8
STANDARD_RATIO = 0.5


def dialogue_mode(stage: Stage) -> DialogueMode:
    if stage.is_conclusion:
        return "reaction"
    if any(option.is_critical_path for option in stage.options):
        return "question"
    return "narrative"


def critical_path_ratio(graph: DialogueGraph, history: list[HistoryEntry]) -> float | None:
    """Share of critical-path questions that were answered on the critical path.

    Only authored options chosen on a stage offering at least one
    critical-path option are counted; answers to synthesized options are not.
    """
    asked = 0
    hit = 0
    for entry in history:
        if entry.selected_option_id is None:
            continue
        stage = graph.get_stage(entry.stage_id)
        if stage is None or not any(option.is_critical_path for option in stage.options):
            continue
        chosen = stage.find_option(entry.selected_option_id)
        if chosen is None:
            continue
        asked += 1
        if chosen.is_critical_path:
            hit += 1
    if asked == 0:
        return None
    return hit / asked


def grade_history(graph: DialogueGraph, history: list[HistoryEntry]) -> ConclusionGrade:
    ratio = critical_path_ratio(graph, history)
    if ratio is None:
        return "standard"
    if ratio >= EXCELLENCE_RATIO:
        return "excellence"
    if ratio >= STANDARD_RATIO:
        return "standard"
    return "needs_improvement"


def pick_conclusion_stage(graph: DialogueGraph, grade: ConclusionGrade) -> Stage | None:
    conclusions = [stage for stage in graph.stages.values() if stage.is_conclusion]
    for stage in conclusions:
        if stage.conclusion_grade == grade:
            return stage
    for stage in conclusions:
        if stage.conclusion_grade in (None, "standard"):
            return stage
    return None
