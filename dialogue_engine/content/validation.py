"""Authoring-time checks for dialogue graphs.

The engine tolerates broken content at runtime (it stalls and logs); these
helpers surface the same problems before a graph ships.
"""
from __future__ import annotations

from collections import defaultdict, deque
from typing import Iterable

from dialogue_engine.models.dialogue import DialogueGraph, Stage


def _edges(stage: Stage) -> Iterable[tuple[str, str]]:
    for option in stage.options:
        if option.next_stage_id and not option.is_end_node:
            yield f"option {option.id}.next_stage_id", option.next_stage_id
    if stage.next_stage_id:
        yield "next_stage_id", stage.next_stage_id
    if stage.tangent_stage_id:
        yield "tangent_stage_id", stage.tangent_stage_id
    if stage.boast_stage_id:
        yield "boast_stage_id", stage.boast_stage_id


def is_terminal(stage: Stage) -> bool:
    if any(option.is_end_node for option in stage.options):
        return True
    return stage.is_conclusion and not stage.options and not stage.next_stage_id


def reachable_stages(graph: DialogueGraph) -> set[str]:
    graded = [stage.id for stage in graph.stages.values() if stage.is_conclusion and stage.conclusion_grade]
    seen = {graph.start_stage_id}
    queue = deque([graph.start_stage_id])
    while queue:
        stage = graph.stages[queue.popleft()]
        if stage.id in graded:
            targets = [*graded, *(target for _, target in _edges(stage))]
        else:
            targets = [target for _, target in _edges(stage)]
        for target in targets:
            if target in graph.stages and target not in seen:
                seen.add(target)
                queue.append(target)
    return seen


def find_dead_ends(graph: DialogueGraph) -> list[str]:
    """Reachable stages from which no terminal stage can be reached."""
    incoming: dict[str, set[str]] = defaultdict(set)
    for stage in graph.stages.values():
        for _, target in _edges(stage):
            if target in graph.stages:
                incoming[target].add(stage.id)
    can_finish = {stage.id for stage in graph.stages.values() if is_terminal(stage)}
    queue = deque(can_finish)
    while queue:
        for source in incoming[queue.popleft()]:
            if source not in can_finish:
                can_finish.add(source)
                queue.append(source)
    return sorted(reachable_stages(graph) - can_finish)


def validate_graph(graph: DialogueGraph) -> list[str]:
    issues: list[str] = []
    for stage in graph.stages.values():
        for label, target in _edges(stage):
            if target not in graph.stages:
                issues.append(f"{graph.id}:{stage.id} {label} references unknown stage {target!r}")
        for option in stage.options:
            if option.is_end_node and option.next_stage_id:
                issues.append(f"{graph.id}:{stage.id} option {option.id} is an end node but sets next_stage_id")
            if not option.is_end_node and not option.next_stage_id:
                issues.append(f"{graph.id}:{stage.id} option {option.id} has no transition")
        if stage.speaker_id is None and any(option.relationship_change for option in stage.options):
            issues.append(f"{graph.id}:{stage.id} has relationship effects but no speaker")
    for stage_id in sorted(set(graph.stages) - reachable_stages(graph)):
        issues.append(f"{graph.id}:{stage_id} is unreachable from {graph.start_stage_id!r}")
    for stage_id in find_dead_ends(graph):
        issues.append(f"{graph.id}:{stage_id} cannot reach a conclusion")
    return issues
