from __future__ import annotations

import logging

from dialogue_engine.engine.notifications import NotificationBus
from dialogue_engine.models.dialogue import DialogueGraph, Mentor, Stage
from dialogue_engine.models.events import MentorRelationshipChanged

log = logging.getLogger(__name__)


class DialogueGraphStore:
    def __init__(self, bus: NotificationBus) -> None:
        self.bus = bus
        self.graphs: dict[str, DialogueGraph] = {}
        self.mentors: dict[str, Mentor] = {}

    def add_graph(self, graph: DialogueGraph) -> bool:
        if graph.id in self.graphs:
            log.warning("graph_exists graph=%s", graph.id)
            return False
        self.graphs[graph.id] = graph
        return True

    def get_graph(self, graph_id: str | None) -> DialogueGraph | None:
        if graph_id is None:
            return None
        return self.graphs.get(graph_id)

    def find_stage(self, stage_id: str, graph_id: str | None = None) -> tuple[DialogueGraph, Stage] | None:
        if graph_id is not None:
            graph = self.graphs.get(graph_id)
            stage = graph.get_stage(stage_id) if graph else None
            return (graph, stage) if graph and stage else None
        for graph in self.graphs.values():
            stage = graph.get_stage(stage_id)
            if stage is not None:
                return graph, stage
        return None

    def add_mentor(self, mentor: Mentor) -> bool:
        if mentor.id in self.mentors:
            log.warning("mentor_exists mentor=%s", mentor.id)
            return False
        self.mentors[mentor.id] = mentor
        return True

    def get_mentor(self, mentor_id: str | None) -> Mentor | None:
        if mentor_id is None:
            return None
        return self.mentors.get(mentor_id)

    def update_mentor_relationship(self, mentor_id: str, change: int) -> bool:
        mentor = self.mentors.get(mentor_id)
        if mentor is None:
            log.warning("mentor_not_found mentor=%s", mentor_id)
            return False
        previous = mentor.relationship
        new_value = max(0, min(100, previous + int(change)))
        if new_value == previous:
            return False
        self.mentors[mentor_id] = mentor.model_copy(update={"relationship": new_value})
        log.info("mentor_relationship mentor=%s previous=%s new=%s", mentor_id, previous, new_value)
        self.bus.publish(
            MentorRelationshipChanged(
                mentor_id=mentor_id,
                previous_value=previous,
                new_value=new_value,
                change=int(change),
            )
        )
        return True
