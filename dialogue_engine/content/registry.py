from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dialogue_engine.engine.graph_store import DialogueGraphStore
from dialogue_engine.models.dialogue import DialogueGraph, Mentor, Stage

log = logging.getLogger(__name__)

BUNDLED_DIR = Path(__file__).resolve().parent / "data"
MENTORS_FILE = "mentors.json"


class ContentError(ValueError):
    pass


def parse_graph(data: dict[str, Any]) -> DialogueGraph:
    payload = dict(data)
    stages = payload.get("stages")
    if isinstance(stages, list):
        try:
            parsed = [Stage.model_validate(stage) for stage in stages]
        except ValidationError as exc:
            raise ContentError(f"invalid stage in graph {payload.get('id')!r}: {exc}") from exc
        if len({stage.id for stage in parsed}) != len(parsed):
            raise ContentError(f"duplicate stage ids in graph {payload.get('id')!r}")
        payload["stages"] = {stage.id: stage for stage in parsed}
        payload.setdefault("start_stage_id", parsed[0].id if parsed else "")
    try:
        return DialogueGraph.model_validate(payload)
    except ValidationError as exc:
        raise ContentError(f"invalid graph {payload.get('id')!r}: {exc}") from exc


class ContentRegistry:
    """Authored graphs and mentors, looked up by graph id or by stage id."""

    def __init__(self) -> None:
        self.graphs: dict[str, DialogueGraph] = {}
        self.mentors: dict[str, Mentor] = {}

    @classmethod
    def from_directory(cls, directory: str | Path | None = None) -> ContentRegistry:
        root = Path(directory) if directory else BUNDLED_DIR
        if not root.is_dir():
            raise ContentError(f"content directory not found: {root}")
        registry = cls()
        for path in sorted(root.glob("*.json")):
            if path.name == MENTORS_FILE:
                registry.load_mentor_file(path)
            else:
                registry.load_graph_file(path)
        log.info("content_loaded dir=%s graphs=%s mentors=%s", root, len(registry.graphs), len(registry.mentors))
        return registry

    def load_graph_file(self, path: str | Path) -> DialogueGraph:
        data = _read_json(Path(path))
        graph = parse_graph(data)
        self.register_graph(graph)
        return graph

    def load_mentor_file(self, path: str | Path) -> list[Mentor]:
        data = _read_json(Path(path))
        rows = data.get("mentors", []) if isinstance(data, dict) else data
        try:
            mentors = [Mentor.model_validate(row) for row in rows]
        except ValidationError as exc:
            raise ContentError(f"invalid mentor in {path}: {exc}") from exc
        for mentor in mentors:
            self.mentors[mentor.id] = mentor
        return mentors

    def register_graph(self, graph: DialogueGraph) -> None:
        if graph.id in self.graphs:
            raise ContentError(f"duplicate graph id {graph.id!r}")
        self.graphs[graph.id] = graph

    def get(self, key: str) -> DialogueGraph | None:
        graph = self.graphs.get(key)
        if graph is not None:
            return graph
        for candidate in self.graphs.values():
            if key in candidate.stages:
                return candidate
        return None

    def load_into(self, store: DialogueGraphStore) -> None:
        for mentor in self.mentors.values():
            store.add_mentor(mentor.model_copy(deep=True))
        for graph in self.graphs.values():
            store.add_graph(graph)


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, json.JSONDecodeError) as exc:
        raise ContentError(f"cannot read content file {path}: {exc}") from exc
