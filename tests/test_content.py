from __future__ import annotations

import json

import pytest

from dialogue_engine.content.registry import ContentError, ContentRegistry, parse_graph
from dialogue_engine.content.validation import find_dead_ends, reachable_stages, validate_graph
from dialogue_engine.engine.graph_store import DialogueGraphStore
from dialogue_engine.engine.notifications import NotificationBus


def test_bundled_content_loads_and_validates():
    registry = ContentRegistry.from_directory()

    assert {"kapoor-calibration", "jesse-equipment"} <= set(registry.graphs)
    assert {"kapoor", "jesse", "quinn"} <= set(registry.mentors)
    for graph in registry.graphs.values():
        assert validate_graph(graph) == []


def test_registry_lookup_by_stage_id():
    registry = ContentRegistry.from_directory()
    assert registry.get("correction-factors").id == "kapoor-calibration"
    assert registry.get("jesse-equipment").start_stage_id == "jesse-intro"
    assert registry.get("missing") is None


def test_load_into_store_copies_mentors():
    registry = ContentRegistry.from_directory()
    graphs = DialogueGraphStore(NotificationBus())

    registry.load_into(graphs)
    graphs.update_mentor_relationship("kapoor", 5)

    assert graphs.get_mentor("kapoor").relationship == 55
    assert registry.mentors["kapoor"].relationship == 50
    assert graphs.get_graph("kapoor-calibration") is registry.graphs["kapoor-calibration"]


def test_parse_graph_defaults_start_to_first_stage():
    graph = parse_graph(
        {
            "id": "tiny",
            "stages": [
                {"id": "a", "options": [{"id": "next", "text": "Next", "next_stage_id": "b"}]},
                {"id": "b", "is_conclusion": True},
            ],
        }
    )
    assert graph.start_stage_id == "a"
    assert reachable_stages(graph) == {"a", "b"}
    assert validate_graph(graph) == []


def test_parse_graph_rejects_duplicates_and_bad_fields():
    with pytest.raises(ContentError, match="duplicate stage ids"):
        parse_graph({"id": "dup", "stages": [{"id": "a"}, {"id": "a"}]})
    with pytest.raises(ContentError):
        parse_graph({"id": "bad", "stages": [{"id": "a", "options": [{"id": "x"}]}]})
    with pytest.raises(ContentError):
        parse_graph({"id": "nostart", "start_stage_id": "zzz", "stages": [{"id": "a"}]})
    with pytest.raises(ContentError):
        parse_graph({"id": "hard", "difficulty": 7, "stages": [{"id": "a"}]})


def test_validation_reports_authoring_problems():
    graph = parse_graph(
        {
            "id": "broken",
            "stages": [
                {
                    "id": "start",
                    "options": [
                        {"id": "loop", "text": "Again", "next_stage_id": "start", "relationship_change": 1},
                        {"id": "dangling", "text": "Where?", "next_stage_id": "ghost"},
                        {"id": "stuck", "text": "Hmm"},
                        {"id": "both", "text": "Both", "is_end_node": True, "next_stage_id": "start"},
                    ],
                },
                {"id": "orphan", "is_conclusion": True},
            ],
        }
    )

    issues = validate_graph(graph)

    assert any("references unknown stage 'ghost'" in issue for issue in issues)
    assert any("option stuck has no transition" in issue for issue in issues)
    assert any("option both is an end node" in issue for issue in issues)
    assert any("no speaker" in issue for issue in issues)
    assert any("orphan is unreachable" in issue for issue in issues)


def test_find_dead_ends():
    graph = parse_graph(
        {
            "id": "trap",
            "stages": [
                {"id": "a", "speaker_id": "x", "options": [
                    {"id": "in", "text": "In", "next_stage_id": "b"},
                    {"id": "out", "text": "Out", "is_end_node": True},
                ]},
                {"id": "b", "options": [{"id": "around", "text": "Around", "next_stage_id": "c"}]},
                {"id": "c", "next_stage_id": "b"},
            ],
        }
    )
    assert find_dead_ends(graph) == ["b", "c"]


def test_from_directory_reads_custom_content(tmp_path):
    (tmp_path / "mentors.json").write_text(json.dumps([{"id": "ada", "name": "Ada"}]), encoding="utf-8")
    (tmp_path / "ada.json").write_text(
        json.dumps({"id": "ada-intro", "mentor_id": "ada", "stages": [{"id": "hello", "is_conclusion": True}]}),
        encoding="utf-8",
    )

    registry = ContentRegistry.from_directory(tmp_path)

    assert registry.mentors["ada"].relationship == 0
    assert registry.graphs["ada-intro"].start_stage_id == "hello"


def test_broken_files_raise_content_error(tmp_path):
    (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ContentError, match="cannot read"):
        ContentRegistry.from_directory(tmp_path)
    with pytest.raises(ContentError, match="not found"):
        ContentRegistry.from_directory(tmp_path / "missing")


def test_duplicate_graph_ids_are_rejected(tmp_path):
    payload = json.dumps({"id": "same", "stages": [{"id": "a", "is_conclusion": True}]})
    (tmp_path / "one.json").write_text(payload, encoding="utf-8")
    (tmp_path / "two.json").write_text(payload, encoding="utf-8")
    with pytest.raises(ContentError, match="duplicate graph id"):
        ContentRegistry.from_directory(tmp_path)
