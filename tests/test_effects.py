from __future__ import annotations

import logging

import pytest

from dialogue_engine.config import Settings
from dialogue_engine.engine.context import build_context
from dialogue_engine.engine.effects import (
    ConceptDiscovery,
    InsightDelta,
    KnowledgeGain,
    MomentumDelta,
    MomentumReset,
    RelationshipDelta,
    apply_effects,
    option_effects,
)
from dialogue_engine.engine.grading import critical_path_ratio, dialogue_mode, grade_history, pick_conclusion_stage
from dialogue_engine.models.dialogue import DialogueGraph, DialogueOption, HistoryEntry, Mentor, Stage
from dialogue_engine.strategic import StrategicActionKind, enhance_options


def test_option_effects_are_ordered_and_skip_empty_fields():
    option = DialogueOption(
        id="full",
        text="All of it",
        insight_change=10,
        momentum_change=1,
        momentum_effect="reset",
        relationship_change=-1,
        knowledge_gain={"concept_id": "dose", "domain_id": "dosimetry", "amount": 15},
        discovers_concept_id="dose",
        discovers_concepts=["dose", "kerma"],
    )

    assert option_effects(option) == [
        InsightDelta(10),
        MomentumDelta(1),
        MomentumReset(),
        RelationshipDelta(-1),
        KnowledgeGain("dose", "dosimetry", 15),
        ConceptDiscovery("dose"),
        ConceptDiscovery("kerma"),
    ]
    assert option_effects(DialogueOption(id="plain", text="Plain", insight_change=0)) == []


def test_apply_effects_routes_to_ledgers():
    ctx = build_context(Settings(db_path=":memory:"))
    ctx.graphs.add_mentor(Mentor(id="quinn", name="Dr. Quinn", relationship=10))

    apply_effects(
        ctx,
        [InsightDelta(7), MomentumDelta(2), RelationshipDelta(3), KnowledgeGain("ionix", "emerging-tech", 20)],
        speaker_id="quinn",
        source="test",
    )

    assert ctx.resources.insight == 7
    assert ctx.resources.momentum == 2
    assert ctx.graphs.get_mentor("quinn").relationship == 13
    assert ctx.knowledge.mastery("ionix") == 20


def test_relationship_without_speaker_is_skipped(caplog):
    ctx = build_context(Settings(db_path=":memory:"))
    with caplog.at_level(logging.WARNING):
        apply_effects(ctx, [RelationshipDelta(2), InsightDelta(1)], speaker_id=None, source="test")
    assert "relationship_effect_without_speaker" in caplog.text
    assert ctx.resources.insight == 1


def test_unknown_effect_raises():
    ctx = build_context(Settings(db_path=":memory:"))
    with pytest.raises(TypeError):
        apply_effects(ctx, ["bogus"], speaker_id=None, source="test")


def _quiz() -> DialogueGraph:
    return DialogueGraph.from_stage_list(
        "quiz",
        [
            Stage(
                id="q1",
                options=[
                    DialogueOption(id="a", text="A", next_stage_id="q2", is_critical_path=True),
                    DialogueOption(id="b", text="B", next_stage_id="q2"),
                ],
            ),
            Stage(id="q2", text="Story", next_stage_id="end"),
            Stage(id="end", is_conclusion=True, conclusion_grade="standard"),
            Stage(id="end-great", is_conclusion=True, conclusion_grade="excellence"),
        ],
    )


def test_grading_counts_only_critical_questions():
    graph = _quiz()
    history = [HistoryEntry("q1", None), HistoryEntry("q1", "a"), HistoryEntry("q2", None)]

    assert critical_path_ratio(graph, history) == 1.0
    assert grade_history(graph, history) == "excellence"
    assert grade_history(graph, [HistoryEntry("q1", "b")]) == "needs_improvement"
    assert grade_history(graph, []) == "standard"


def test_pick_conclusion_falls_back_to_standard():
    graph = _quiz()
    assert pick_conclusion_stage(graph, "excellence").id == "end-great"
    assert pick_conclusion_stage(graph, "needs_improvement").id == "end"


def test_dialogue_mode():
    graph = _quiz()
    assert dialogue_mode(graph.stages["q1"]) == "question"
    assert dialogue_mode(graph.stages["q2"]) == "narrative"
    assert dialogue_mode(graph.stages["end"]) == "reaction"


def test_enhance_options_decorates_copies():
    options = [DialogueOption(id="a", text="Answer")]

    reframed = enhance_options(options, StrategicActionKind.REFRAME)
    boasted = enhance_options(options, "boast")
    plain = enhance_options(options, None)

    assert reframed[0].text == "Answer [Reframed]"
    assert boasted[0].text == "Answer [Challenge Mode]"
    assert boasted[0].boast_mode
    assert plain[0].text == "Answer"
    assert enhance_options(options, "synthesis")[0].text == "Answer"
    assert options[0].text == "Answer"
    assert not options[0].boast_mode
