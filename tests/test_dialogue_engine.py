from __future__ import annotations

import asyncio

from dialogue_engine.config import Settings
from dialogue_engine.console import run_console
from dialogue_engine.main import build_engine
from dialogue_engine.strategic import StrategicActionKind


def _engine(**overrides):
    settings = Settings(db_path=":memory:", **overrides)
    return build_engine(settings)


def test_commands_walk_the_calibration_to_an_excellent_conclusion():
    engine = _engine()

    start = engine.handle_command("!start kapoor-calibration")
    assert start.ok
    assert "Dr. Kapoor: Good morning." in start.message
    assert "1. I'm looking forward to learning the procedure." in start.message

    for answer in ("humble-intro", "correct-buildup", "correct-ptp", "correct-tolerance"):
        assert engine.handle_command(answer).ok

    assert engine.session.current_stage_id == "conclusion-excellence"
    assert engine.handle_command("!next").ok
    assert engine.session.current_stage_id == "journal-presentation"
    finish = engine.handle_command("1")

    assert finish.ok
    assert "See that you do." in finish.message
    assert "Result: excellence." in finish.message
    assert not engine.session.is_active
    assert engine.ctx.resources.insight == 5 + 15 + 15 + 15
    assert engine.ctx.resources.momentum == 3
    assert engine.ctx.knowledge.is_discovered("journal-system")
    assert engine.ctx.graphs.get_mentor("kapoor").relationship == 50 + 1 + 1 + 1 + 1 + 2
    assert engine.ctx.store.count_events("player", "DIALOGUE_ENDED") == 1


def test_wrong_answers_route_to_needs_improvement():
    engine = _engine()
    engine.start_dialogue("kapoor-calibration")

    for option_id in ("confident-intro", "incorrect-buildup", "incorrect-polarity", "incorrect-tolerance"):
        assert engine.select_option(option_id)

    assert engine.session.current_stage_id == "conclusion-needs-improvement"
    assert engine.ctx.graphs.get_mentor("kapoor").relationship == 46


def test_start_dialogue_accepts_a_stage_id():
    engine = _engine()
    assert engine.start_dialogue("jesse-wrapup")
    assert engine.get_active_dialogue().id == "jesse-equipment"
    assert engine.get_current_node().id == "jesse-intro"


def test_boast_arms_jumps_and_settles_on_expert_answer():
    engine = _engine()
    engine.start_dialogue("kapoor-calibration")
    engine.select_option("humble-intro")
    engine.ctx.resources.update_momentum(3, "test")

    result = asyncio.run(engine.use_strategic_action("boast"))

    assert result.ok
    assert engine.session.current_stage_id == "basics-boast"
    assert engine.ctx.resources.active_action is StrategicActionKind.BOAST
    shown = engine.get_display_options()
    assert all(option.boast_mode and option.text.endswith("[Challenge Mode]") for option in shown)
    assert not any(option.boast_mode for option in engine.get_available_options())

    assert engine.select_option("boast-buildup-expert")

    assert engine.ctx.resources.active_action is None
    assert engine.ctx.resources.action_history[-1].successful is True
    assert engine.ctx.resources.momentum == 3
    assert engine.ctx.knowledge.is_discovered("depth-dose")


def test_failed_boast_resets_momentum():
    engine = _engine()
    engine.start_dialogue("kapoor-calibration")
    engine.select_option("humble-intro")
    engine.ctx.resources.update_momentum(3, "test")
    asyncio.run(engine.use_strategic_action("boast"))

    engine.select_option("boast-buildup-wrong")

    assert engine.ctx.resources.momentum == 0
    assert engine.ctx.resources.action_history[-1].successful is False
    assert engine.session.current_stage_id == "correction-factors"


def test_reframe_command_pays_and_decorates_options():
    engine = _engine(starting_insight=60)
    engine.start_dialogue("kapoor-calibration")
    engine.select_option("humble-intro")
    engine.ctx.resources.update_momentum(2, "test")

    result = engine.handle_command("!reframe")

    assert result.ok
    assert "1. The dose builds up below the surface until electronic equilibrium is reached. [Reframed]" in result.message
    assert engine.ctx.resources.insight == 60 + 5 - 50
    assert [option.id for option in engine.get_available_options()] == ["correct-buildup", "partial-buildup"]

    assert engine.handle_command("1").ok
    assert engine.ctx.resources.active_action is None
    assert engine.session.current_stage_id == "correction-factors"


def test_unaffordable_action_is_refused():
    engine = _engine()
    engine.handle_command("!start kapoor-calibration")

    result = engine.handle_command("!synthesis")

    assert not result.ok
    assert result.message == "synthesis failed: unavailable"
    assert engine.ctx.store.get_action_history("player") == []


def test_failed_dispatch_refunds_the_cost():
    async def exploding(ctx, action):
        raise RuntimeError("boom")

    engine = _engine(starting_insight=40)
    engine.resolver.register(StrategicActionKind.EXTRAPOLATE, exploding)
    engine.start_dialogue("kapoor-calibration")

    result = asyncio.run(engine.use_strategic_action(StrategicActionKind.EXTRAPOLATE))

    assert result.reason == "handler_failed"
    assert engine.ctx.resources.insight == 40
    assert engine.ctx.resources.active_action is None
    assert engine.session.current_stage_id == "intro"


def test_unknown_inputs():
    engine = _engine()
    assert not engine.handle_command("!dance").ok
    assert not engine.handle_command("3").ok
    assert not engine.handle_command("!start nothing-here").ok
    assert not engine.handle_command("!end").ok
    assert "kapoor-calibration" in engine.handle_command("!dialogues").message
    assert engine.handle_command("!help").message.startswith("Commands:")


def test_console_runs_until_quit():
    engine = _engine()
    printed = []
    lines = ["!help", "", "!start jesse-equipment", "2", "1", "1", "!quit", "!start kapoor-calibration"]

    handled = run_console(engine, engine.ctx.settings, lines=lines, output=printed.append)

    assert handled == 5
    assert not engine.session.is_active
    assert any("Anytime." in message for message in printed)
    assert engine.ctx.resources.momentum == 2


def test_console_echoes_notifications_in_dev_mode():
    engine = _engine(dev_mode=True)
    printed = []

    run_console(engine, engine.ctx.settings, lines=["!start jesse-equipment", "1"], output=printed.append)

    assert any(message.startswith("  * MENTOR_RELATIONSHIP_CHANGED") for message in printed)
    engine.ctx.graphs.update_mentor_relationship("jesse", 1)
    assert sum("MENTOR_RELATIONSHIP_CHANGED" in message for message in printed) == 1
