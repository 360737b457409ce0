from __future__ import annotations

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from dialogue_engine.config import Settings
from dialogue_engine.content.validation import validate_graph
from dialogue_engine.main import build_engine


def run() -> None:
    engine = build_engine(Settings(db_path=":memory:", starting_insight=100))
    for graph in engine.ctx.graphs.graphs.values():
        issues = validate_graph(graph)
        assert not issues, issues

    assert engine.handle_command("!start kapoor-calibration").ok
    assert engine.handle_command("1").ok
    assert engine.handle_command("!extrapolate").ok
    assert engine.handle_command("1").ok
    result = asyncio.run(engine.apply_strategic_action("reframe", "kapoor", engine.session.current_stage_id))
    assert result
    while engine.session.is_active:
        options = engine.get_available_options()
        if options:
            assert engine.select_option(options[0].id)
        else:
            assert engine.advance()
    assert engine.session.conclusion_grade() is not None
    assert engine.ctx.store.count_events("player", "DIALOGUE_ENDED") == 1
    print("smoke_test_passed")


if __name__ == "__main__":
    run()
