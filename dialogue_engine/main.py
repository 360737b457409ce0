from __future__ import annotations

import logging

from dialogue_engine.config import Settings, configure_logging
from dialogue_engine.console import run_console
from dialogue_engine.content.registry import ContentRegistry
from dialogue_engine.db.store import Store
from dialogue_engine.engine.context import build_context
from dialogue_engine.engine.dialogue_engine import DialogueEngine


def build_engine(settings: Settings) -> DialogueEngine:
    store = Store(settings.db_path)
    ctx = build_context(settings, store=store)
    engine = DialogueEngine(ctx, ContentRegistry.from_directory(settings.content_dir))
    engine.load_content()
    return engine


def main() -> None:
    settings = Settings()
    configure_logging(settings.dev_mode)
    logging.getLogger(__name__).info("app_start %s", settings.redacted())
    engine = build_engine(settings)
    run_console(engine, settings)


if __name__ == "__main__":
    main()
