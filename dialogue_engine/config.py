from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    db_path: str = os.getenv("DB_PATH", ":memory:")
    dev_mode: bool = os.getenv("DEV_MODE", "0") == "1"
    player_id: str = os.getenv("PLAYER_ID", "player")
    max_momentum_level: int = _env_int("MAX_MOMENTUM_LEVEL", 3)
    starting_insight: int = _env_int("STARTING_INSIGHT", 0)
    content_dir: str | None = os.getenv("CONTENT_DIR")

    def redacted(self) -> dict[str, object]:
        return {
            "db_path": self.db_path,
            "dev_mode": self.dev_mode,
            "player_id": self.player_id,
            "max_momentum_level": self.max_momentum_level,
            "starting_insight": self.starting_insight,
            "content_dir": self.content_dir or "<bundled>",
        }


def configure_logging(dev_mode: bool) -> None:
    level = logging.DEBUG if dev_mode else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
