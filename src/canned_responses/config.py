"""Settings read from the environment (and a local .env file)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_STORE_PATH = Path("~/.canned-responses/store.json")
DEFAULT_DEFAULTS_PATH = Path("canned-responses.md")
DEFAULT_LOG_LEVEL = "WARNING"


def _log_level(value: str | None) -> str:
    """Return value as an upper-case logging level name, or the default if unknown."""
    level = (value or DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        return DEFAULT_LOG_LEVEL
    return level


@dataclass
class Settings:
    store_path: Path
    defaults_path: Path
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> Settings:
        load_dotenv(find_dotenv(usecwd=True))

        store = os.getenv("CANNED_RESPONSES_STORE")
        defaults = os.getenv("CANNED_RESPONSES_DEFAULTS")
        return cls(
            store_path=Path(store).expanduser() if store else DEFAULT_STORE_PATH.expanduser(),
            defaults_path=Path(defaults) if defaults else DEFAULT_DEFAULTS_PATH,
            log_level=_log_level(os.getenv("CANNED_RESPONSES_LOG_LEVEL")),
        )
