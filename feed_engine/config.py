"""Environment configuration for the store connectors and CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_FIXTURE_PATH: Path = Path(__file__).resolve().parent.parent / "data" / "store.json"


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _float_env(key: str, default: float) -> float:
    raw = get_env(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}") from None


@dataclass
class Settings:
    store_url: str = ""
    store_key: str = ""
    timeout_s: float = 20.0
    max_retries: int = 3
    backoff_s: float = 2.0
    fixture_path: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        fixture = get_env("FEED_FIXTURE_PATH")
        return cls(
            store_url=get_env("FEED_STORE_URL").rstrip("/"),
            store_key=get_env("FEED_STORE_KEY"),
            timeout_s=_float_env("FEED_STORE_TIMEOUT", 20.0),
            max_retries=int(_float_env("FEED_STORE_MAX_RETRIES", 3)),
            backoff_s=_float_env("FEED_STORE_BACKOFF", 2.0),
            fixture_path=Path(fixture).expanduser() if fixture else DEFAULT_FIXTURE_PATH,
        )
