"""Store connectors."""

from __future__ import annotations

from typing import Optional

from ..config import Settings
from ..errors import StoreError
from .base import PostingStore
from .fixture import FileStore
from .postgrest import PostgrestStore


def build_store(settings: Optional[Settings] = None) -> PostingStore:
    """PostgREST when a store URL is configured, otherwise the JSON fixture."""
    s = settings or Settings.from_env()
    if s.store_url:
        return PostgrestStore(
            s.store_url,
            s.store_key,
            timeout_s=s.timeout_s,
            max_retries=s.max_retries,
            backoff_s=s.backoff_s,
        )
    if s.fixture_path is None:
        raise StoreError("no store configured: set FEED_STORE_URL or FEED_FIXTURE_PATH")
    return FileStore(s.fixture_path)


__all__ = ["PostingStore", "PostgrestStore", "FileStore", "build_store"]
