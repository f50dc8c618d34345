"""JSON fixture store.

Reads a snapshot exported from the backend, one list per table:

    {"job_posts": [...], "profiles": [...], "post_likes": [...],
     "saved_jobs": [...], "job_applications": [...], "cities": [...]}

Missing tables are treated as empty. Useful offline and in tests.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import StoreError
from ..feed import Engagement
from ..log import get_logger
from ..utils import parse_timestamp
from .base import PostingStore

log = get_logger(__name__)


class FileStore(PostingStore):
    name = "file"

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._tables: Optional[Dict[str, List[Dict[str, Any]]]] = None

    def _table(self, name: str) -> List[Dict[str, Any]]:
        if self._tables is None:
            try:
                data = json.loads(self._path.read_text(encoding="utf-8"))
            except OSError as exc:
                raise StoreError(f"cannot read fixture {self._path}: {exc}") from exc
            except ValueError as exc:
                raise StoreError(f"fixture {self._path} is not valid JSON: {exc}") from exc
            if not isinstance(data, dict):
                raise StoreError(f"fixture {self._path} must be a JSON object of tables")
            self._tables = data
            log.info("Loaded fixture %s", self._path)
        return list(self._tables.get(name) or [])

    def fetch_postings(self, city_id: Optional[int] = None) -> List[Dict[str, Any]]:
        rows = [r for r in self._table("job_posts") if (r.get("status") or "active") == "active"]
        if city_id is not None:
            rows = [r for r in rows if r.get("city_id") == city_id]
        # newest first, like the backend query
        rows.sort(key=lambda r: str(r.get("created_at") or ""), reverse=True)
        return rows

    def fetch_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        for row in self._table("profiles"):
            if str(row.get("id")) == str(user_id):
                return row
        return None

    def fetch_engagement(self, user_id: str) -> Engagement:
        def owned(table: str) -> List[Dict[str, Any]]:
            return [r for r in self._table(table) if str(r.get("user_id")) == str(user_id)]

        applied: Dict[str, Any] = {}
        for row in owned("job_applications"):
            job_id = row.get("job_id")
            if job_id:
                created = row.get("created_at")
                applied[str(job_id)] = parse_timestamp(created, job_id) if created else None

        return Engagement(
            liked={str(r["post_id"]) for r in owned("post_likes") if r.get("post_id")},
            saved={str(r["post_id"]) for r in owned("saved_jobs") if r.get("post_id")},
            applied=applied,
        )

    def fetch_city(self, city_id: int) -> Optional[Dict[str, Any]]:
        for row in self._table("cities"):
            if row.get("id") == city_id:
                return row
        return None
