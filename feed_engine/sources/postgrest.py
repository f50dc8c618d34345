"""PostgREST store connector.

Reads the managed backend's REST interface (`/rest/v1/<table>`) with the
project API key. Filters use PostgREST syntax, e.g. `status=eq.active` and
`order=created_at.desc`. Rate limiting (HTTP 429) is retried with exponential
backoff; any other HTTP failure is raised as `StoreError`.
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

import httpx

from ..errors import StoreError
from ..feed import Engagement
from ..log import get_logger
from ..utils import parse_timestamp
from .base import PostingStore

log = get_logger(__name__)


class PostgrestStore(PostingStore):
    """Fetch postings, profiles and engagement from a PostgREST endpoint."""

    name = "postgrest"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_s: float = 20.0,
        max_retries: int = 3,
        backoff_s: float = 2.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        self._timeout = timeout_s
        self._max_retries = max_retries
        self._backoff_s = backoff_s
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self._timeout,
            headers=self._headers,
            follow_redirects=True,
            transport=self._transport,
        )

    def _select(self, table: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        url = f"{self._rest_url}/{table}"
        retries = 0
        try:
            with self._client() as client:
                while True:
                    try:
                        resp = client.get(url, params=params)
                        resp.raise_for_status()
                        break
                    except httpx.HTTPStatusError as exc:
                        if exc.response.status_code == 429 and retries < self._max_retries:
                            sleep_s = self._backoff_s * (2**retries)
                            log.warning("%s rate limited, retrying in %.1fs", table, sleep_s)
                            time.sleep(sleep_s)
                            retries += 1
                            continue
                        raise
                payload = resp.json()
        except httpx.HTTPError as exc:
            raise StoreError(f"reading {table} failed: {exc}") from exc
        except ValueError as exc:
            raise StoreError(f"{table} returned invalid JSON: {exc}") from exc

        if not isinstance(payload, list):
            raise StoreError(f"{table} returned {type(payload).__name__}, expected a list")
        log.info("Fetched %d rows from %s", len(payload), table)
        return payload

    def fetch_postings(self, city_id: Optional[int] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {
            "select": "*",
            "status": "eq.active",
            "order": "created_at.desc",
        }
        if city_id is not None:
            params["city_id"] = f"eq.{city_id}"
        return self._select("job_posts", params)

    def fetch_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        rows = self._select("profiles", {"select": "*", "id": f"eq.{user_id}", "limit": 1})
        return rows[0] if rows else None

    def fetch_engagement(self, user_id: str) -> Engagement:
        owner = {"user_id": f"eq.{user_id}"}
        likes = self._select("post_likes", {"select": "post_id", **owner})
        saved = self._select("saved_jobs", {"select": "post_id", **owner})
        applications = self._select("job_applications", {"select": "job_id,created_at", **owner})

        applied: Dict[str, Any] = {}
        for row in applications:
            job_id = row.get("job_id")
            if not job_id:
                continue
            created = row.get("created_at")
            applied[str(job_id)] = parse_timestamp(created, job_id) if created else None

        return Engagement(
            liked={str(r["post_id"]) for r in likes if r.get("post_id")},
            saved={str(r["post_id"]) for r in saved if r.get("post_id")},
            applied=applied,
        )

    def fetch_city(self, city_id: int) -> Optional[Dict[str, Any]]:
        rows = self._select("cities", {"select": "*", "id": f"eq.{city_id}", "limit": 1})
        return rows[0] if rows else None
