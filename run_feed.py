"""CLI entry point.

Builds a ranked feed or checks a profile against the onboarding gate, reading
from the configured store (PostgREST when FEED_STORE_URL is set, otherwise the
JSON fixture).

Examples:
    python run_feed.py feed --out feed.json
    python run_feed.py feed --out feed.json --city 42 --query "auxiliar" --user u-1
    python run_feed.py --fixture data/store.json feed --now 2024-05-01T12:00:00Z
    python run_feed.py profile --user u-1

The feed output is a list of dicts (serialized Pydantic models) with a
`city_name` display field added.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from feed_engine.cache import ReferenceCache
from feed_engine.config import Settings
from feed_engine.errors import FeedEngineError
from feed_engine.feed import FeedFilters, compose_feed
from feed_engine.log import get_logger
from feed_engine.models import City, FeedItem
from feed_engine.profile_gate import evaluate
from feed_engine.sources import PostingStore, build_store
from feed_engine.utils import parse_timestamp

log = get_logger("run_feed")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Rank job postings and check onboarding state.")
    p.add_argument("--fixture", type=str, default=None, help="JSON fixture to read instead of the configured store.")
    sub = p.add_subparsers(dest="command", required=True)

    feed = sub.add_parser("feed", help="Write the ranked feed as JSON.")
    feed.add_argument("--out", type=str, default="feed.json", help="Output JSON file path.")
    feed.add_argument("--city", type=int, default=None, help="Only postings in this city id.")
    feed.add_argument("--query", type=str, default=None, help="Search over title, company and description.")
    feed.add_argument("--sector", type=int, action="append", default=[], help="Sector id filter (repeatable).")
    feed.add_argument("--salary", type=str, action="append", default=[], help="Salary label filter (repeatable).")
    feed.add_argument("--user", type=str, default=None, help="Viewer id, for liked/saved/applied flags.")
    feed.add_argument("--now", type=str, default=None, help="Evaluation instant (ISO-8601); defaults to now.")

    profile = sub.add_parser("profile", help="Print the onboarding gate decision for a user.")
    profile.add_argument("--user", type=str, required=True, help="User id.")
    return p.parse_args(argv)


def _store(args: argparse.Namespace) -> PostingStore:
    settings = Settings.from_env()
    if args.fixture:
        settings.store_url = ""
        settings.fixture_path = Path(args.fixture).expanduser().resolve()
    return build_store(settings)


def _with_city_names(items: List[FeedItem], cities: ReferenceCache) -> List[Dict[str, Any]]:
    data = []
    for item in items:
        row = item.model_dump(mode="json", exclude={"raw"})
        city = cities.get(item.city_id) if item.city_id is not None else None
        row["city_name"] = city.display_name() if city else None
        data.append(row)
    return data


def run_feed(args: argparse.Namespace, store: PostingStore) -> int:
    now = parse_timestamp(args.now) if args.now else None
    postings = store.fetch_postings(city_id=args.city)
    engagement = store.fetch_engagement(args.user) if args.user else None
    filters = FeedFilters(query=args.query, sectors=args.sector, salary_ranges=args.salary)

    items = compose_feed(postings, filters, engagement, now=now)

    def load_city(city_id: int) -> Optional[City]:
        row = store.fetch_city(city_id)
        return City.from_record(row) if row else None

    cities: ReferenceCache = ReferenceCache(load_city)
    data = _with_city_names(items, cities)

    out_path = Path(args.out).expanduser().resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    print(f"Wrote {len(data)} postings to: {out_path}")
    return 0


def run_profile(args: argparse.Namespace, store: PostingStore) -> int:
    decision = evaluate(store.fetch_profile(args.user))
    print(decision.model_dump_json(indent=2))
    return 0 if decision.complete else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        store = _store(args)
        if args.command == "feed":
            return run_feed(args, store)
        return run_profile(args, store)
    except FeedEngineError as exc:
        log.error("%s", exc)
        return 2


if __name__ == "__main__":
    sys.exit(main())
