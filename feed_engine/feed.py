"""Feed composition: filter active postings, rank them, annotate engagement."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from pydantic import BaseModel, Field

from .log import get_logger
from .models import FeedItem, JobPosting, RankedPosting
from .ranking import rank_postings
from .utils import utc_now

log = get_logger(__name__)


class FeedFilters(BaseModel):
    """Viewer-selected filters. Empty lists and None mean "no constraint"."""

    query: Optional[str] = None
    city_id: Optional[int] = None
    locations: List[int] = Field(default_factory=list, description="Accepted city ids.")
    salary_ranges: List[str] = Field(default_factory=list)
    sectors: List[int] = Field(default_factory=list)
    pinned_post_id: Optional[str] = Field(
        default=None, description="A post opened by link; always kept when present."
    )


class Engagement(BaseModel):
    """What the signed-in viewer has already done with postings."""

    liked: Set[str] = Field(default_factory=set)
    saved: Set[str] = Field(default_factory=set)
    applied: Dict[str, Optional[datetime]] = Field(default_factory=dict)


def _matches(p: JobPosting, f: FeedFilters) -> bool:
    if f.pinned_post_id and p.id == f.pinned_post_id:
        return True

    if f.query:
        term = f.query.lower()
        if not any(term in (text or "").lower() for text in (p.title, p.company, p.description)):
            return False

    if f.city_id is not None and p.city_id != f.city_id:
        return False

    if f.locations and (p.city_id or 0) not in f.locations:
        return False

    if f.salary_ranges and not (p.salary and p.salary in f.salary_ranges):
        return False

    if f.sectors and not (p.sector_ids and any(s in f.sectors for s in p.sector_ids)):
        return False

    return True


def filter_postings(postings: Iterable[Any], filters: Optional[FeedFilters] = None) -> List[JobPosting]:
    """Active postings passing every filter, in input order."""
    f = filters or FeedFilters()
    out: List[JobPosting] = []
    for item in postings:
        p = JobPosting.from_record(item)
        if p.status != "active":
            continue
        if _matches(p, f):
            out.append(p)
    return out


def annotate(ranked: Iterable[RankedPosting], engagement: Optional[Engagement] = None) -> List[FeedItem]:
    e = engagement or Engagement()
    items: List[FeedItem] = []
    for r in ranked:
        applied = r.id is not None and r.id in e.applied
        items.append(
            FeedItem.model_validate(
                {
                    **r.model_dump(),
                    "is_liked": r.id in e.liked,
                    "is_saved": r.id in e.saved,
                    "has_applied": applied,
                    "application_date": e.applied.get(r.id) if applied else None,
                }
            )
        )
    return items


def compose_feed(
    postings: Iterable[Any],
    filters: Optional[FeedFilters] = None,
    engagement: Optional[Engagement] = None,
    *,
    now: Optional[datetime] = None,
) -> List[FeedItem]:
    """Build the viewer's feed: filter, rank by importance, annotate.

    Args:
        postings: Store records or `JobPosting` instances.
        filters: Viewer filters; None keeps every active posting.
        engagement: Viewer engagement; None for anonymous viewers.
        now: Evaluation instant; read once from the clock when omitted.

    Returns:
        Feed items, most important first.
    """
    now = now if now is not None else utc_now()
    kept = filter_postings(postings, filters)
    items = annotate(rank_postings(kept, now=now), engagement)
    log.info("Composed feed with %d postings", len(items))
    return items


def salary_options(postings: Iterable[Any]) -> List[str]:
    """Distinct salary labels, first-seen order, for the salary filter.

    Labels are compared exactly, as the salary filter matches them.
    """
    labels = (JobPosting.from_record(p).salary for p in postings)
    return list(dict.fromkeys(label for label in labels if label))
