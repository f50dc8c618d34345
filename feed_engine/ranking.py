"""Feed ranking.

Importance balances engagement against freshness:

    likes / (hours_since_post + 2) ** 1.3

boosted for very fresh posts (x3 under one hour, x2 under three, x1.5 under
six). Premium postings get the largest finite float and therefore always sort
first. The evaluation instant `now` is an explicit argument everywhere so the
score is a pure function of its inputs.
"""

from __future__ import annotations

import math
import sys
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple, TypeVar

from .errors import InvalidInputError
from .log import get_logger
from .models import JobPosting, RankedPosting
from .utils import parse_timestamp, premium_flag, utc_now

log = get_logger(__name__)

T = TypeVar("T")

DECAY_EXPONENT = 1.3
AGE_OFFSET_HOURS = 2.0
PREMIUM_SCORE = sys.float_info.max
REGULAR_SCORE_CEILING = math.nextafter(PREMIUM_SCORE, 0.0)

# (upper bound in hours, multiplier); first match wins
FRESHNESS_TIERS: List[Tuple[float, float]] = [
    (1.0, 3.0),
    (3.0, 2.0),
    (6.0, 1.5),
]


def freshness_multiplier(hours_since_post: float) -> float:
    for bound, multiplier in FRESHNESS_TIERS:
        if hours_since_post < bound:
            return multiplier
    return 1.0


def compute_importance(
    likes_count: int,
    created_at: Any,
    is_premium: bool = False,
    *,
    now: datetime,
) -> float:
    """Score a single posting.

    Args:
        likes_count: Non-negative engagement count.
        created_at: Publication instant, as a datetime or ISO-8601 string.
        is_premium: Premium flag; `True` and `1` mean the same thing.
        now: Evaluation instant.

    Returns:
        A non-negative float; `PREMIUM_SCORE` for premium postings.

    Raises:
        InvalidInputError: negative, non-integer or unrepresentably large likes,
            a premium flag other than a boolean or 0/1, or an unparseable
            timestamp.
    """
    if isinstance(likes_count, bool) or not isinstance(likes_count, int):
        raise InvalidInputError(f"likes_count must be an integer, got {likes_count!r}")
    if likes_count < 0:
        raise InvalidInputError(f"likes_count must be non-negative, got {likes_count}")
    try:
        likes = float(likes_count)
    except OverflowError:
        raise InvalidInputError(f"likes_count is too large to score: {likes_count}") from None
    posted = parse_timestamp(created_at)

    if premium_flag(is_premium):
        return PREMIUM_SCORE

    evaluated = parse_timestamp(now)
    hours_since_post = max(0.0, (evaluated - posted).total_seconds() / 3600.0)

    importance = likes / (hours_since_post + AGE_OFFSET_HOURS) ** DECAY_EXPONENT
    # Huge counts can overflow to inf; regular postings stay below premium.
    return min(importance * freshness_multiplier(hours_since_post), REGULAR_SCORE_CEILING)


def posting_importance(posting: Any, *, now: datetime) -> float:
    """Score a store record (mapping or `JobPosting`)."""
    p = JobPosting.from_record(posting)
    return compute_importance(p.likes_count, p.created_at, p.is_premium, now=now)


def _scored(postings: Iterable[T], now: datetime) -> List[Tuple[float, T, JobPosting]]:
    # Validate everything before ordering anything: one bad record fails the call.
    scored: List[Tuple[float, T, JobPosting]] = []
    for item in postings:
        p = JobPosting.from_record(item)
        score = compute_importance(p.likes_count, p.created_at, p.is_premium, now=now)
        scored.append((score, item, p))
    # sorted() is stable, so equal scores keep their input order.
    return sorted(scored, key=lambda s: s[0], reverse=True)


def sort_by_importance(postings: Sequence[T], *, now: Optional[datetime] = None) -> List[T]:
    """Return a new list with the same elements, most important first.

    The input is never mutated. Ties (including every premium posting) keep
    their relative input order.
    """
    now = now if now is not None else utc_now()
    ordered = [item for _, item, _ in _scored(postings, now)]
    log.debug("Sorted %d postings by importance", len(ordered))
    return ordered


def rank_postings(postings: Sequence[Any], *, now: Optional[datetime] = None) -> List[RankedPosting]:
    """Like `sort_by_importance`, but return validated postings carrying their score."""
    now = now if now is not None else utc_now()
    ranked = [
        RankedPosting.model_validate({**p.model_dump(), "importance_score": score})
        for score, _, p in _scored(postings, now)
    ]
    log.debug("Ranked %d postings", len(ranked))
    return ranked
