"""
Module: builder.selection.top_up

Purpose:
    Fill the remaining seconds of a commute that is already under way.
    Runs several greedy orderings against a slightly overbooked cap and
    keeps the one that fills the most time.

Key Functions:
    - fill_remaining(): Main entry point

Algorithm:
    1. Filter by optional topic and excluded ids, de-duplicate by id
    2. Greedy fill under remaining * (1 + overbook_pct) for each strategy:
       longest-first, shortest-first, source-aware, recency-first
    3. Pick best by total duration, then distinct sources, then recency

Dependencies:
    - commute_packer.core.models: Candidate, TopUpResult

Used By:
    - commute_packer.cli: top-up command
"""

from __future__ import annotations

import logging
from datetime import timezone
from typing import Callable, Iterable, List, Optional, Sequence

from commute_packer.core.models import Candidate, TopUpResult, normalize_topic

logger = logging.getLogger(__name__)

DEFAULT_OVERBOOK_PCT = 0.03

SortKey = Callable[[Candidate], tuple]


def _timestamp(candidate: Candidate) -> float:
    """Publication time as epoch seconds; undated videos sort as oldest."""
    if candidate.published_at is None:
        return 0.0
    published = candidate.published_at
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)
    return published.timestamp()


# Each key sorts ascending; id is the final tie-break in every ordering.
STRATEGIES: tuple[tuple[str, SortKey], ...] = (
    ("longest-first", lambda c: (-c.duration_sec, c.id)),
    ("shortest-first", lambda c: (c.duration_sec, c.id)),
    ("source-aware", lambda c: (c.source_id is None, -c.duration_sec, c.id)),
    ("recency-first", lambda c: (-_timestamp(c), -c.duration_sec, c.id)),
)


def fill_remaining(
    candidates: Iterable[Candidate],
    remaining_seconds: int,
    *,
    excluded_ids: Iterable[str] = (),
    topic: Optional[str] = None,
    overbook_pct: float = DEFAULT_OVERBOOK_PCT,
) -> TopUpResult:
    """
    Select videos for the time left in a commute.

    Args:
        candidates: Candidate pool, possibly with repeats
        remaining_seconds: Seconds still to fill
        excluded_ids: Ids never to select (already queued or watched)
        topic: Optional topic tag filter (case-insensitive)
        overbook_pct: Allowed overshoot as a fraction of remaining_seconds

    Returns:
        TopUpResult; strategy is "empty" for nothing to fill and
        "no-matches" when filters leave no candidates

    Raises:
        ValueError: If overbook_pct is negative

    Invariants:
        - result.total_duration_sec <= remaining_seconds * (1 + overbook_pct)
        - No duplicate ids in result.items

    Example:
        >>> fill_remaining(pool, 900).total_duration_sec <= 927
        True
    """
    if overbook_pct < 0:
        raise ValueError(f"overbook_pct must be non-negative: {overbook_pct}")

    pool = list(candidates)
    if remaining_seconds <= 0 or not pool:
        return TopUpResult(items=(), strategy="empty")

    cap = remaining_seconds * (1 + overbook_pct)
    filtered = _filter_pool(pool, excluded_ids=set(excluded_ids), topic=topic)

    if not filtered:
        logger.debug("Top-up: no candidates left after filtering")
        return TopUpResult(items=(), strategy="no-matches")

    results = [
        _greedy_fill(sorted(filtered, key=key), cap, name)
        for name, key in STRATEGIES
    ]
    best = _select_best(results)

    logger.debug(
        f"Top-up: {best.strategy} filled {best.total_duration_sec}s "
        f"of {remaining_seconds}s (cap {cap:.0f}s)"
    )
    return best


def _filter_pool(
    pool: Sequence[Candidate],
    *,
    excluded_ids: set[str],
    topic: Optional[str],
) -> List[Candidate]:
    """Apply topic and exclusion filters, keep first occurrence of each id."""
    wanted = normalize_topic(topic) if topic else None
    seen: set[str] = set()
    filtered = []
    for candidate in pool:
        if wanted is not None and wanted not in candidate.topic_tags:
            continue
        if candidate.id in excluded_ids or candidate.id in seen:
            continue
        seen.add(candidate.id)
        filtered.append(candidate)
    return filtered


def _greedy_fill(ordered: Sequence[Candidate], cap: float, strategy: str) -> TopUpResult:
    """Take every video that still fits under cap, in the given order."""
    items = []
    total = 0
    for candidate in ordered:
        if total + candidate.duration_sec <= cap:
            items.append(candidate)
            total += candidate.duration_sec
    return TopUpResult(items=tuple(items), strategy=strategy)


def _distinct_sources(result: TopUpResult) -> int:
    return len({c.source_id for c in result.items if c.source_id})


def _mean_recency(result: TopUpResult) -> float:
    stamps = [_timestamp(c) for c in result.items if c.published_at is not None]
    return sum(stamps) / len(stamps) if stamps else 0.0


def _select_best(results: Sequence[TopUpResult]) -> TopUpResult:
    """
    Pick the best strategy result.

    Ranking: total duration, then distinct sources, then mean recency.
    max() returns the first maximal element, so STRATEGIES order breaks
    any remaining tie.
    """
    return max(
        results,
        key=lambda r: (r.total_duration_sec, _distinct_sources(r), _mean_recency(r)),
    )
