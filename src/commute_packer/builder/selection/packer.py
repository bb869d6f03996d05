"""
Module: builder.selection.packer

Purpose:
    Pack building algorithm. Selects a duplicate-free, deterministically
    ordered subset of candidate videos that fills a time window as far as
    possible without exceeding its ceiling.

Key Functions:
    - build_pack(): Legacy contract (caller window, optional level)
    - build_pack_v2(): Modern contract (target ±60s, required level)

Algorithm (shared by both contracts):
    1. Filter candidates by topic, level policy, blocked sources, excluded ids
    2. Sort by (duration_sec, id) ascending
    3. De-duplicate by id, keeping the first in sorted order
    4. Greedy pass over the whole list: accept if it fits under the ceiling,
       otherwise skip and keep going
    5. Return PackResult; under_filled is calculated from the window

Dependencies:
    - commute_packer.core.models: Candidate, FillWindow, PackResult
    - builder.selection.config: LegacyPackRequest, PackRequest

Used By:
    - builder.controller: Pack assembly
    - commute_packer.cli
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List

from commute_packer.core.models import Candidate, FillWindow, Level, PackResult

from .config import LegacyPackRequest, PackRequest

logger = logging.getLogger(__name__)

CandidatePredicate = Callable[[Candidate], bool]


def build_pack(candidates: Iterable[Candidate], request: LegacyPackRequest) -> PackResult:
    """
    Build a pack under the legacy contract.

    Level is optional: when the request names one, candidates at that level
    and candidates with no level are eligible.

    Args:
        candidates: Candidate pool, in any order, possibly with repeats
        request: Legacy request with caller-supplied [min, max]

    Returns:
        PackResult; empty and under-filled when nothing is eligible

    Invariants:
        - result.total_duration_sec <= request.max_duration_sec
        - No duplicate ids in result.items
        - Identical output for any ordering of the same pool

    Example:
        >>> req = LegacyPackRequest(topic="python", min_duration_sec=850, max_duration_sec=950)
        >>> build_pack(pool, req).total_duration_sec
        900
    """
    accept = _eligibility(
        topic=request.normalized_topic,
        level_ok=_lenient_level(request.level),
        excluded_ids=request.excluded_ids,
        blocked_source_ids=request.blocked_source_ids,
    )
    return _greedy_pack(candidates, accept, request.window, contract="legacy")


def build_pack_v2(candidates: Iterable[Candidate], request: PackRequest) -> PackResult:
    """
    Build a pack under the modern contract.

    Level must match exactly. Candidates of any other level, or with no
    level, are never eligible even when nothing else is available.

    Args:
        candidates: Candidate pool, in any order, possibly with repeats
        request: Request with required level and target_seconds

    Returns:
        PackResult against the window [target - 60, target + 60]

    Example:
        >>> req = PackRequest(topic="python", level=Level.BEGINNER, target_seconds=600)
        >>> build_pack_v2(pool, req).window
        FillWindow(540-660s)
    """
    level = request.level
    accept = _eligibility(
        topic=request.normalized_topic,
        level_ok=lambda c: c.level is level,
        excluded_ids=request.excluded_ids,
        blocked_source_ids=request.blocked_source_ids,
    )
    return _greedy_pack(candidates, accept, request.window, contract="v2")


# ─────────────────────────────────────────────────────────────────────────────
# Filtering
# ─────────────────────────────────────────────────────────────────────────────

def _lenient_level(level: Level | None) -> CandidatePredicate:
    """Level policy for the legacy contract."""
    if level is None:
        return lambda c: True
    return lambda c: c.level is None or c.level is level


def _eligibility(
    *,
    topic: str,
    level_ok: CandidatePredicate,
    excluded_ids: frozenset[str],
    blocked_source_ids: frozenset[str],
) -> CandidatePredicate:
    """Combine topic, level and exclusion rules into one predicate."""

    def accept(candidate: Candidate) -> bool:
        if topic not in candidate.topic_tags:
            return False
        if candidate.id in excluded_ids:
            return False
        if candidate.source_id is not None and candidate.source_id in blocked_source_ids:
            return False
        return level_ok(candidate)

    return accept


# ─────────────────────────────────────────────────────────────────────────────
# Greedy Accept
# ─────────────────────────────────────────────────────────────────────────────

def _sort_key(candidate: Candidate) -> tuple[int, str]:
    return (candidate.duration_sec, candidate.id)


def _greedy_pack(
    candidates: Iterable[Candidate],
    accept: CandidatePredicate,
    window: FillWindow,
    *,
    contract: str,
) -> PackResult:
    """
    Filter, sort and greedily fill toward the window ceiling.

    Shorter videos go first so the ceiling is approached in small steps.
    An item that would overshoot is skipped, not a stopping point; the pass
    always runs to the end of the list.

    Args:
        candidates: Raw candidate pool
        accept: Eligibility predicate for this contract
        window: Acceptance window
        contract: Name used in log messages

    Returns:
        PackResult for the window
    """
    pool = list(candidates)
    eligible = sorted((c for c in pool if accept(c)), key=_sort_key)

    logger.debug(f"[{contract}] Filtered to {len(eligible)}/{len(pool)} candidates")

    if not eligible:
        logger.debug(f"[{contract}] No eligible candidates for window {window!r}")
        return PackResult.empty(window)

    selected: List[Candidate] = []
    seen_ids: set[str] = set()
    total = 0

    for candidate in eligible:
        if candidate.id in seen_ids:
            continue
        seen_ids.add(candidate.id)

        if total + candidate.duration_sec > window.max_duration_sec:
            continue

        selected.append(candidate)
        total += candidate.duration_sec
        logger.debug(
            f"[{contract}] Accepted {candidate.id}: {candidate.duration_sec}s "
            f"(total: {total}s)"
        )

    result = PackResult(items=tuple(selected), window=window)

    if result.under_filled:
        logger.debug(
            f"[{contract}] Under-filled: {result.total_duration_sec}s of "
            f"{window.min_duration_sec}s minimum"
        )
    return result
