"""
Module: builder.selection.config

Purpose:
    Request dataclasses for the two pack-building contracts.
    Immutable configuration with validation on construction.

Key Classes:
    - LegacyPackRequest: Caller-supplied [min, max] window, optional level
    - PackRequest: Target seconds with a fixed ±60s band, required level

Dependencies:
    - dataclasses (std)
    - commute_packer.core.models: Level, FillWindow

Used By:
    - builder.selection.packer: build_pack / build_pack_v2
    - builder.controller: Pack assembly
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from commute_packer.core.models import FillWindow, Level, normalize_topic

# Half-width of the band around targetSeconds for the modern contract
WINDOW_TOLERANCE_SEC = 60


def _as_frozenset(values: Optional[Iterable[str]]) -> frozenset[str]:
    if values is None:
        return frozenset()
    if isinstance(values, str):
        return frozenset((values,))
    return frozenset(values)


def _validate_topic(topic: str) -> None:
    if not isinstance(topic, str) or not topic.strip():
        raise ValueError(f"topic must be a non-empty string: {topic!r}")


@dataclass(frozen=True)
class LegacyPackRequest:
    """
    Request for the lenient pack contract (immutable).

    Kept for older callers: the window is supplied directly and the level
    filter is optional. Candidates without a level match any requested level.

    Attributes:
        topic: Topic tag to match (case-insensitive, exact)
        min_duration_sec: Total below this is reported as under-filled
        max_duration_sec: Ceiling that the pack never exceeds
        level: Optional exact level filter
        excluded_ids: Candidate ids never to select (e.g. already watched)
        blocked_source_ids: Publisher ids to exclude entirely
        seed: Recorded for reproducibility; ordering is fully determined
            by (duration, id) so it does not change the result

    Invariants:
        - 0 <= min_duration_sec <= max_duration_sec
        - max_duration_sec > 0

    Example:
        >>> req = LegacyPackRequest(topic="python", min_duration_sec=850, max_duration_sec=950)
        >>> req.window
        FillWindow(850-950s)
    """

    topic: str
    min_duration_sec: int
    max_duration_sec: int
    level: Optional[Level] = None
    excluded_ids: frozenset[str] = frozenset()
    blocked_source_ids: frozenset[str] = frozenset()
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate and normalize request on construction."""
        _validate_topic(self.topic)
        if self.min_duration_sec < 0:
            raise ValueError(f"min_duration_sec must be non-negative: {self.min_duration_sec}")
        if self.max_duration_sec <= 0:
            raise ValueError(f"max_duration_sec must be positive: {self.max_duration_sec}")
        if self.min_duration_sec > self.max_duration_sec:
            raise ValueError(
                f"min_duration_sec ({self.min_duration_sec}) must be <= "
                f"max_duration_sec ({self.max_duration_sec})"
            )
        if self.level is not None:
            object.__setattr__(self, "level", Level.parse(self.level))
        object.__setattr__(self, "excluded_ids", _as_frozenset(self.excluded_ids))
        object.__setattr__(self, "blocked_source_ids", _as_frozenset(self.blocked_source_ids))

    @property
    def normalized_topic(self) -> str:
        return normalize_topic(self.topic)

    @property
    def window(self) -> FillWindow:
        """Acceptance window exactly as supplied."""
        return FillWindow(self.min_duration_sec, self.max_duration_sec)


@dataclass(frozen=True)
class PackRequest:
    """
    Request for the strict pack contract (immutable).

    The level is mandatory and matched exactly; the window is a fixed
    band of WINDOW_TOLERANCE_SEC either side of target_seconds.

    Attributes:
        topic: Topic tag to match (case-insensitive, exact)
        level: Required difficulty level
        target_seconds: Commute length the pack is centered on
        excluded_ids: Candidate ids never to select
        blocked_source_ids: Publisher ids to exclude entirely
        seed: Recorded for reproducibility; does not change ordering

    Invariants:
        - target_seconds > 0
        - level is a Level

    Example:
        >>> req = PackRequest(topic="python", level=Level.BEGINNER, target_seconds=600)
        >>> req.window
        FillWindow(540-660s)
    """

    topic: str
    level: Level
    target_seconds: int
    excluded_ids: frozenset[str] = frozenset()
    blocked_source_ids: frozenset[str] = frozenset()
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate and normalize request on construction."""
        _validate_topic(self.topic)
        if self.level is None:
            raise ValueError("level is required")
        object.__setattr__(self, "level", Level.parse(self.level))
        if self.target_seconds <= 0:
            raise ValueError(f"target_seconds must be positive: {self.target_seconds}")
        object.__setattr__(self, "excluded_ids", _as_frozenset(self.excluded_ids))
        object.__setattr__(self, "blocked_source_ids", _as_frozenset(self.blocked_source_ids))

    @property
    def normalized_topic(self) -> str:
        return normalize_topic(self.topic)

    @property
    def min_duration_sec(self) -> int:
        # Clamped: a target shorter than the band has no meaningful floor
        return max(0, self.target_seconds - WINDOW_TOLERANCE_SEC)

    @property
    def max_duration_sec(self) -> int:
        return self.target_seconds + WINDOW_TOLERANCE_SEC

    @property
    def window(self) -> FillWindow:
        """Acceptance window target ± WINDOW_TOLERANCE_SEC."""
        return FillWindow(self.min_duration_sec, self.max_duration_sec)
