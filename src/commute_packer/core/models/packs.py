"""
Module: packs

Purpose:
    Provides FillWindow, PackResult and TopUpResult dataclasses - the
    outputs of the pack builder and the top-up selector. Totals and the
    underfill flag are calculated from the selected items, never stored.

Key Functions:
    - FillWindow.contains(total): Check total against [min, max]
    - PackResult.total_duration_sec: Sum of selected durations
    - PackResult.under_filled: total < window minimum
    - PackResult.to_dict(): Export for metadata files and the CLI

Dependencies:
    - dataclasses (std)
    - functools (std)
    - .candidates.Candidate

Used By:
    - builder.selection.packer
    - builder.selection.top_up
    - builder.controller
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Any

from .candidates import Candidate


@dataclass(frozen=True, slots=True)
class FillWindow:
    """
    Acceptance window for a pack, in seconds.

    Attributes:
        min_duration_sec: Total below this is an underfill
        max_duration_sec: Hard ceiling, never exceeded

    Invariants:
        - 0 <= min_duration_sec <= max_duration_sec

    Example:
        >>> w = FillWindow(850, 950)
        >>> w.contains(900)
        True
    """

    min_duration_sec: int
    max_duration_sec: int

    def __post_init__(self) -> None:
        """Validate window on construction."""
        if self.min_duration_sec < 0:
            raise ValueError(f"min_duration_sec must be non-negative: {self.min_duration_sec}")
        if self.max_duration_sec < self.min_duration_sec:
            raise ValueError(
                f"min_duration_sec ({self.min_duration_sec}) must be <= "
                f"max_duration_sec ({self.max_duration_sec})"
            )

    def contains(self, total_sec: int) -> bool:
        """True if total_sec lies within [min, max]."""
        return self.min_duration_sec <= total_sec <= self.max_duration_sec

    def is_underfilled(self, total_sec: int) -> bool:
        """True if total_sec falls short of the minimum."""
        return total_sec < self.min_duration_sec

    def __repr__(self) -> str:
        return f"FillWindow({self.min_duration_sec}-{self.max_duration_sec}s)"


@dataclass(frozen=True)
class PackResult:
    """
    Result of the pack builder.

    Attributes:
        items: Selected candidates, in selection order
        window: Window the pack was built against

    Invariants:
        - No duplicate ids in items
        - total_duration_sec <= window.max_duration_sec
        - under_filled == (total_duration_sec < window.min_duration_sec)

    Example:
        >>> result = PackResult(items=(c1, c2), window=FillWindow(500, 700))
        >>> result.total_duration_sec
        600
        >>> result.under_filled
        False
    """

    items: tuple[Candidate, ...]
    window: FillWindow

    def __post_init__(self) -> None:
        """Validate pack on construction."""
        ids = [c.id for c in self.items]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate candidate ids in pack result")
        total = sum(c.duration_sec for c in self.items)
        if total > self.window.max_duration_sec:
            raise ValueError(
                f"Pack total {total}s exceeds window ceiling {self.window.max_duration_sec}s"
            )

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties (NEVER stored)
    # ─────────────────────────────────────────────────────────────────────────

    @cached_property
    def total_duration_sec(self) -> int:
        """Sum of selected item durations."""
        return sum(c.duration_sec for c in self.items)

    @property
    def under_filled(self) -> bool:
        """
        Whether the pack falls short of the window minimum.

        An empty pack is always under-filled unless the minimum is zero.
        """
        return self.window.is_underfilled(self.total_duration_sec)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def item_ids(self) -> tuple[str, ...]:
        return tuple(c.id for c in self.items)

    @property
    def source_ids(self) -> set[str]:
        """Distinct publisher ids in the pack."""
        return {c.source_id for c in self.items if c.source_id}

    @property
    def shortfall_sec(self) -> int:
        """Seconds missing to reach the window minimum (0 when filled)."""
        return max(0, self.window.min_duration_sec - self.total_duration_sec)

    def to_dict(self) -> dict[str, Any]:
        """
        Export for JSON output.

        Returns:
            Dict with items, totals and window bounds
        """
        return {
            "items": [c.to_dict() for c in self.items],
            "total_duration_sec": self.total_duration_sec,
            "under_filled": self.under_filled,
            "min_duration_sec": self.window.min_duration_sec,
            "max_duration_sec": self.window.max_duration_sec,
        }

    @classmethod
    def empty(cls, window: FillWindow) -> PackResult:
        """Pack with no items for the given window."""
        return cls(items=(), window=window)

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return (
            f"PackResult(items={len(self.items)}, "
            f"total={self.total_duration_sec}s, window={self.window!r}, "
            f"under_filled={self.under_filled})"
        )


@dataclass(frozen=True)
class TopUpResult:
    """
    Videos chosen to fill the remaining seconds of a commute.

    Attributes:
        items: Selected candidates, in selection order
        strategy: Name of the greedy ordering that won (or "empty"/"no-matches")
    """

    items: tuple[Candidate, ...]
    strategy: str

    @cached_property
    def total_duration_sec(self) -> int:
        return sum(c.duration_sec for c in self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [c.to_dict() for c in self.items],
            "total_duration_sec": self.total_duration_sec,
            "strategy": self.strategy,
        }
