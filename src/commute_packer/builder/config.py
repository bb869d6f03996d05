"""
Module: builder.config

Purpose:
    Configuration dataclass for pack assembly. Immutable configuration
    with validation on construction.

Key Classes:
    - PackerConfig: Everything the controller needs for one pack
    - PackMode: Which pack contract to use

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - builder.controller: assemble_pack
    - commute_packer.cli
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from commute_packer.core.models import Level


class PackMode(Enum):
    """
    Pack contract selected by the caller.

    Attributes:
        LEGACY: Caller window [min, max], optional level
        V2: target ±60s, required exact level
    """

    LEGACY = "legacy"
    V2 = "v2"


@dataclass(frozen=True)
class PackerConfig:
    """
    Configuration for assembling a pack (immutable).

    Attributes:
        topic: Topic to build the pack for
        mode: Pack contract to use
        min_duration_sec: Window minimum (LEGACY)
        max_duration_sec: Window maximum (LEGACY)
        target_seconds: Commute length (V2)
        level: Difficulty level (required for V2)
        catalog_path: JSONL catalog used when no source is injected
        strict_catalog: Full JSON Schema validation of catalog records
        history_path: Watch history used when no exclusion source is injected
        user_id: Viewer whose watch history is excluded
        excluded_ids: Extra ids never to select
        blocked_source_ids: Publisher ids to exclude
        seed: Recorded in metadata for reproducibility
        output_dir: Where to write pack_metadata.json (None = don't write)

    Example:
        >>> config = PackerConfig(
        ...     topic="python",
        ...     mode=PackMode.V2,
        ...     target_seconds=900,
        ...     level=Level.BEGINNER,
        ...     catalog_path=Path("data/catalog.jsonl"),
        ... )
    """

    # Required
    topic: str
    mode: PackMode = PackMode.LEGACY

    # Window
    min_duration_sec: Optional[int] = None
    max_duration_sec: Optional[int] = None
    target_seconds: Optional[int] = None
    level: Optional[Level] = None

    # Sources
    catalog_path: Optional[Path] = None
    strict_catalog: bool = False
    history_path: Optional[Path] = None
    user_id: Optional[str] = None

    # Exclusions
    excluded_ids: List[str] = field(default_factory=list)
    blocked_source_ids: List[str] = field(default_factory=list)
    seed: Optional[int] = None

    # Output
    output_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not self.topic or not self.topic.strip():
            raise ValueError("topic must be non-empty")
        if self.level is not None:
            object.__setattr__(self, "level", Level.parse(self.level))

        if self.mode is PackMode.LEGACY:
            if self.min_duration_sec is None or self.max_duration_sec is None:
                raise ValueError("legacy mode needs min_duration_sec and max_duration_sec")
        elif self.mode is PackMode.V2:
            if self.target_seconds is None:
                raise ValueError("v2 mode needs target_seconds")
            if self.level is None:
                raise ValueError("v2 mode needs level")
        else:
            raise ValueError(f"Unknown pack mode: {self.mode!r}")

        if self.history_path is not None and not self.user_id:
            raise ValueError("history_path requires user_id")
