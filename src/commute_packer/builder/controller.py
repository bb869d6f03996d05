"""
Module: builder.controller

Purpose:
    Orchestrate pack assembly for a single request.
    Fetch → Exclude → Build → Report → (Write metadata)

Key Functions:
    - assemble_pack(): Main entry point for building a pack

Key Classes:
    - AssemblyResult: Complete assembly result
    - AssemblyError: Exception for assembly failures

Dependencies:
    - builder.sources: Candidate and exclusion sources
    - builder.selection: Pack building

Used By:
    - commute_packer.cli
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Set, Union

from commute_packer.core.models import Candidate, PackResult

from .config import PackMode, PackerConfig
from .selection import LegacyPackRequest, PackRequest, build_pack, build_pack_v2
from .sources import (
    CandidateSource,
    CandidateSourceError,
    ExclusionSource,
    HistoryStoreError,
    JsonlCatalogSource,
    WatchHistoryStore,
)

logger = logging.getLogger(__name__)

METADATA_FILENAME = "pack_metadata.json"

AnyPackRequest = Union[LegacyPackRequest, PackRequest]


class AssemblyError(Exception):
    """Error during pack assembly."""
    pass


@dataclass(frozen=True)
class AssemblyResult:
    """
    Complete assembly result (immutable).

    Attributes:
        pack: The built pack (possibly empty / under-filled)
        request: Request the pack was built from
        metadata: Metadata dictionary (also written to disk when configured)
        warnings: User-facing messages, e.g. for under-filled packs
        metadata_path: Where metadata was written, if anywhere

    Example:
        >>> result = assemble_pack(config)
        >>> print(f"{len(result.pack.items)} videos, {result.pack.total_duration_sec}s")
    """
    pack: PackResult
    request: AnyPackRequest
    metadata: dict
    warnings: tuple[str, ...]
    metadata_path: Optional[Path] = None


def assemble_pack(
    config: PackerConfig,
    *,
    source: Optional[CandidateSource] = None,
    exclusions: Optional[ExclusionSource] = None,
) -> AssemblyResult:
    """
    Assemble a pack from start to finish.

    Pipeline:
    1. Resolve candidate and exclusion sources
    2. Fetch candidates for the topic
    3. Merge watched ids into the excluded ids
    4. Build the pack with the configured contract
    5. Collect warnings for under-filled or empty packs
    6. (Optional) Write pack_metadata.json

    Under-filled and empty packs are normal results; only source and
    output failures raise.

    Args:
        config: Assembly configuration
        source: Candidate source (defaults to JsonlCatalogSource(config.catalog_path))
        exclusions: Exclusion source (defaults to WatchHistoryStore(config.history_path))

    Returns:
        AssemblyResult with pack, request, metadata and warnings

    Raises:
        AssemblyError: If a source fails or metadata cannot be written
        ValueError: If the configured window is malformed
    """
    warnings: List[str] = []
    start_time = time.perf_counter()

    logger.info(f"Assembling {config.mode.value} pack for topic {config.topic!r}")

    # 1. Resolve sources
    if source is None:
        source = _default_source(config)
    if exclusions is None:
        exclusions = _default_exclusions(config)

    # 2. Fetch candidates (v2 narrows by level at the source too)
    fetch_level = config.level if config.mode is PackMode.V2 else None
    try:
        candidates = source.fetch_candidates(config.topic, fetch_level)
    except CandidateSourceError as e:
        raise AssemblyError(f"Failed to fetch candidates: {e}") from e

    logger.info(f"Fetched {len(candidates)} candidates")

    # 3. Exclusions
    excluded_ids: Set[str] = set(config.excluded_ids)
    if exclusions is not None and config.user_id:
        try:
            watched = exclusions.get_excluded_ids(config.user_id, config.topic)
        except HistoryStoreError as e:
            raise AssemblyError(f"Failed to read exclusions: {e}") from e
        logger.debug(f"Excluding {len(watched)} watched videos for {config.user_id}")
        excluded_ids |= watched

    # 4. Build
    request = _build_request(config, excluded_ids)
    if isinstance(request, PackRequest):
        pack = build_pack_v2(candidates, request)
    else:
        pack = build_pack(candidates, request)

    logger.info(
        f"Selected {len(pack.items)} videos, "
        f"{pack.total_duration_sec}s in window {pack.window!r}"
    )

    # 5. Report
    warnings.extend(_pack_warnings(config, pack))
    for message in warnings:
        logger.warning(message)

    metadata = _build_metadata(config, request, pack, candidates, excluded_ids)

    # 6. Write metadata
    metadata_path = None
    if config.output_dir is not None:
        metadata_path = _write_metadata(Path(config.output_dir), metadata)
        logger.info(f"Wrote pack metadata to {metadata_path}")

    elapsed = time.perf_counter() - start_time
    logger.debug(f"Pack assembly completed in {elapsed:.3f}s")

    return AssemblyResult(
        pack=pack,
        request=request,
        metadata=metadata,
        warnings=tuple(warnings),
        metadata_path=metadata_path,
    )


def _default_source(config: PackerConfig) -> CandidateSource:
    if config.catalog_path is None:
        raise AssemblyError("No candidate source: pass source= or set catalog_path")
    return JsonlCatalogSource(config.catalog_path, strict=config.strict_catalog)


def _default_exclusions(config: PackerConfig) -> Optional[ExclusionSource]:
    if config.history_path is None:
        return None
    return WatchHistoryStore(config.history_path)


def _build_request(config: PackerConfig, excluded_ids: Set[str]) -> AnyPackRequest:
    """Translate the config into the request for its contract."""
    if config.mode is PackMode.V2:
        return PackRequest(
            topic=config.topic,
            level=config.level,
            target_seconds=config.target_seconds,
            excluded_ids=frozenset(excluded_ids),
            blocked_source_ids=frozenset(config.blocked_source_ids),
            seed=config.seed,
        )
    return LegacyPackRequest(
        topic=config.topic,
        min_duration_sec=config.min_duration_sec,
        max_duration_sec=config.max_duration_sec,
        level=config.level,
        excluded_ids=frozenset(excluded_ids),
        blocked_source_ids=frozenset(config.blocked_source_ids),
        seed=config.seed,
    )


def _pack_warnings(config: PackerConfig, pack: PackResult) -> List[str]:
    """
    User-facing messages for packs that miss the window.

    Example:
        >>> _pack_warnings(config, empty_pack)
        ["No videos found for 'python'. Try another topic or level."]
    """
    if pack.is_empty:
        level = f" at {config.level.value} level" if config.level else ""
        return [f"No videos found for {config.topic!r}{level}. Try another topic or level."]
    if pack.under_filled:
        return [
            f"Couldn't find enough content for {config.topic!r}: "
            f"{pack.total_duration_sec}s of {pack.window.min_duration_sec}s minimum "
            f"(short by {pack.shortfall_sec}s)."
        ]
    return []


def _build_metadata(
    config: PackerConfig,
    request: AnyPackRequest,
    pack: PackResult,
    candidates: List[Candidate],
    excluded_ids: Set[str],
) -> dict:
    """
    Build metadata dictionary for an assembled pack.

    Returns:
        Metadata dictionary ready for JSON serialization
    """
    from commute_packer import __version__

    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "packer_version": __version__,
        "mode": config.mode.value,
        "topic": config.topic,
        "level": config.level.value if config.level else None,
        "target_seconds": config.target_seconds if isinstance(request, PackRequest) else None,
        "min_duration_sec": pack.window.min_duration_sec,
        "max_duration_sec": pack.window.max_duration_sec,
        "seed": config.seed,
        "user_id": config.user_id,
        "candidate_count": len(candidates),
        "excluded_count": len(excluded_ids),
        "blocked_source_ids": sorted(request.blocked_source_ids),
        "item_count": len(pack.items),
        "total_duration_sec": pack.total_duration_sec,
        "under_filled": pack.under_filled,
        "within_window": pack.window.contains(pack.total_duration_sec),
        "items": [c.to_dict() for c in pack.items],
    }


def _write_metadata(output_dir: Path, metadata: dict) -> Path:
    """
    Write metadata JSON file to output directory.

    Raises:
        AssemblyError: If writing fails
    """
    metadata_path = output_dir / METADATA_FILENAME
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with open(metadata_path, "w", encoding="utf-8") as f:
            json.dump(metadata, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise AssemblyError(f"Failed to write metadata: {e}") from e
    return metadata_path
