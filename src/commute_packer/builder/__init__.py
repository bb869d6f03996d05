"""
Module: builder

Purpose:
    Pack building pipeline. Fetches candidate videos for a topic, removes
    watched and blocked ones, and selects a pack that fills the commute
    window without exceeding it.

Key Functions:
    - build_pack(): Legacy pack contract
    - build_pack_v2(): Modern pack contract
    - fill_remaining(): Top up a commute in progress
    - assemble_pack(): Main entry point (sources + selection + metadata)

Key Classes:
    - PackerConfig: Configuration for assembly
    - LegacyPackRequest / PackRequest: Selection requests
    - JsonlCatalogSource / WatchHistoryStore: File-backed sources

Dependencies:
    - commute_packer.core.models: Candidate, PackResult
    - commute_packer.core.schemas: Record validation

Used By:
    - commute_packer.cli
"""

from .config import PackerConfig, PackMode
from .selection import (
    LegacyPackRequest,
    PackRequest,
    build_pack,
    build_pack_v2,
    fill_remaining,
)
from .sources import JsonlCatalogSource, WatchHistoryStore, CandidateSourceError
from .controller import assemble_pack, AssemblyResult, AssemblyError

__all__ = [
    # Config
    "PackerConfig",
    "PackMode",
    # Selection
    "LegacyPackRequest",
    "PackRequest",
    "build_pack",
    "build_pack_v2",
    "fill_remaining",
    # Sources
    "JsonlCatalogSource",
    "WatchHistoryStore",
    "CandidateSourceError",
    # Controller
    "assemble_pack",
    "AssemblyResult",
    "AssemblyError",
]
