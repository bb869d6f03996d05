"""
Module: builder.selection

Purpose:
    Pack selection algorithms. Selects candidate videos to fill a commute
    time window without exceeding it, and tops up a commute in progress.

Key Functions:
    - build_pack(): Legacy contract, caller-supplied window
    - build_pack_v2(): Modern contract, target ±60s with exact level
    - fill_remaining(): Fill the remaining seconds with a small overbook

Key Classes:
    - LegacyPackRequest: Request for build_pack
    - PackRequest: Request for build_pack_v2

Dependencies:
    - commute_packer.core.models: Candidate, FillWindow, PackResult, TopUpResult

Used By:
    - builder.controller: Pack assembly
    - commute_packer.cli
"""

from .config import LegacyPackRequest, PackRequest, WINDOW_TOLERANCE_SEC
from .packer import build_pack, build_pack_v2
from .top_up import fill_remaining, DEFAULT_OVERBOOK_PCT

__all__ = [
    "LegacyPackRequest",
    "PackRequest",
    "WINDOW_TOLERANCE_SEC",
    "build_pack",
    "build_pack_v2",
    "fill_remaining",
    "DEFAULT_OVERBOOK_PCT",
]
