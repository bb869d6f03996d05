"""
Module: builder.sources

Purpose:
    Collaborators that feed the pack builder: candidate sources and
    exclusion sources. The builder itself never calls these; the
    controller does, and passes plain data on.

Key Classes:
    - CandidateSource / JsonlCatalogSource
    - ExclusionSource / WatchHistoryStore

Used By:
    - builder.controller
"""

from .catalog import CandidateSource, CandidateSourceError, JsonlCatalogSource
from .history import ExclusionSource, HistoryStoreError, WatchHistoryStore, WatchRecord

__all__ = [
    "CandidateSource",
    "CandidateSourceError",
    "JsonlCatalogSource",
    "ExclusionSource",
    "HistoryStoreError",
    "WatchHistoryStore",
    "WatchRecord",
]
