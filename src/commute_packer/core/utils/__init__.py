"""
Utils Package

Serialization and utility functions.
"""

from .serialization import (
    serialize_candidate,
    deserialize_candidate,
    iter_jsonl_records,
    load_candidates_jsonl,
    save_candidates_jsonl,
    serialize_pack,
)

__all__ = [
    "serialize_candidate",
    "deserialize_candidate",
    "iter_jsonl_records",
    "load_candidates_jsonl",
    "save_candidates_jsonl",
    "serialize_pack",
]
