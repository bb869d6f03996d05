"""
Schemas Package

JSON schema definitions and validation utilities.
"""

from .validator import (
    validate_candidate,
    validate_watch_record,
    ValidationError,
    CANDIDATE_SCHEMA_VERSION,
)

__all__ = [
    "validate_candidate",
    "validate_watch_record",
    "ValidationError",
    "CANDIDATE_SCHEMA_VERSION",
]
