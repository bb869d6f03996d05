"""
Schema Validation Utilities

Validates catalog and watch-history records before they become models.

Two levels:
- Basic checks (always): required fields, types, value ranges. Cheap enough
  to run on every line of a large catalog.
- Strict mode: full JSON Schema validation via `jsonschema` against the
  schema files shipped next to this module.

Fail fast on any violation; loaders decide whether to skip or abort.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import jsonschema


# Schema version constants
CANDIDATE_SCHEMA_VERSION = 1

VALID_LEVELS = ("beginner", "intermediate", "advanced")


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_candidate(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a catalog candidate record.

    Args:
        data: Candidate dictionary to validate
        strict: If True, also validate against candidate.schema.json

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Candidate record must be an object, got {type(data).__name__}")

    missing = [f for f in ("id", "duration_sec") if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing]
        )

    video_id = data["id"]
    if not isinstance(video_id, str) or not video_id:
        raise ValidationError(f"Invalid id: {video_id!r} (must be non-empty string)", path="id")

    # Durations of zero or below are placeholders from failed metadata lookups
    duration = data["duration_sec"]
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        raise ValidationError(
            f"Invalid duration_sec: {duration!r} (must be positive integer)",
            path="duration_sec"
        )

    tags = data.get("topic_tags")
    topic = data.get("topic")
    if tags is None and topic is None:
        raise ValidationError("Candidate needs topic_tags or topic", path="topic_tags")
    if tags is not None:
        if not isinstance(tags, list) or not all(isinstance(t, str) and t.strip() for t in tags):
            raise ValidationError(
                "topic_tags must be a list of non-empty strings",
                path="topic_tags"
            )
    if topic is not None and not _is_non_empty_str(topic):
        raise ValidationError(f"Invalid topic: {topic!r} (must be non-empty string)", path="topic")

    for field_name in ("source_id", "title", "source_title", "thumbnail", "url"):
        value = data.get(field_name)
        if value is not None and not isinstance(value, str):
            raise ValidationError(
                f"Invalid {field_name}: {value!r} (must be string or null)",
                path=field_name
            )

    published_at = data.get("published_at")
    if published_at is not None and not _is_iso_timestamp(published_at):
        raise ValidationError(
            f"Invalid published_at: {published_at!r} (must be ISO 8601 string or null)",
            path="published_at"
        )

    level = data.get("level")
    if level is not None and (not isinstance(level, str) or level.strip().lower() not in VALID_LEVELS):
        raise ValidationError(
            f"Invalid level: {level!r} (expected one of {list(VALID_LEVELS)})",
            path="level"
        )

    version = data.get("schema_version")
    if version is not None and version != CANDIDATE_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported candidate schema version: {version} (expected {CANDIDATE_SCHEMA_VERSION})",
            path="schema_version"
        )

    if strict:
        _validate_against_schema(data, "candidate")


def validate_watch_record(data: dict[str, Any]) -> None:
    """
    Validate a watch-history record.

    Args:
        data: Watch record dictionary

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Watch record must be an object, got {type(data).__name__}")

    required = ["user_id", "video_id", "topic", "watched_at"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            errors=[f"Missing field: {f}" for f in missing]
        )

    for field_name in ("user_id", "video_id", "topic"):
        if not _is_non_empty_str(data[field_name]):
            raise ValidationError(
                f"Invalid {field_name}: {data[field_name]!r} (must be non-empty string)",
                path=field_name
            )

    if not _is_iso_timestamp(data["watched_at"]):
        raise ValidationError(
            f"Invalid watched_at: {data['watched_at']!r} (must be ISO 8601 string)",
            path="watched_at"
        )

    duration = data.get("duration_sec", 0)
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
        raise ValidationError(
            f"Invalid duration_sec: {duration!r} (must be non-negative integer)",
            path="duration_sec"
        )

    completion = data.get("completion_percent", 100)
    if isinstance(completion, bool) or not isinstance(completion, (int, float)) or not (0 <= completion <= 100):
        raise ValidationError(
            f"Invalid completion_percent: {completion!r} (must be 0-100)",
            path="completion_percent"
        )


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_iso_timestamp(value: Any) -> bool:
    """True for an ISO 8601 string; a trailing 'Z' counts as UTC."""
    if not isinstance(value, str):
        return False
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        datetime.fromisoformat(value)
    except ValueError:
        return False
    return True


def _validate_against_schema(data: dict[str, Any], schema_name: str) -> None:
    """Run full JSON Schema validation, converting errors to ValidationError."""
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise ValidationError(
            f"Schema validation failed: {e.message}",
            path=".".join(str(p) for p in e.absolute_path),
            errors=[e.message]
        ) from e
