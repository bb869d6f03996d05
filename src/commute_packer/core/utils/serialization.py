"""
Serialization Utilities

Provides to/from JSON utilities for the core models.

- `serialize_*` and `deserialize_*` functions wrap the models' own
  `to_dict()` / `from_dict()`
- Validation via schemas before deserialization
- Calculated values (pack totals, underfill) are written for readers
  but never read back
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Iterator

from ..models.candidates import Candidate
from ..models.packs import PackResult
from ..schemas.validator import validate_candidate, ValidationError


# ─────────────────────────────────────────────────────────────────────────────
# Candidate Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_candidate(candidate: Candidate) -> dict[str, Any]:
    """
    Serialize a Candidate to a dictionary.

    The output can be written to a catalog line and will pass validation.

    Args:
        candidate: Candidate instance to serialize

    Returns:
        Dictionary suitable for JSON serialization
    """
    return candidate.to_dict()


def deserialize_candidate(
    data: dict[str, Any],
    *,
    validate: bool = True,
    strict: bool = False,
) -> Candidate:
    """
    Deserialize a Candidate from a dictionary.

    Args:
        data: Dictionary from JSON
        validate: Whether to validate the record first
        strict: Use full JSON Schema validation (implies validate)

    Returns:
        Candidate instance

    Raises:
        ValidationError: If validation is on and data is invalid
        ValueError: If data cannot be parsed
    """
    if validate or strict:
        validate_candidate(data, strict=strict)
    return Candidate.from_dict(data)


# ─────────────────────────────────────────────────────────────────────────────
# JSONL Catalogs
# ─────────────────────────────────────────────────────────────────────────────

def iter_jsonl_records(path: Path) -> Iterator[tuple[int, Any]]:
    """
    Yield (line_no, record) for each non-blank line of a JSONL file.

    Args:
        path: Path to the JSONL file

    Raises:
        FileNotFoundError: If file doesn't exist
        ValidationError: If a line is not valid JSON or the file is not UTF-8
    """
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            for line_no, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError as e:
                    raise ValidationError(
                        f"Invalid JSON on line {line_no}: {e.msg}",
                        path=str(path),
                        errors=[str(e)]
                    ) from e
                yield line_no, record
        except UnicodeDecodeError as e:
            raise ValidationError(
                f"File is not valid UTF-8: {e.reason}",
                path=str(path),
                errors=[str(e)]
            ) from e


def load_candidates_jsonl(
    path: Path,
    *,
    validate: bool = True,
    strict: bool = False,
) -> list[Candidate]:
    """
    Load every candidate from a JSONL catalog.

    All-or-nothing: the first bad line aborts the load. Use
    `builder.sources.JsonlCatalogSource` to skip bad records instead.

    Args:
        path: Path to catalog.jsonl
        validate: Whether to validate each record
        strict: Use full JSON Schema validation

    Returns:
        List of Candidate instances, in file order

    Raises:
        FileNotFoundError: If file doesn't exist
        ValidationError: If any record is invalid
    """
    candidates = []
    for line_no, data in iter_jsonl_records(path):
        try:
            candidates.append(deserialize_candidate(data, validate=validate, strict=strict))
        except (ValidationError, ValueError) as e:
            raise ValidationError(
                f"Error parsing line {line_no}: {e}",
                path=str(path),
                errors=[str(e)]
            ) from e
    return candidates


def save_candidates_jsonl(candidates: Iterable[Candidate], path: Path) -> None:
    """
    Save candidates to a JSONL catalog.

    Args:
        candidates: Candidates to save
        path: Output path for catalog.jsonl
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        for candidate in candidates:
            f.write(json.dumps(serialize_candidate(candidate), ensure_ascii=False))
            f.write("\n")


# ─────────────────────────────────────────────────────────────────────────────
# Pack Export
# ─────────────────────────────────────────────────────────────────────────────

def serialize_pack(pack: PackResult, **extra: Any) -> dict[str, Any]:
    """
    Serialize a PackResult for output.

    Args:
        pack: Pack to serialize
        **extra: Additional top-level keys (e.g. topic, level)

    Returns:
        Dictionary suitable for JSON serialization
    """
    data = pack.to_dict()
    data.update(extra)
    return data
