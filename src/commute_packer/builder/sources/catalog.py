"""
Module: builder.sources.catalog

Purpose:
    Candidate sources for the pack builder. Defines the CandidateSource
    protocol and a JSONL file-backed implementation that validates every
    record and skips the ones that fail.

Key Classes:
    - CandidateSource: Protocol consumed by the controller
    - JsonlCatalogSource: Reads candidates from catalog.jsonl
    - CandidateSourceError: Storage/transport failure

Dependencies:
    - pathlib (std)
    - commute_packer.core.utils.serialization: JSONL reading
    - commute_packer.core.schemas: Record validation

Used By:
    - builder.controller: Default candidate source
    - commute_packer.cli
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Protocol, runtime_checkable

from commute_packer.core.models import Candidate, Level, normalize_topic
from commute_packer.core.schemas import ValidationError
from commute_packer.core.utils.serialization import deserialize_candidate, iter_jsonl_records

logger = logging.getLogger(__name__)


class CandidateSourceError(Exception):
    """Candidate source could not be read."""
    pass


@runtime_checkable
class CandidateSource(Protocol):
    """
    Supplies candidate videos for a topic.

    Implementations return an empty list when nothing matches and raise
    CandidateSourceError only when the backing store is unreachable.
    """

    def fetch_candidates(self, topic: str, level: Optional[Level] = None) -> List[Candidate]:
        ...


class JsonlCatalogSource:
    """
    Candidate source backed by a JSONL catalog file.

    The file is re-read on every fetch so edits are picked up without
    restarting; catalogs are small enough that this is not a concern.

    Attributes:
        path: Path to catalog.jsonl
        strict: Use full JSON Schema validation for each record

    Example:
        >>> source = JsonlCatalogSource(Path("data/catalog.jsonl"))
        >>> [c.id for c in source.fetch_candidates("python")]
        ['v1', 'v2', 'v3']
    """

    def __init__(self, path: Path, *, strict: bool = False) -> None:
        self.path = Path(path)
        self.strict = strict

    def load_all(self) -> List[Candidate]:
        """
        Load every valid candidate in the catalog, in file order.

        Invalid records are logged and skipped.

        Raises:
            CandidateSourceError: If the file is missing or not valid JSONL
        """
        candidates = []
        skipped = 0
        try:
            for line_no, data in iter_jsonl_records(self.path):
                try:
                    candidates.append(deserialize_candidate(data, strict=self.strict))
                except (ValidationError, ValueError) as e:
                    skipped += 1
                    logger.warning(f"Skipping catalog line {line_no} in {self.path.name}: {e}")
        except FileNotFoundError as e:
            raise CandidateSourceError(str(e)) from e
        except ValidationError as e:
            raise CandidateSourceError(f"Unreadable catalog {self.path}: {e}") from e
        except OSError as e:
            raise CandidateSourceError(f"Failed to read catalog {self.path}: {e}") from e

        logger.debug(f"Loaded {len(candidates)} candidates from {self.path} ({skipped} skipped)")
        return candidates

    def fetch_candidates(self, topic: str, level: Optional[Level] = None) -> List[Candidate]:
        """
        Candidates tagged with topic, optionally at an exact level.

        Args:
            topic: Topic tag (case-insensitive, exact)
            level: Optional level; candidates without a level are dropped

        Returns:
            Matching candidates in file order, possibly empty
        """
        wanted = normalize_topic(topic)
        matches = [c for c in self.load_all() if wanted in c.topic_tags]
        if level is not None:
            level = Level.parse(level)
            matches = [c for c in matches if c.level is level]

        if not matches:
            logger.info(f"No catalog candidates for topic {topic!r}")
        return matches

    def __repr__(self) -> str:
        return f"JsonlCatalogSource({str(self.path)!r})"
