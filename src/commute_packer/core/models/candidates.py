"""
Module: candidates

Purpose:
    Provides the Candidate dataclass - the video descriptor handed to the
    pack builder - and the Level enum for difficulty levels. Topic tags are
    normalized on construction so filtering is an exact set lookup.

Key Functions:
    - normalize_topic(topic): Canonical lowercase form of a topic string
    - Candidate.has_topic(topic): Case-insensitive exact tag match
    - Candidate.to_dict() / Candidate.from_dict(): Serialization

Dependencies:
    - dataclasses (std)
    - datetime (std)
    - enum (std)

Used By:
    - core.models.packs.PackResult
    - core.utils.serialization
    - builder.selection.packer
    - builder.sources.catalog
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Iterable, Optional


def normalize_topic(topic: str) -> str:
    """
    Canonical form of a topic string.

    Args:
        topic: Raw topic or tag, any case

    Returns:
        Stripped, lowercase topic

    Example:
        >>> normalize_topic("  Python ")
        'python'
    """
    return topic.strip().lower()


class Level(Enum):
    """
    Difficulty level of a candidate video.

    Example:
        >>> Level.parse("Beginner")
        <Level.BEGINNER: 'beginner'>
    """

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @classmethod
    def parse(cls, value: str | Level) -> Level:
        """
        Parse a level from a string (case-insensitive).

        Args:
            value: Level name or an existing Level

        Returns:
            Matching Level

        Raises:
            ValueError: If value is not a known level
        """
        if isinstance(value, Level):
            return value
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            valid = ", ".join(level.value for level in cls)
            raise ValueError(f"Invalid level {value!r} (expected one of: {valid})") from None


@dataclass(frozen=True)
class Candidate:
    """
    Video descriptor eligible for selection into a pack (immutable).

    Attributes:
        id: Opaque unique identifier (e.g. a YouTube video id)
        duration_sec: Duration in whole seconds, strictly positive
        topic_tags: Lowercase topic tags; a video may belong to several topics
        level: Difficulty level, None when unknown
        source_id: Publisher / channel identifier used for blocking
        title: Display title
        source_title: Display name of the publisher
        thumbnail: Thumbnail URL
        url: Watch URL
        published_at: Publication timestamp, used only by top-up tie-breaks

    Invariants:
        - id is non-empty
        - duration_sec > 0
        - every tag in topic_tags is stripped lowercase

    Example:
        >>> c = Candidate(id="v1", duration_sec=300, topic_tags=frozenset({"Python"}))
        >>> c.has_topic("PYTHON")
        True
    """

    id: str
    duration_sec: int
    topic_tags: frozenset[str] = frozenset()
    level: Optional[Level] = None
    source_id: Optional[str] = None
    title: str = ""
    source_title: str = ""
    thumbnail: str = ""
    url: str = ""
    published_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate and normalize candidate on construction."""
        if not self.id:
            raise ValueError("Candidate id must be non-empty")
        if isinstance(self.duration_sec, bool) or not isinstance(self.duration_sec, int):
            raise ValueError(f"duration_sec must be an integer: {self.duration_sec!r}")
        if self.duration_sec <= 0:
            raise ValueError(f"duration_sec must be positive: {self.duration_sec}")

        # Frozen: normalize through object.__setattr__
        raw_tags = (self.topic_tags,) if isinstance(self.topic_tags, str) else self.topic_tags
        if not all(isinstance(t, str) for t in raw_tags):
            raise ValueError(f"topic_tags must be strings: {self.topic_tags!r}")
        tags = frozenset(normalize_topic(t) for t in raw_tags if t.strip())
        object.__setattr__(self, "topic_tags", tags)
        if self.level is not None and not isinstance(self.level, Level):
            object.__setattr__(self, "level", Level.parse(self.level))

    def has_topic(self, topic: str) -> bool:
        """
        Check whether this candidate is tagged with a topic.

        Exact tag match after normalization - "py" does not match "python".

        Args:
            topic: Topic to look for, any case

        Returns:
            True if the normalized topic is one of the tags
        """
        return normalize_topic(topic) in self.topic_tags

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to dictionary.

        Returns:
            Dict representation; optional fields only when set
        """
        d: dict[str, Any] = {
            "id": self.id,
            "duration_sec": self.duration_sec,
            "topic_tags": sorted(self.topic_tags),
        }
        if self.level is not None:
            d["level"] = self.level.value
        if self.source_id is not None:
            d["source_id"] = self.source_id
        for key in ("title", "source_title", "thumbnail", "url"):
            value = getattr(self, key)
            if value:
                d[key] = value
        if self.published_at is not None:
            d["published_at"] = self.published_at.isoformat()
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Candidate:
        """
        Deserialize from dictionary.

        Accepts a single "topic" string as well as a "topic_tags" list,
        since older catalogs stored one topic per video.

        Args:
            data: Dict representation

        Returns:
            Candidate instance

        Raises:
            ValueError: If required fields are missing or invalid
        """
        try:
            video_id = data["id"]
            duration = data["duration_sec"]
        except KeyError as e:
            raise ValueError(f"Candidate missing required field: {e.args[0]}") from None

        tags: Iterable[str] = data.get("topic_tags") or ()
        if data.get("topic"):
            tags = [*tags, data["topic"]]

        level = data.get("level")
        return cls(
            id=video_id,
            duration_sec=duration,
            topic_tags=frozenset(tags),
            level=Level.parse(level) if level else None,
            source_id=data.get("source_id"),
            title=data.get("title") or "",
            source_title=data.get("source_title") or "",
            thumbnail=data.get("thumbnail") or "",
            url=data.get("url") or "",
            published_at=_parse_timestamp(data.get("published_at")),
        )

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        level = self.level.value if self.level else None
        return f"Candidate({self.id!r}, {self.duration_sec}s, level={level}, source={self.source_id!r})"


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp, accepting a trailing 'Z'."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Invalid published_at timestamp: {value!r}") from None
