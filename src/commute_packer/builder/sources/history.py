"""
Module: builder.sources.history

Purpose:
    Exclusion sources for the pack builder. A user's watch history supplies
    the ids of videos that should not be offered again.

Key Classes:
    - ExclusionSource: Protocol consumed by the controller
    - WatchRecord: One watched video (immutable)
    - WatchHistoryStore: JSON file-backed history
    - HistoryStoreError: Storage failure

Dependencies:
    - json (std)
    - commute_packer.core.schemas: Record validation

Used By:
    - builder.controller: Merges watched ids into excluded_ids
    - commute_packer.cli
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Protocol, Set, runtime_checkable

from commute_packer.core.models import normalize_topic
from commute_packer.core.schemas import ValidationError, validate_watch_record

logger = logging.getLogger(__name__)


class HistoryStoreError(Exception):
    """Watch history could not be read or written."""
    pass


@runtime_checkable
class ExclusionSource(Protocol):
    """Supplies ids of videos a user should not be offered."""

    def get_excluded_ids(self, user_id: str, topic: Optional[str] = None) -> Set[str]:
        ...


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class WatchRecord:
    """
    One watched video (immutable).

    Attributes:
        user_id: Viewer
        video_id: Candidate id that was watched
        topic: Topic the video was watched under
        watched_at: ISO 8601 timestamp
        duration_sec: Video length in seconds
        completion_percent: How much was watched, 0-100
    """

    user_id: str
    video_id: str
    topic: str
    watched_at: str = field(default_factory=_utc_now_iso)
    duration_sec: int = 0
    completion_percent: float = 100

    def __post_init__(self) -> None:
        """Validate record on construction."""
        for name in ("user_id", "video_id", "topic"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{name} must be a non-empty string: {value!r}")
        if not (0 <= self.completion_percent <= 100):
            raise ValueError(f"completion_percent must be 0-100: {self.completion_percent}")

    @property
    def watched_at_dt(self) -> datetime:
        value = self.watched_at
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WatchRecord:
        validate_watch_record(data)
        return cls(
            user_id=data["user_id"],
            video_id=data["video_id"],
            topic=data["topic"],
            watched_at=data["watched_at"],
            duration_sec=data.get("duration_sec", 0),
            completion_percent=data.get("completion_percent", 100),
        )


class WatchHistoryStore:
    """
    Watch history persisted as a JSON array.

    A missing file is an empty history. Every call reads the file fresh;
    writes rewrite the whole file.

    Attributes:
        path: Path to watch_history.json

    Example:
        >>> store = WatchHistoryStore(Path("data/watch_history.json"))
        >>> store.add_watched("u1", "v1", "python", duration_sec=300)
        >>> store.get_excluded_ids("u1")
        {'v1'}
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    # ─────────────────────────────────────────────────────────────────────────
    # Persistence
    # ─────────────────────────────────────────────────────────────────────────

    def _load(self) -> List[WatchRecord]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise HistoryStoreError(f"Failed to read watch history {self.path}: {e}") from e

        if not isinstance(raw, list):
            raise HistoryStoreError(f"Watch history {self.path} must contain a JSON array")

        records = []
        for i, item in enumerate(raw):
            try:
                records.append(WatchRecord.from_dict(item))
            except (ValidationError, ValueError) as e:
                logger.warning(f"Skipping watch record {i} in {self.path.name}: {e}")
        return records

    def _save(self, records: List[WatchRecord]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump([r.to_dict() for r in records], f, indent=2)
        except OSError as e:
            raise HistoryStoreError(f"Failed to save watch history {self.path}: {e}") from e

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def add_watched(
        self,
        user_id: str,
        video_id: str,
        topic: str,
        *,
        duration_sec: int = 0,
        completion_percent: float = 100,
    ) -> WatchRecord:
        """
        Append a watched video to the history.

        Returns:
            The stored WatchRecord
        """
        record = WatchRecord(
            user_id=user_id,
            video_id=video_id,
            topic=topic,
            duration_sec=duration_sec,
            completion_percent=completion_percent,
        )
        records = self._load()
        records.append(record)
        self._save(records)
        logger.debug(f"Recorded watch: {video_id} ({topic}) for {user_id}")
        return record

    def _for_user(self, user_id: str, topic: Optional[str]) -> List[WatchRecord]:
        records = [r for r in self._load() if r.user_id == user_id]
        if topic:
            wanted = normalize_topic(topic)
            records = [r for r in records if normalize_topic(r.topic) == wanted]
        return records

    def get_excluded_ids(self, user_id: str, topic: Optional[str] = None) -> Set[str]:
        """
        Ids of videos the user has watched.

        Args:
            user_id: Viewer
            topic: Restrict to videos watched under this topic (case-insensitive)

        Returns:
            Set of video ids, empty for an unknown user
        """
        return {r.video_id for r in self._for_user(user_id, topic)}

    def get_history(
        self,
        user_id: str,
        topic: Optional[str] = None,
        limit: int = 50,
    ) -> List[WatchRecord]:
        """Most recent records first, at most limit of them."""
        records = self._for_user(user_id, topic)
        records.sort(key=lambda r: r.watched_at_dt, reverse=True)
        return records[:limit]

    def has_watched(self, user_id: str, video_id: str) -> bool:
        return any(r.user_id == user_id and r.video_id == video_id for r in self._load())

    def clear(self) -> None:
        """Remove every record."""
        self._save([])

    def __repr__(self) -> str:
        return f"WatchHistoryStore({str(self.path)!r})"
