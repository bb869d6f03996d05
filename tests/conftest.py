
import json
import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import commute_packer
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from commute_packer.core.models import Candidate, Level  # noqa: E402


def make_candidate(
    video_id: str,
    duration_sec: int,
    *,
    topics=("python",),
    level=None,
    source_id=None,
    **extra,
) -> Candidate:
    """Create a Candidate with sensible defaults for tests."""
    return Candidate(
        id=video_id,
        duration_sec=duration_sec,
        topic_tags=frozenset(topics),
        level=level,
        source_id=source_id,
        **extra,
    )


# Common test fixtures
@pytest.fixture
def python_catalog() -> list[Candidate]:
    """Ten-video catalog, mostly beginner python."""
    rows = [
        ("vid1", 180, ("python", "programming"), Level.BEGINNER, "codeacademy"),
        ("vid2", 240, ("python", "programming"), Level.BEGINNER, "codeacademy"),
        ("vid3", 300, ("python", "programming"), Level.INTERMEDIATE, "teched"),
        ("vid4", 360, ("python", "programming"), Level.ADVANCED, "procoder"),
        ("vid5", 120, ("python", "tips"), Level.BEGINNER, "quicklearn"),
        ("vid6", 200, ("python", "tutorial"), Level.BEGINNER, "easycode"),
        ("vid7", 150, ("javascript", "web"), Level.BEGINNER, "webdev"),
        ("vid8", 420, ("python", "advanced-topics"), Level.BEGINNER, "deepcode"),
        ("vid9", 90, ("python", "quickstart"), Level.BEGINNER, "fastlearn"),
        ("vid10", 150, ("python", "essentials"), Level.BEGINNER, "codebasics"),
    ]
    return [
        make_candidate(vid, dur, topics=topics, level=level, source_id=source)
        for vid, dur, topics, level, source in rows
    ]


@pytest.fixture
def catalog_file(tmp_path: Path, python_catalog) -> Path:
    """Write python_catalog to a JSONL file."""
    path = tmp_path / "catalog.jsonl"
    with open(path, "w", encoding="utf-8") as f:
        for candidate in python_catalog:
            f.write(json.dumps(candidate.to_dict()) + "\n")
    return path
