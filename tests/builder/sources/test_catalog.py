"""
Unit tests for JsonlCatalogSource.

Verified: 2026-10-16
"""

import json
import logging
import pytest
from pathlib import Path

from commute_packer.builder.sources import (
    CandidateSource,
    CandidateSourceError,
    JsonlCatalogSource,
)
from commute_packer.core.models import Level


def write_jsonl(path: Path, records) -> Path:
    with open(path, "w", encoding="utf-8") as f:
        for record in records:
            f.write((record if isinstance(record, str) else json.dumps(record)) + "\n")
    return path


class TestJsonlCatalogSource:
    """Tests for JsonlCatalogSource."""

    def test_source_satisfies_protocol(self, catalog_file):
        assert isinstance(JsonlCatalogSource(catalog_file), CandidateSource)

    def test_fetch_when_topic_matches_then_returns_in_file_order(self, catalog_file):
        """Topic filtering is exact and keeps file order."""
        # Act
        result = JsonlCatalogSource(catalog_file).fetch_candidates("Python")

        # Assert
        assert [c.id for c in result] == [
            "vid1", "vid2", "vid3", "vid4", "vid5", "vid6", "vid8", "vid9", "vid10",
        ]

    def test_fetch_when_level_given_then_exact_level_only(self, catalog_file):
        result = JsonlCatalogSource(catalog_file).fetch_candidates("python", Level.ADVANCED)

        assert [c.id for c in result] == ["vid4"]

    def test_fetch_when_level_string_then_parsed(self, catalog_file):
        result = JsonlCatalogSource(catalog_file).fetch_candidates("python", "intermediate")

        assert [c.id for c in result] == ["vid3"]

    def test_fetch_when_no_match_then_empty_list(self, catalog_file):
        assert JsonlCatalogSource(catalog_file).fetch_candidates("cooking") == []

    def test_load_when_invalid_records_then_skipped_with_warning(self, tmp_path: Path, caplog):
        """Zero durations and malformed records are dropped, the rest load."""
        # Arrange
        path = write_jsonl(tmp_path / "catalog.jsonl", [
            {"id": "good", "duration_sec": 300, "topic_tags": ["python"]},
            {"id": "zero", "duration_sec": 0, "topic_tags": ["python"]},
            {"id": "nolevel", "duration_sec": 200, "topic_tags": ["python"], "level": "expert"},
            {"duration_sec": 200, "topic_tags": ["python"]},
            {"id": "also-good", "duration_sec": 120, "topic": "python"},
        ])

        # Act
        with caplog.at_level(logging.WARNING):
            result = JsonlCatalogSource(path).load_all()

        # Assert
        assert [c.id for c in result] == ["good", "also-good"]
        assert "Skipping catalog line 2" in caplog.text

    def test_load_when_strict_then_schema_rejects_capitalized_level(self, tmp_path: Path):
        path = write_jsonl(tmp_path / "catalog.jsonl", [
            {"id": "v1", "duration_sec": 300, "topic_tags": ["python"], "level": "Beginner"},
            {"id": "v2", "duration_sec": 300, "topic_tags": ["python"], "level": "beginner"},
        ])

        lenient = JsonlCatalogSource(path).load_all()
        strict = JsonlCatalogSource(path, strict=True).load_all()

        assert [c.id for c in lenient] == ["v1", "v2"]
        assert [c.id for c in strict] == ["v2"]

    def test_load_when_file_missing_then_raises_source_error(self, tmp_path: Path):
        with pytest.raises(CandidateSourceError, match="not found"):
            JsonlCatalogSource(tmp_path / "missing.jsonl").load_all()

    def test_load_when_line_not_json_then_raises_source_error(self, tmp_path: Path):
        """A corrupt file is a storage failure, not a skippable record."""
        path = write_jsonl(tmp_path / "catalog.jsonl", [
            {"id": "v1", "duration_sec": 300, "topic_tags": ["python"]},
            "{broken",
        ])

        with pytest.raises(CandidateSourceError, match="Unreadable catalog"):
            JsonlCatalogSource(path).load_all()

    def test_fetch_when_file_edited_then_sees_new_records(self, tmp_path: Path):
        path = write_jsonl(tmp_path / "catalog.jsonl", [
            {"id": "v1", "duration_sec": 300, "topic_tags": ["python"]},
        ])
        source = JsonlCatalogSource(path)
        assert len(source.fetch_candidates("python")) == 1

        write_jsonl(path, [
            {"id": "v1", "duration_sec": 300, "topic_tags": ["python"]},
            {"id": "v2", "duration_sec": 200, "topic_tags": ["python"]},
        ])

        assert [c.id for c in source.fetch_candidates("python")] == ["v1", "v2"]

    def test_load_when_field_types_wrong_then_skipped(self, tmp_path: Path, caplog):
        """A non-string topic or numeric timestamp drops the record, not the load."""
        # Arrange
        path = write_jsonl(tmp_path / "catalog.jsonl", [
            {"id": "good", "duration_sec": 300, "topic_tags": ["python"]},
            {"id": "int-topic", "duration_sec": 200, "topic": 5},
            {"id": "epoch", "duration_sec": 200, "topic_tags": ["python"], "published_at": 1700000000},
            {"id": "int-title", "duration_sec": 200, "topic_tags": ["python"], "title": 5},
            {"id": "also-good", "duration_sec": 120, "topic": "python", "published_at": "2024-05-01T12:00:00Z"},
        ])

        # Act
        with caplog.at_level(logging.WARNING):
            result = JsonlCatalogSource(path).fetch_candidates("python")

        # Assert
        assert [c.id for c in result] == ["good", "also-good"]
        assert "Skipping catalog line 2" in caplog.text

    def test_load_when_not_utf8_then_raises_source_error(self, tmp_path: Path):
        path = tmp_path / "catalog.jsonl"
        path.write_bytes(b'{"id": "a\xff", "duration_sec": 60, "topic_tags": ["python"]}\n')

        with pytest.raises(CandidateSourceError, match="not valid UTF-8"):
            JsonlCatalogSource(path).load_all()
