"""
Unit tests for PackerConfig.

Verified: 2026-10-16
"""

import pytest
from pathlib import Path

from commute_packer.builder import PackerConfig, PackMode
from commute_packer.core.models import Level


class TestPackerConfig:
    """Tests for PackerConfig dataclass."""

    def test_init_when_legacy_window_then_creates_config(self):
        config = PackerConfig(topic="python", min_duration_sec=850, max_duration_sec=950)

        assert config.mode is PackMode.LEGACY
        assert config.excluded_ids == []

    def test_init_when_legacy_without_window_then_raises_error(self):
        with pytest.raises(ValueError, match="legacy mode needs"):
            PackerConfig(topic="python", min_duration_sec=850)

    def test_init_when_v2_without_level_then_raises_error(self):
        with pytest.raises(ValueError, match="v2 mode needs level"):
            PackerConfig(topic="python", mode=PackMode.V2, target_seconds=600)

    def test_init_when_v2_without_target_then_raises_error(self):
        with pytest.raises(ValueError, match="v2 mode needs target_seconds"):
            PackerConfig(topic="python", mode=PackMode.V2, level=Level.BEGINNER)

    def test_init_when_level_string_then_parsed(self):
        config = PackerConfig(topic="python", mode=PackMode.V2, target_seconds=600, level="advanced")

        assert config.level is Level.ADVANCED

    def test_init_when_blank_topic_then_raises_error(self):
        with pytest.raises(ValueError, match="topic must be non-empty"):
            PackerConfig(topic=" ", min_duration_sec=0, max_duration_sec=100)

    def test_init_when_history_without_user_then_raises_error(self):
        """Watch history is per user."""
        with pytest.raises(ValueError, match="history_path requires user_id"):
            PackerConfig(
                topic="python",
                min_duration_sec=0,
                max_duration_sec=100,
                history_path=Path("history.json"),
            )
