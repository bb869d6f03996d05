"""
Unit tests for build_pack (legacy contract).

Verified: 2026-10-16
"""

import random

import pytest

from commute_packer.builder.selection import LegacyPackRequest, build_pack
from commute_packer.core.models import Level

from conftest import make_candidate


def make_request(min_sec=850, max_sec=950, **kwargs) -> LegacyPackRequest:
    """Create a legacy request for the python topic."""
    kwargs.setdefault("topic", "python")
    return LegacyPackRequest(min_duration_sec=min_sec, max_duration_sec=max_sec, **kwargs)


class TestBuildPackScenarios:
    """Worked examples for the legacy contract."""

    def test_build_when_three_items_sum_in_window_then_selects_all(self):
        """Short items are all accepted, not just up to the minimum."""
        # Arrange
        candidates = [
            make_candidate("v1", 300),
            make_candidate("v2", 360),
            make_candidate("v3", 240),
        ]

        # Act
        pack = build_pack(candidates, make_request(850, 950))

        # Assert
        assert pack.item_ids == ("v3", "v1", "v2")
        assert pack.total_duration_sec == 900
        assert pack.under_filled is False

    def test_build_when_single_short_candidate_then_accepted_and_under_filled(self):
        """A lone candidate that fits is kept; the shortfall is reported."""
        # Act
        pack = build_pack([make_candidate("v1", 120)], make_request(600, 720))

        # Assert
        assert pack.item_ids == ("v1",)
        assert pack.total_duration_sec == 120
        assert pack.under_filled is True

    def test_build_when_other_topic_present_then_only_topic_selected(self):
        candidates = [
            make_candidate("v1", 300, topics=("python",)),
            make_candidate("v2", 300, topics=("javascript",)),
        ]

        pack = build_pack(candidates, make_request(250, 350))

        assert pack.item_ids == ("v1",)

    def test_build_when_source_blocked_then_its_videos_skipped(self):
        candidates = [
            make_candidate("v1", 300, source_id="c1"),
            make_candidate("v2", 300, source_id="c2"),
        ]

        pack = build_pack(candidates, make_request(250, 350, blocked_source_ids={"c1"}))

        assert pack.item_ids == ("v2",)


class TestBuildPackFiltering:
    """Tests for topic, level and exclusion filters."""

    def test_build_when_topic_case_differs_then_matches(self):
        candidates = [make_candidate("v1", 300, topics=("Python",))]

        pack = build_pack(candidates, make_request(0, 400, topic="PYTHON"))

        assert pack.item_ids == ("v1",)

    def test_build_when_level_given_then_unleveled_candidates_also_match(self):
        """Legacy level filter admits the level and candidates without one."""
        # Arrange
        candidates = [
            make_candidate("beg", 100, level=Level.BEGINNER),
            make_candidate("none", 100),
            make_candidate("int", 100, level=Level.INTERMEDIATE),
        ]

        # Act
        pack = build_pack(candidates, make_request(0, 1000, level=Level.BEGINNER))

        # Assert
        assert set(pack.item_ids) == {"beg", "none"}

    def test_build_when_no_level_then_all_levels_match(self):
        candidates = [
            make_candidate("beg", 100, level=Level.BEGINNER),
            make_candidate("adv", 100, level=Level.ADVANCED),
        ]

        pack = build_pack(candidates, make_request(0, 1000))

        assert set(pack.item_ids) == {"beg", "adv"}

    def test_build_when_ids_excluded_then_never_selected(self):
        candidates = [make_candidate("v1", 100), make_candidate("v2", 100)]

        pack = build_pack(candidates, make_request(0, 1000, excluded_ids={"v1"}))

        assert pack.item_ids == ("v2",)

    def test_build_when_unsourced_candidate_then_not_blocked(self):
        """Blocking applies only to candidates with a source id."""
        candidates = [make_candidate("v1", 100), make_candidate("v2", 100, source_id="c1")]

        pack = build_pack(candidates, make_request(0, 1000, blocked_source_ids={"c1"}))

        assert pack.item_ids == ("v1",)

    def test_build_when_nothing_eligible_then_empty_and_under_filled(self):
        pack = build_pack([make_candidate("v1", 100, topics=("cooking",))], make_request())

        assert pack.is_empty
        assert pack.total_duration_sec == 0
        assert pack.under_filled is True

    def test_build_when_empty_pool_then_empty_pack(self):
        pack = build_pack([], make_request())

        assert pack.items == ()
        assert pack.under_filled is True


class TestBuildPackInvariants:
    """Tests for determinism, duplicates and bounds."""

    def test_build_when_input_shuffled_then_same_result(self):
        """Output is independent of input order."""
        # Arrange
        candidates = [make_candidate(f"v{i}", 60 + (i * 37) % 200) for i in range(25)]
        request = make_request(850, 950)
        expected = build_pack(candidates, request)
        rng = random.Random(42)

        # Act & Assert
        for _ in range(10):
            shuffled = list(candidates)
            rng.shuffle(shuffled)
            assert build_pack(shuffled, request) == expected

    def test_build_when_equal_durations_then_ordered_by_id(self):
        candidates = [
            make_candidate("zebra", 200),
            make_candidate("alpha", 200),
            make_candidate("beta", 200),
        ]

        pack = build_pack(candidates, make_request(0, 600))

        assert pack.item_ids == ("alpha", "beta", "zebra")

    def test_build_when_duplicate_ids_then_first_sorted_kept(self):
        """The shortest copy of a repeated id is the one considered."""
        # Arrange
        candidates = [
            make_candidate("v1", 300),
            make_candidate("v1", 100),
            make_candidate("v2", 150),
            make_candidate("v2", 150),
        ]

        # Act
        pack = build_pack(candidates, make_request(0, 1000))

        # Assert
        assert pack.item_ids == ("v1", "v2")
        assert pack.total_duration_sec == 250

    def test_build_when_item_overshoots_then_skipped(self):
        """Items that would pass the ceiling are left out."""
        candidates = [make_candidate("v1", 400), make_candidate("v2", 500), make_candidate("v3", 600)]

        pack = build_pack(candidates, make_request(850, 950))

        assert pack.item_ids == ("v1", "v2")
        assert pack.total_duration_sec == 900

    def test_build_when_single_item_exceeds_max_then_never_selected(self):
        pack = build_pack([make_candidate("long", 1200)], make_request(850, 950))

        assert pack.is_empty

    @pytest.mark.parametrize("seed", [None, 1, 99])
    def test_build_when_seed_varies_then_result_unchanged(self, seed):
        """The (duration, id) order is total, so the seed has no effect."""
        candidates = [make_candidate(f"v{i}", 100 + i) for i in range(10)]

        pack = build_pack(candidates, make_request(500, 600, seed=seed))

        assert pack == build_pack(candidates, make_request(500, 600))

    def test_build_when_many_short_items_then_total_within_max(self):
        candidates = [make_candidate(f"short{i:02d}", 100) for i in range(20)]

        pack = build_pack(candidates, make_request(850, 950))

        assert pack.total_duration_sec == 900
        assert len(set(pack.item_ids)) == len(pack.items)
