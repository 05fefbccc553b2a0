"""Tests for commit range extraction."""

import pytest

from depvet.update_analysis.data_models import RangeSource
from depvet.update_analysis.errors import HistoryExtractionError
from depvet.update_analysis.history import (
    HistoryRangeExtractor,
    WalkStep,
    next_step,
)
from depvet.update_analysis.resolver import VersionRefResolver


class TestNextStep:
    """Test the walk step decision."""

    def test_boundary_stops_before_emitting(self, make_record):
        assert next_step(make_record("a"), "a", 0, 10) is WalkStep.STOP_AT_BOUNDARY

    def test_cap_stops(self, make_record):
        assert next_step(make_record("a"), "b", 10, 10) is WalkStep.STOP_AT_CAP

    def test_boundary_wins_over_cap(self, make_record):
        assert next_step(make_record("a"), "a", 10, 10) is WalkStep.STOP_AT_BOUNDARY

    def test_continue(self, make_record):
        assert next_step(make_record("a"), "b", 3, 10) is WalkStep.CONTINUE


class TestExactRange:
    """Test the primary walk between two resolved commits."""

    def test_range_excludes_from_node(self, fake_repository, make_history):
        repo = fake_repository(make_history(10))

        result = HistoryRangeExtractor().extract(repo, "c3", "c8")

        assert result.source is RangeSource.EXACT_RANGE
        assert [r.hash for r in result.records] == ["c8", "c7", "c6", "c5", "c4"]
        assert result.count == 5
        assert result.truncated is False

    def test_same_node_is_empty_without_walk(self, fake_repository, make_history):
        repo = fake_repository(make_history(5))

        result = HistoryRangeExtractor().extract(repo, "c2", "c2")

        assert result.count == 0
        assert result.source is RangeSource.EXACT_RANGE
        assert repo.walk_calls == []

    def test_cap_truncates_and_stays_exact(self, fake_repository, make_history):
        repo = fake_repository(make_history(500))

        result = HistoryRangeExtractor(cap=200).extract(repo, "c0", "c499")

        assert result.source is RangeSource.EXACT_RANGE
        assert result.count == 200
        assert result.truncated is True
        assert result.records[0].hash == "c499"
        assert result.records[-1].hash == "c300"

    def test_boundary_right_after_cap_is_not_truncated(
        self, fake_repository, make_history
    ):
        repo = fake_repository(make_history(10))

        result = HistoryRangeExtractor(cap=5).extract(repo, "c4", "c9")

        assert result.count == 5
        assert result.truncated is False

    def test_divergent_history_falls_back(self, fake_repository, make_history):
        """A from node that is not behind the to node cannot bound the walk."""
        repo = fake_repository(make_history(10))

        result = HistoryRangeExtractor().extract(repo, "c8", "c3")

        assert result.source is RangeSource.RECENT_FALLBACK
        assert result.records[0].hash == "c9"
        assert result.count == 10

    def test_shallow_boundary_at_to_node_deepens_and_stays_exact(
        self, fake_repository, make_history
    ):
        """A clone whose tip is the latest tag has no parents until deepened."""
        repo = fake_repository(make_history(6), shallow_boundary="c5")

        result = HistoryRangeExtractor().extract(repo, "c3", "c5")

        assert result.source is RangeSource.EXACT_RANGE
        assert [r.hash for r in result.records] == ["c5", "c4"]
        assert repo.deepen_calls == [200]

    def test_divergent_history_deepens_only_once(
        self, fake_repository, make_history
    ):
        repo = fake_repository(make_history(10))

        HistoryRangeExtractor().extract(repo, "c8", "c3")

        assert repo.deepen_calls == [200]

    def test_fallback_logs_warning(self, fake_repository, make_history, log_records):
        repo = fake_repository(make_history(4))

        HistoryRangeExtractor().extract(repo, None, "c2")

        warnings = [
            r["message"] for r in log_records if r["level"].name == "WARNING"
        ]
        assert "Using 4 recent commits instead of an exact range" in warnings

    def test_walk_error_falls_back(self, fake_repository, make_history):
        repo = fake_repository(make_history(4))

        result = HistoryRangeExtractor().extract(repo, "c0", "missing")

        assert result.source is RangeSource.RECENT_FALLBACK
        assert result.count == 4


class TestRecentFallback:
    """Test the HEAD based fallback."""

    def test_unresolved_node_uses_recent_history(self, fake_repository, make_history):
        repo = fake_repository(make_history(300))

        result = HistoryRangeExtractor().extract(repo, None, "c10")

        assert result.source is RangeSource.RECENT_FALLBACK
        assert result.count == 200
        assert result.truncated is True
        assert result.records[0].hash == "c299"
        assert repo.deepen_calls == [200]

    def test_fallback_is_sorted_newest_first(self, fake_repository, make_record):
        commits = [
            make_record("b", age=5),
            make_record("a", age=1),
            make_record("c", age=9),
        ]
        repo = fake_repository(commits)

        result = HistoryRangeExtractor().extract(repo, None, None)

        assert [r.hash for r in result.records] == ["a", "b", "c"]

    def test_unreadable_head_raises(self, fake_repository, make_history):
        repo = fake_repository(make_history(3), fail_head=True)

        with pytest.raises(HistoryExtractionError):
            HistoryRangeExtractor().extract(repo, None, None)

    def test_unreadable_history_raises(self, fake_repository, make_history):
        repo = fake_repository(make_history(3), fail_walk=True)

        with pytest.raises(HistoryExtractionError):
            HistoryRangeExtractor().extract(repo, "c0", "c2")


class TestExtractBetweenVersions:
    """Test version string entry point."""

    def test_equal_versions_short_circuit(self, fake_repository, make_history):
        repo = fake_repository(make_history(3))

        result = HistoryRangeExtractor().extract_between_versions(
            repo, VersionRefResolver(), "v1.0.0", "v1.0.0"
        )

        assert result.count == 0
        assert result.source is RangeSource.EXACT_RANGE
        assert repo.resolve_calls == []
        assert repo.fetch_tags_calls == 0

    def test_resolved_versions_give_exact_range(self, fake_repository, make_history):
        repo = fake_repository(
            make_history(6),
            refs={"refs/tags/v1.0.0": "c1", "refs/tags/v1.1.0": "c4"},
        )

        result = HistoryRangeExtractor().extract_between_versions(
            repo, VersionRefResolver(), "v1.0.0", "v1.1.0"
        )

        assert result.source is RangeSource.EXACT_RANGE
        assert [r.hash for r in result.records] == ["c4", "c3", "c2"]

    def test_unresolved_version_gives_fallback(self, fake_repository, make_history):
        repo = fake_repository(make_history(6), refs={"refs/tags/v1.1.0": "c4"})

        result = HistoryRangeExtractor().extract_between_versions(
            repo, VersionRefResolver(), "v0.9.0", "v1.1.0"
        )

        assert result.source is RangeSource.RECENT_FALLBACK
        assert result.count == 6
