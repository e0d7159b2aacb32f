"""Tests for stats windows and grouping."""

from datetime import datetime, timezone

import pytest

from slam.exceptions import ValidationError
from slam.schemas.sport import SportKind, SportRecord
from slam.schemas.stats import StatKind, StatsParam
from slam.services.stats import (
    TOTAL_WINDOW,
    group_by_month,
    group_by_month_day,
    group_by_type,
    group_by_week_day,
    resolve_window,
    summarize,
)


def ts(*args):
    return int(datetime(*args, tzinfo=timezone.utc).timestamp())


def sport(start_time, kind=SportKind.SWIMMING, calories=10, duration=60, distance=100):
    return SportRecord(
        kind=kind,
        start_time=start_time,
        calories=calories,
        duration_second=duration,
        distance_meter=distance,
    )


# ======================================================================
# Windows
# ======================================================================


class TestResolveWindow:

    def test_total(self):
        assert resolve_window(StatsParam(kind=StatKind.TOTAL)) == TOTAL_WINDOW
        assert resolve_window(StatsParam(kind=StatKind.TOTAL, year=-5)) == TOTAL_WINDOW

    def test_year(self):
        assert resolve_window(StatsParam(kind=StatKind.YEAR, year=2025)) == (ts(2025, 1, 1), ts(2026, 1, 1))

    def test_month(self):
        param = StatsParam(kind=StatKind.MONTH, year=2024, month=2)
        assert resolve_window(param) == (ts(2024, 2, 1), ts(2024, 3, 1))

    def test_december_rolls_over(self):
        param = StatsParam(kind=StatKind.MONTH, year=2025, month=12)
        assert resolve_window(param) == (ts(2025, 12, 1), ts(2026, 1, 1))

    def test_week(self):
        param = StatsParam(kind=StatKind.WEEK, year=2025, week=47)
        assert resolve_window(param) == (ts(2025, 11, 17), ts(2025, 11, 24))

    def test_first_week_starts_in_previous_year(self):
        param = StatsParam(kind=StatKind.WEEK, year=2025, week=1)
        assert resolve_window(param) == (ts(2024, 12, 30), ts(2025, 1, 6))

    def test_week_53_when_present(self):
        param = StatsParam(kind=StatKind.WEEK, year=2026, week=53)
        assert resolve_window(param)[0] == ts(2026, 12, 28)

    @pytest.mark.parametrize("param", [
        StatsParam(kind=StatKind.MONTH, year=2025),
        StatsParam(kind=StatKind.MONTH, year=2025, month=0),
        StatsParam(kind=StatKind.MONTH, year=2025, month=13),
        StatsParam(kind=StatKind.WEEK, year=2025),
        StatsParam(kind=StatKind.WEEK, year=2025, week=0),
        StatsParam(kind=StatKind.WEEK, year=2025, week=53),
        StatsParam(kind=StatKind.YEAR, year=0),
        StatsParam(kind=StatKind.YEAR, year=9999),
    ])
    def test_invalid(self, param):
        with pytest.raises(ValidationError):
            resolve_window(param)


# ======================================================================
# Grouping
# ======================================================================


class TestGrouping:

    def test_group_by_month(self):
        buckets = group_by_month([
            sport(ts(2025, 11, 17)),
            sport(ts(2025, 1, 3), calories=5),
            sport(ts(2025, 11, 1), duration=40),
        ])
        assert [(b.date, b.count, b.calories, b.duration) for b in buckets] == [
            (1, 1, 5, 60),
            (11, 2, 20, 100),
        ]

    def test_group_by_month_day(self):
        buckets = group_by_month_day([sport(ts(2025, 11, 17, 23, 59)), sport(ts(2025, 11, 1))])
        assert [b.date for b in buckets] == [1, 17]

    def test_group_by_week_day(self):
        buckets = group_by_week_day([sport(ts(2025, 11, 23)), sport(ts(2025, 11, 17))])
        assert [b.date for b in buckets] == [1, 7]

    def test_unrepresentable_time_skipped(self):
        buckets = group_by_month([sport(2 ** 62), sport(ts(2025, 3, 1))])
        assert [b.date for b in buckets] == [3]

    def test_group_by_type(self):
        buckets = group_by_type([
            sport(1, SportKind.SWIMMING, distance=1000),
            sport(2, SportKind.RUNNING, distance=5000),
            sport(3, SportKind.SWIMMING, distance=500),
            sport(4, SportKind.CYCLING),
        ])
        assert [b.kind for b in buckets] == [SportKind.CYCLING, SportKind.RUNNING, SportKind.SWIMMING]
        assert buckets[2].count == 2
        assert buckets[2].distance_meter == 1500

    def test_empty(self):
        assert group_by_month([]) == []
        assert group_by_type([]) == []


# ======================================================================
# Summary
# ======================================================================


class TestSummarize:

    def _sports(self):
        return [
            sport(ts(2025, 11, 17), SportKind.SWIMMING, calories=123, duration=600, distance=1000),
            sport(ts(2025, 11, 18), SportKind.RUNNING, calories=300, duration=1800, distance=5000),
            sport(ts(2025, 2, 1), SportKind.CYCLING, calories=50, duration=900, distance=8000),
        ]

    def test_year_summary(self):
        summary = summarize(StatKind.YEAR, self._sports(), earliest_year=2023)

        assert summary.total_count == 3
        assert summary.total_calories == 473
        assert summary.total_duration_second == 3300
        assert summary.total_distance_meter == 14000
        assert summary.earliest_year == 2023
        assert len(summary.sports) == 3
        assert [b.date for b in summary.buckets] == [2, 11]

    def test_bucket_sums_match_totals(self):
        summary = summarize(StatKind.YEAR, self._sports())
        assert sum(b.count for b in summary.buckets) == summary.total_count
        assert sum(b.calories for b in summary.buckets) == summary.total_calories
        assert sum(b.duration for b in summary.type_buckets) == summary.total_duration_second
        assert sum(b.distance_meter for b in summary.type_buckets) == summary.total_distance_meter

    def test_total_has_no_details(self):
        summary = summarize(StatKind.TOTAL, self._sports(), earliest_year=2023)
        assert summary.buckets == []
        assert summary.sports == []
        assert summary.earliest_year is None
        assert summary.total_count == 3
        assert len(summary.type_buckets) == 3

    def test_week_summary(self):
        summary = summarize(StatKind.WEEK, self._sports()[:2])
        assert [b.date for b in summary.buckets] == [1, 2]
        assert summary.earliest_year is None

    def test_empty(self):
        summary = summarize(StatKind.MONTH, [])
        assert summary.total_count == 0
        assert summary.buckets == []
        assert summary.type_buckets == []
