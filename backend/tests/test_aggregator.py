"""
Tests for metric aggregation: averages, period-over-period trends, date range
parsing and dashboard filtering.
"""
import uuid
from dataclasses import dataclass
from datetime import date, timedelta

import pytest

from insightdesk.core.aggregator import (
    TREND_LABEL,
    filter_samples,
    metric_average,
    metric_trend,
    parse_date_range,
)
from insightdesk.core.errors import ValidationError

TODAY = date(2024, 6, 30)


@dataclass
class Sample:
    metricName: str
    metricValue: float
    dateRecorded: date
    sourceId: str | None = None


def _series(name, values, source_id="src-1"):
    """Most recent value last; one sample per day ending TODAY."""
    n = len(values)
    return [
        Sample(name, v, TODAY - timedelta(days=n - 1 - i), source_id)
        for i, v in enumerate(values)
    ]


class TestMetricAverage:
    """Arithmetic mean over matching samples"""

    def test_mean_of_matching_samples(self):
        samples = _series("total_revenue", [10, 20, 30]) + _series("page_views", [999])
        assert metric_average(samples, "total_revenue") == 20

    def test_no_matching_samples_is_zero(self):
        assert metric_average(_series("page_views", [5, 6]), "total_revenue") == 0
        assert metric_average([], "total_revenue") == 0

    def test_single_sample(self):
        assert metric_average(_series("user_count", [42.5]), "user_count") == 42.5


class TestMetricTrend:
    """Change between the two most recent samples"""

    def test_increase(self):
        trend = metric_trend(_series("total_revenue", [80, 100]), "total_revenue")
        assert trend is not None
        assert trend.value == 25.0
        assert trend.label == TREND_LABEL
        assert trend.direction == "up"

    def test_decrease_reports_absolute_value(self):
        trend = metric_trend(_series("total_revenue", [100, 80]), "total_revenue")
        assert trend.value == 20.0
        assert trend.direction == "down"

    def test_uses_most_recent_two_regardless_of_input_order(self):
        samples = list(reversed(_series("total_revenue", [50, 80, 100])))
        trend = metric_trend(samples, "total_revenue")
        assert trend.value == 25.0

    def test_rounded_to_two_decimals(self):
        trend = metric_trend(_series("conversion_rate", [3, 4]), "conversion_rate")
        assert trend.value == 33.33

    def test_fewer_than_two_samples_has_no_trend(self):
        assert metric_trend(_series("total_revenue", [100]), "total_revenue") is None
        assert metric_trend([], "total_revenue") is None

    def test_zero_previous_value_has_no_trend(self):
        assert metric_trend(_series("total_revenue", [0, 100]), "total_revenue") is None

    def test_flat(self):
        trend = metric_trend(_series("page_views", [100, 100]), "page_views")
        assert trend.value == 0
        assert trend.direction == "flat"

    def test_to_dict(self):
        trend = metric_trend(_series("total_revenue", [80, 100]), "total_revenue")
        assert trend.to_dict() == {
            "value": 25.0,
            "label": "vs last period",
            "direction": "up",
        }


class TestParseDateRange:
    """Date range query values"""

    @pytest.mark.parametrize("raw,expected", [("7d", 7), ("30d", 30), ("90", 90), (30, 30)])
    def test_accepted_values(self, raw, expected):
        assert parse_date_range(raw) == expected

    def test_default_is_seven_days(self):
        assert parse_date_range(None) == 7
        assert parse_date_range("") == 7

    @pytest.mark.parametrize("raw", ["14d", "abc", "0", "-7d"])
    def test_rejected_values(self, raw):
        with pytest.raises(ValidationError):
            parse_date_range(raw)


class TestFilterSamples:
    """Source, metric and date-window filtering"""

    def test_window_is_inclusive_of_cutoff_and_today(self):
        samples = _series("page_views", list(range(10)))  # TODAY-9 .. TODAY
        kept = filter_samples(samples, days=7, today=TODAY)
        assert len(kept) == 8
        assert min(s.dateRecorded for s in kept) == TODAY - timedelta(days=7)

    def test_future_samples_are_excluded(self):
        samples = [Sample("page_views", 1, TODAY + timedelta(days=1))]
        assert filter_samples(samples, days=7, today=TODAY) == []

    def test_source_filter(self):
        samples = _series("page_views", [1, 2], "src-1") + _series("page_views", [3], "src-2")
        kept = filter_samples(samples, source_id="src-2", days=7, today=TODAY)
        assert [s.metricValue for s in kept] == [3]

    def test_source_filter_ignores_uuid_case(self):
        source_id = uuid.uuid4()
        samples = _series("page_views", [1], source_id) + _series("page_views", [2], uuid.uuid4())
        kept = filter_samples(samples, source_id=str(source_id).upper(), days=7, today=TODAY)
        assert [s.metricValue for s in kept] == [1]

    def test_metric_filter(self):
        samples = _series("page_views", [1, 2]) + _series("user_count", [3])
        kept = filter_samples(samples, metric_name="user_count", days=7, today=TODAY)
        assert [s.metricName for s in kept] == ["user_count"]

    def test_all_disables_filters(self):
        samples = _series("page_views", [1], "src-1") + _series("user_count", [2], "src-2")
        kept = filter_samples(samples, source_id="all", metric_name="all", days=7, today=TODAY)
        assert len(kept) == 2

    def test_invalid_window(self):
        with pytest.raises(ValidationError):
            filter_samples([], days=14, today=TODAY)
