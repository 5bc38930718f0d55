"""
Tests for insight feed filtering
"""
from dataclasses import dataclass

from insightdesk.core.insight_feed import InsightFilter, filter_insights
from insightdesk.models.insight import InsightCategory, InsightSeverity, InsightType


@dataclass
class Item:
    title: str
    description: str
    severity: object
    type: object
    category: object


FEED = [
    Item("Unusual Traffic Spike", "Organic search surge", InsightSeverity.MEDIUM, InsightType.ANOMALY, InsightCategory.TRAFFIC),
    Item("Revenue Growth Trend", "MRR trending upward", InsightSeverity.LOW, InsightType.TREND, InsightCategory.REVENUE),
    Item("Conversion Rate Drop", "Checkout conversion fell on mobile", InsightSeverity.HIGH, InsightType.ANOMALY, InsightCategory.CONVERSION),
    Item("Mobile App Crashes", "Crash rate up on iOS", InsightSeverity.CRITICAL, InsightType.ANOMALY, InsightCategory.USER),
    # Plain strings behave the same as enum members
    Item("Q4 Revenue Forecast", "Holiday campaigns drive growth", "low", "forecast", "revenue"),
]


def _titles(items):
    return [i.title for i in items]


class TestSearch:
    """Free-text search over title and description"""

    def test_matches_title_case_insensitively(self):
        assert _titles(filter_insights(FEED, InsightFilter(search="REVENUE"))) == [
            "Revenue Growth Trend",
            "Q4 Revenue Forecast",
        ]

    def test_matches_description(self):
        assert _titles(filter_insights(FEED, InsightFilter(search="mobile"))) == [
            "Conversion Rate Drop",
            "Mobile App Crashes",
        ]

    def test_no_match(self):
        assert filter_insights(FEED, InsightFilter(search="churn")) == []


class TestExactFilters:
    """Severity, type and category filters"""

    def test_empty_filter_keeps_everything_in_order(self):
        assert filter_insights(FEED, InsightFilter()) == FEED

    def test_all_disables_dimension(self):
        f = InsightFilter(severity="all", type="all", category="all")
        assert filter_insights(FEED, f) == FEED

    def test_severity(self):
        assert _titles(filter_insights(FEED, InsightFilter(severity="low"))) == [
            "Revenue Growth Trend",
            "Q4 Revenue Forecast",
        ]

    def test_type(self):
        assert len(filter_insights(FEED, InsightFilter(type="anomaly"))) == 3

    def test_category(self):
        assert _titles(filter_insights(FEED, InsightFilter(category="user"))) == [
            "Mobile App Crashes"
        ]

    def test_dimensions_are_and_combined(self):
        f = InsightFilter(search="rate", type="anomaly", severity="high")
        assert _titles(filter_insights(FEED, f)) == ["Conversion Rate Drop"]

    def test_order_of_application_does_not_matter(self):
        combined = filter_insights(FEED, InsightFilter(search="revenue", severity="low", category="revenue"))
        stepwise = filter_insights(
            filter_insights(
                filter_insights(FEED, InsightFilter(category="revenue")),
                InsightFilter(severity="low"),
            ),
            InsightFilter(search="revenue"),
        )
        assert combined == stepwise
