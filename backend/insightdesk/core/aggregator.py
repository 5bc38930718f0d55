"""Reduce raw metric samples into dashboard values.

Samples are any objects exposing ``metricName``, ``metricValue``,
``dateRecorded`` and ``sourceId`` (ORM rows in the service layer, plain
dataclasses in tests).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Sequence

from insightdesk.core.errors import ValidationError

DATE_RANGES = (7, 30, 90)
DEFAULT_DATE_RANGE = 7
ALL = "all"

TREND_LABEL = "vs last period"


@dataclass
class MetricTrend:
    value: float  # absolute period-over-period change, percent, 2 decimals
    label: str = TREND_LABEL
    # Computed but not applied to value or label; kept for consumers that want it
    direction: str = "flat"  # up | down | flat

    def to_dict(self) -> dict:
        return {"value": self.value, "label": self.label, "direction": self.direction}


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _matching(samples: Iterable[Any], metric_name: str) -> list[Any]:
    return [s for s in samples if s.metricName == metric_name]


def metric_average(samples: Iterable[Any], metric_name: str) -> float:
    """Arithmetic mean of the named metric; 0 when there is no data yet."""
    values = [float(s.metricValue) for s in _matching(samples, metric_name)]
    if not values:
        return 0
    return sum(values) / len(values)


def metric_trend(samples: Iterable[Any], metric_name: str) -> MetricTrend | None:
    """Change between the two most recent samples of a metric.

    Returns None when fewer than two samples exist, or when the previous
    value is zero and the ratio is undefined.
    """
    ordered = sorted(
        _matching(samples, metric_name),
        key=lambda s: _as_date(s.dateRecorded),
        reverse=True,
    )
    if len(ordered) < 2:
        return None

    current = float(ordered[0].metricValue)
    previous = float(ordered[1].metricValue)
    if previous == 0:
        return None

    change = (current - previous) / previous * 100
    if change > 0:
        direction = "up"
    elif change < 0:
        direction = "down"
    else:
        direction = "flat"
    return MetricTrend(value=round(abs(change), 2), direction=direction)


def parse_date_range(value: str | int | None) -> int:
    """Accept ``7``, ``"30"`` or ``"90d"``; reject anything outside DATE_RANGES."""
    if value is None or value == "":
        return DEFAULT_DATE_RANGE
    raw = str(value).strip().lower()
    if raw.endswith("d"):
        raw = raw[:-1]
    try:
        days = int(raw)
    except ValueError:
        raise ValidationError(f"Invalid date range: {value}")
    if days not in DATE_RANGES:
        raise ValidationError(
            f"Date range must be one of {', '.join(f'{d}d' for d in DATE_RANGES)}"
        )
    return days


def filter_samples(
    samples: Sequence[Any],
    source_id: str | None = None,
    metric_name: str | None = None,
    days: int = DEFAULT_DATE_RANGE,
    today: date | None = None,
) -> list[Any]:
    if days not in DATE_RANGES:
        raise ValidationError(
            f"Date range must be one of {', '.join(f'{d}d' for d in DATE_RANGES)}"
        )
    today = today or date.today()
    cutoff = today - timedelta(days=days)

    result = []
    for s in samples:
        if (
            source_id
            and source_id != ALL
            and str(s.sourceId).lower() != str(source_id).strip().lower()
        ):
            continue
        if metric_name and metric_name != ALL and s.metricName != metric_name:
            continue
        recorded = _as_date(s.dateRecorded)
        if cutoff <= recorded <= today:
            result.append(s)
    return result
