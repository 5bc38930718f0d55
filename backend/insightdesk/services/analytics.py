import logging
import random
from datetime import date, timedelta

from sqlalchemy.orm import Session

from insightdesk.core.aggregator import (
    DEFAULT_DATE_RANGE,
    filter_samples,
    metric_average,
    metric_trend,
)
from insightdesk.database import storage_errors
from insightdesk.models.data_source import DataSource, DataSourceStatus
from insightdesk.models.metric_sample import MetricSample

logger = logging.getLogger(__name__)

_LOAD_LIMIT = 100

# Key metric cards shown above the charts
SUMMARY_METRICS = [
    ("total_revenue", "Total Revenue"),
    ("user_count", "Total Users"),
    ("conversion_rate", "Conversion Rate"),
    ("page_views", "Page Views"),
]

SAMPLE_METRICS = [
    "total_revenue",
    "monthly_revenue",
    "user_count",
    "conversion_rate",
    "page_views",
    "session_duration",
    "bounce_rate",
    "new_users",
    "returning_users",
    "cart_abandonment",
    "avg_order_value",
]
SAMPLE_DAYS = 30


def list_samples(db: Session, user_id: str, limit: int = _LOAD_LIMIT) -> list[MetricSample]:
    with storage_errors(db, "Failed to load analytics data"):
        return (
            db.query(MetricSample)
            .filter(MetricSample.userId == user_id)
            .order_by(MetricSample.dateRecorded.desc(), MetricSample.createdAt.desc())
            .limit(limit)
            .all()
        )


def _connected_sources(db: Session, user_id: str) -> list[DataSource]:
    return (
        db.query(DataSource)
        .filter(
            DataSource.userId == user_id,
            DataSource.status == DataSourceStatus.CONNECTED,
        )
        .all()
    )


def get_dashboard(
    db: Session,
    user_id: str,
    source_id: str | None = None,
    metric: str | None = None,
    days: int = DEFAULT_DATE_RANGE,
    today: date | None = None,
) -> dict:
    with storage_errors(db, "Failed to load analytics data"):
        sources = _connected_sources(db, user_id)
    samples = list_samples(db, user_id)
    filtered = filter_samples(
        samples, source_id=source_id, metric_name=metric, days=days, today=today
    )

    # Cards summarise everything loaded; the filters only narrow the sample list
    summary = []
    for name, label in SUMMARY_METRICS:
        trend = metric_trend(samples, name)
        summary.append(
            {
                "metricName": name,
                "label": label,
                "value": metric_average(samples, name),
                "trend": trend.to_dict() if trend else None,
            }
        )

    return {
        "sources": sources,
        "samples": filtered,
        "count": len(filtered),
        "days": days,
        "summary": summary,
    }


def generate_sample_data(
    db: Session,
    user_id: str,
    rng: random.Random | None = None,
    today: date | None = None,
) -> int:
    """Populate demo metrics for a user who has sources but no data yet.

    Returns the number of samples inserted (0 when the user has no connected
    source or already has data).
    """
    rng = rng or random.Random()
    today = today or date.today()

    with storage_errors(db, "Failed to generate sample data"):
        sources = _connected_sources(db, user_id)
        if not sources:
            logger.info("Sample data skipped for %s: no connected sources", user_id)
            return 0
        if db.query(MetricSample.id).filter(MetricSample.userId == user_id).first():
            return 0

        rows = []
        for i in range(SAMPLE_DAYS):
            recorded = today - timedelta(days=i)
            for metric in SAMPLE_METRICS:
                rows.append(
                    MetricSample(
                        userId=user_id,
                        metricName=metric,
                        metricValue=float(round(rng.random() * 1000 + 100)),
                        metricData={
                            "trend": "up" if rng.random() > 0.5 else "down",
                            "change": round((rng.random() - 0.5) * 20 * 100) / 100,
                        },
                        dateRecorded=recorded,
                        sourceId=rng.choice(sources).id,
                    )
                )
        db.add_all(rows)
        db.commit()

    logger.info("Generated %d sample metrics for user %s", len(rows), user_id)
    return len(rows)
