"""Seed the demo insight feed. Call from startup or manually."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from insightdesk.database import Base, SessionLocal, engine
from insightdesk.models.insight import (
    Insight,
    InsightCategory,
    InsightImpact,
    InsightSeverity,
    InsightType,
)

# (hours ago, fields): the feed a new workspace shows before real generation runs
SEED_INSIGHTS = [
    (
        2,
        {
            "type": InsightType.ANOMALY,
            "title": "Unusual Traffic Spike",
            "description": "Website traffic increased by 150% in the last 24 hours, primarily from organic search. This correlates with a recent content marketing campaign.",
            "severity": InsightSeverity.MEDIUM,
            "category": InsightCategory.TRAFFIC,
            "impact": InsightImpact.POSITIVE,
            "confidence": 85,
            "dataSource": "Google Analytics",
        },
    ),
    (
        4,
        {
            "type": InsightType.RECOMMENDATION,
            "title": "Optimize Email Campaign",
            "description": "Your email open rates could improve by 25% with better timing. Analysis shows optimal send times are Tuesday 10 AM and Thursday 2 PM.",
            "severity": InsightSeverity.LOW,
            "category": InsightCategory.MARKETING,
            "impact": InsightImpact.POSITIVE,
            "confidence": 92,
            "dataSource": "Mailchimp Analytics",
        },
    ),
    (
        6,
        {
            "type": InsightType.TREND,
            "title": "Revenue Growth Trend",
            "description": "Monthly recurring revenue is trending upward by 12% month-over-month. SaaS segment shows strongest growth at 18%.",
            "severity": InsightSeverity.LOW,
            "category": InsightCategory.REVENUE,
            "impact": InsightImpact.POSITIVE,
            "confidence": 88,
            "dataSource": "Stripe Analytics",
        },
    ),
    (
        8,
        {
            "type": InsightType.ANOMALY,
            "title": "Conversion Rate Drop",
            "description": "Checkout conversion rate dropped 15% in the last week. Mobile users show the largest decline at 22%.",
            "severity": InsightSeverity.HIGH,
            "category": InsightCategory.CONVERSION,
            "impact": InsightImpact.NEGATIVE,
            "confidence": 78,
            "dataSource": "Shopify Analytics",
        },
    ),
    (
        12,
        {
            "type": InsightType.FORECAST,
            "title": "Q4 Revenue Forecast",
            "description": "Based on current trends, Q4 revenue is projected to increase by 23% compared to Q3. Holiday season campaigns are driving growth.",
            "severity": InsightSeverity.LOW,
            "category": InsightCategory.REVENUE,
            "impact": InsightImpact.POSITIVE,
            "confidence": 76,
            "dataSource": "Internal Analytics",
        },
    ),
    (
        24,
        {
            "type": InsightType.BENCHMARK,
            "title": "Industry Performance Comparison",
            "description": "Your conversion rate of 3.24% is 15% above industry average. However, cart abandonment is 8% higher than competitors.",
            "severity": InsightSeverity.MEDIUM,
            "category": InsightCategory.CONVERSION,
            "impact": InsightImpact.NEUTRAL,
            "confidence": 82,
            "dataSource": "Industry Reports",
        },
    ),
    (
        36,
        {
            "type": InsightType.RECOMMENDATION,
            "title": "User Retention Strategy",
            "description": "Implementing a welcome email sequence could improve 30-day retention by 18%. Users who receive onboarding emails show 40% higher engagement.",
            "severity": InsightSeverity.LOW,
            "category": InsightCategory.USER,
            "impact": InsightImpact.POSITIVE,
            "confidence": 89,
            "dataSource": "User Analytics",
        },
    ),
    (
        48,
        {
            "type": InsightType.ANOMALY,
            "title": "Mobile App Crashes",
            "description": "Mobile app crash rate increased by 45% in the last 48 hours. iOS users are most affected, with 67% of crashes occurring on version 15.0.",
            "severity": InsightSeverity.CRITICAL,
            "category": InsightCategory.USER,
            "impact": InsightImpact.NEGATIVE,
            "confidence": 95,
            "dataSource": "Crashlytics",
        },
    ),
]


def seed_insights(db: Session, user_id: str) -> int:
    """Insert the demo feed for a user who has no insights yet. Idempotent."""
    if db.query(Insight.id).filter(Insight.userId == user_id).first():
        return 0
    now = datetime.now(timezone.utc)
    for hours_ago, data in SEED_INSIGHTS:
        db.add(
            Insight(userId=user_id, createdAt=now - timedelta(hours=hours_ago), **data)
        )
    db.commit()
    return len(SEED_INSIGHTS)


def seed_demo_if_empty(user_id: str | None) -> int:
    """Create all tables and seed the demo feed for ``user_id`` if it is empty."""
    if not user_id:
        return 0
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        return seed_insights(db, user_id)
    finally:
        db.close()
