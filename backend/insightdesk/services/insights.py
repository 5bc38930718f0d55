import logging
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from insightdesk.core.insight_feed import InsightFilter, filter_insights
from insightdesk.database import storage_errors
from insightdesk.models.insight import Insight

logger = logging.getLogger(__name__)


def get_one(db: Session, id: UUID, user_id: str) -> Insight | None:
    return (
        db.query(Insight)
        .filter(Insight.id == id, Insight.userId == user_id)
        .first()
    )


def list_insights(
    db: Session,
    user_id: str,
    filters: InsightFilter | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Insight]:
    with storage_errors(db, "Failed to load insights"):
        rows = (
            db.query(Insight)
            .filter(Insight.userId == user_id)
            .order_by(Insight.createdAt.desc())
            .all()
        )
    filtered = filter_insights(rows, filters or InsightFilter())
    return filtered[offset : offset + limit]


def dismiss(db: Session, user_id: str, insight_id: UUID) -> bool:
    with storage_errors(db, "Failed to dismiss insight"):
        insight = get_one(db, insight_id, user_id)
        if not insight:
            return False
        db.delete(insight)
        db.commit()
    logger.info("Insight %s dismissed by %s", insight_id, user_id)
    return True


def mark_read(db: Session, user_id: str, insight_id: UUID) -> Insight | None:
    with storage_errors(db, "Failed to update insight"):
        insight = get_one(db, insight_id, user_id)
        if not insight:
            return None
        insight.isRead = True
        db.commit()
        db.refresh(insight)
    return insight


def get_summary(db: Session, user_id: str) -> dict:
    with storage_errors(db, "Failed to load insights"):
        total = (
            db.query(func.count(Insight.id)).filter(Insight.userId == user_id).scalar()
            or 0
        )
        unread = (
            db.query(func.count(Insight.id))
            .filter(Insight.userId == user_id, Insight.isRead.is_(False))
            .scalar()
            or 0
        )
        by_severity = (
            db.query(Insight.severity, func.count(Insight.id))
            .filter(Insight.userId == user_id)
            .group_by(Insight.severity)
            .all()
        )
        by_type = (
            db.query(Insight.type, func.count(Insight.id))
            .filter(Insight.userId == user_id)
            .group_by(Insight.type)
            .all()
        )
    return {
        "total": total,
        "unread": unread,
        "bySeverity": {s.value: c for s, c in by_severity},
        "byType": {t.value: c for t, c in by_type},
    }
