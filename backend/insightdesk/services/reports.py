import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from insightdesk.core.errors import ValidationError
from insightdesk.database import storage_errors
from insightdesk.models.report import Report
from insightdesk.services import scheduler

logger = logging.getLogger(__name__)

REPORT_TEMPLATES = [
    {
        "type": "revenue_summary",
        "name": "Revenue Summary",
        "description": "Monthly revenue breakdown with trends and forecasts",
    },
    {
        "type": "user_analytics",
        "name": "User Analytics",
        "description": "User engagement, retention, and behavior analysis",
    },
    {
        "type": "performance_metrics",
        "name": "Performance Metrics",
        "description": "Key performance indicators and business metrics",
    },
    {
        "type": "marketing_attribution",
        "name": "Marketing Attribution",
        "description": "Marketing channel performance and ROI analysis",
    },
]

REPORT_STATUSES = ("all", "active", "inactive")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def list_templates() -> list[dict]:
    return [dict(t) for t in REPORT_TEMPLATES]


def get_template(template_type: str) -> dict | None:
    return next((t for t in REPORT_TEMPLATES if t["type"] == template_type), None)


def get_one(db: Session, id: UUID, user_id: str | None = None) -> Report | None:
    q = db.query(Report).filter(Report.id == id)
    if user_id:
        q = q.filter(Report.userId == user_id)
    return q.first()


def list_reports(
    db: Session,
    user_id: str,
    search: str | None = None,
    type: str | None = None,
    status: str | None = None,
) -> list[Report]:
    if status and status not in REPORT_STATUSES:
        raise ValidationError(f"Status must be one of {', '.join(REPORT_STATUSES)}")
    with storage_errors(db, "Failed to load reports"):
        q = (
            db.query(Report)
            .filter(Report.userId == user_id)
            .order_by(Report.createdAt.desc())
        )
        if search:
            q = q.filter(Report.name.ilike(f"%{search}%"))
        if type and type != "all":
            q = q.filter(Report.type == type)
        if status == "active":
            q = q.filter(Report.isActive.is_(True))
        elif status == "inactive":
            q = q.filter(Report.isActive.is_(False))
        return q.all()


def create_from_template(db: Session, user_id: str, template_type: str) -> Report:
    template = get_template(template_type)
    if template is None:
        raise ValidationError(f"Unknown report template: {template_type}")
    with storage_errors(db, "Failed to create report"):
        report = Report(
            userId=user_id,
            name=template["name"],
            type=template["type"],
            schedule=None,
            isActive=True,
            config={
                "template": template["type"],
                "description": template["description"],
            },
        )
        db.add(report)
        db.commit()
        db.refresh(report)
    logger.info("Report %s (%s) created for %s", report.id, report.type, user_id)
    return report


def generate(db: Session, report_id: UUID, user_id: str | None = None) -> Report | None:
    """Stamp lastGenerated. No document is rendered."""
    with storage_errors(db, "Failed to generate report"):
        report = get_one(db, report_id, user_id)
        if not report:
            return None
        now = _utcnow()
        report.lastGenerated = now
        report.updatedAt = now
        db.commit()
        db.refresh(report)
    logger.info("Report %s generated", report_id)
    return report


def toggle_active(
    db: Session, report_id: UUID, user_id: str | None = None
) -> Report | None:
    with storage_errors(db, "Failed to update report status"):
        report = get_one(db, report_id, user_id)
        if not report:
            return None
        report.isActive = not report.isActive
        report.updatedAt = _utcnow()
        db.commit()
        db.refresh(report)
    scheduler.sync_report_schedule(report)
    logger.info(
        "Report %s %s", report_id, "activated" if report.isActive else "paused"
    )
    return report


def set_schedule(
    db: Session,
    report_id: UUID,
    schedule: str | None,
    user_id: str | None = None,
) -> Report | None:
    schedule = (schedule or "").strip() or None
    if schedule:
        scheduler.build_cron_trigger(schedule)
    with storage_errors(db, "Failed to update report schedule"):
        report = get_one(db, report_id, user_id)
        if not report:
            return None
        report.schedule = schedule
        report.updatedAt = _utcnow()
        db.commit()
        db.refresh(report)
    scheduler.sync_report_schedule(report)
    return report


def delete(db: Session, report_id: UUID, user_id: str | None = None) -> bool:
    with storage_errors(db, "Failed to delete report"):
        report = get_one(db, report_id, user_id)
        if not report:
            return False
        db.delete(report)
        db.commit()
    scheduler.cancel_job(scheduler.report_job_id(report_id))
    logger.info("Report %s deleted", report_id)
    return True


def get_stats(db: Session, user_id: str) -> dict:
    with storage_errors(db, "Failed to load reports"):
        base = db.query(func.count(Report.id)).filter(Report.userId == user_id)
        return {
            "total": base.scalar() or 0,
            "active": base.filter(Report.isActive.is_(True)).scalar() or 0,
            "scheduled": base.filter(Report.schedule.isnot(None)).scalar() or 0,
            "generated": base.filter(Report.lastGenerated.isnot(None)).scalar() or 0,
        }
