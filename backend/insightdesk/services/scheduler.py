"""Background jobs: pending data-source syncs and cron-scheduled reports.

One BackgroundScheduler per process, started and stopped by the FastAPI
lifespan. Each job opens its own DB session. Job ids double as cancellation
tokens: ``sync:<source id>`` and ``report:<report id>``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from insightdesk.core.errors import ValidationError
from insightdesk.database import SessionLocal
from insightdesk.models.report import Report

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(timezone="UTC")


def start() -> None:
    if not scheduler.running:
        scheduler.start()
        logger.info("Background scheduler started")


def shutdown() -> None:
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")


def sync_job_id(source_id: UUID | str) -> str:
    return f"sync:{source_id}"


def report_job_id(report_id: UUID | str) -> str:
    return f"report:{report_id}"


def cancel_job(job_id: str) -> bool:
    try:
        scheduler.remove_job(job_id)
    except JobLookupError:
        return False
    logger.info("Cancelled job %s", job_id)
    return True


# ── Data source sync ──────────────────────────────────────────────────


def _complete_sync_job(source_id: str) -> None:
    from insightdesk.services.data_sources import complete_sync

    db = SessionLocal()
    try:
        complete_sync(db, UUID(source_id))
    except Exception as e:
        logger.exception("Sync completion failed for source %s: %s", source_id, e)
    finally:
        db.close()


def schedule_sync_completion(source_id: UUID, delay_seconds: int) -> None:
    job_id = sync_job_id(source_id)
    # A second refresh restarts the countdown instead of queueing another job
    cancel_job(job_id)
    run_at = datetime.now(timezone.utc) + timedelta(seconds=max(0, delay_seconds))
    scheduler.add_job(
        _complete_sync_job,
        "date",
        run_date=run_at,
        args=[str(source_id)],
        id=job_id,
        replace_existing=True,
    )
    logger.info("Sync for source %s completes at %s", source_id, run_at.isoformat())


def cancel_sync_completion(source_id: UUID) -> bool:
    return cancel_job(sync_job_id(source_id))


# ── Report schedules ──────────────────────────────────────────────────


def build_cron_trigger(expression: str) -> CronTrigger:
    try:
        return CronTrigger.from_crontab(expression, timezone="UTC")
    except ValueError as exc:
        raise ValidationError(
            f"Invalid schedule '{expression}': expected a 5-field crontab expression"
        ) from exc


def _generate_report_job(report_id: str) -> None:
    from insightdesk.services.reports import generate

    db = SessionLocal()
    try:
        logger.info("Scheduled generation for report %s starting…", report_id)
        generate(db, UUID(report_id))
    except Exception as e:
        logger.exception("Scheduled generation for report %s failed: %s", report_id, e)
    finally:
        db.close()


def sync_report_schedule(report: Report) -> None:
    """Make the scheduler match the report: a cron job iff active and scheduled."""
    job_id = report_job_id(report.id)
    cancel_job(job_id)
    if not (report.isActive and report.schedule):
        return
    scheduler.add_job(
        _generate_report_job,
        build_cron_trigger(report.schedule),
        args=[str(report.id)],
        id=job_id,
        replace_existing=True,
    )
    logger.info("Report %s scheduled with '%s'", report.id, report.schedule)


def register_report_schedules(db: Session) -> int:
    reports = (
        db.query(Report)
        .filter(Report.isActive.is_(True), Report.schedule.isnot(None))
        .all()
    )
    registered = 0
    for report in reports:
        try:
            sync_report_schedule(report)
            registered += 1
        except ValidationError as exc:
            logger.warning("Skipping report %s: %s", report.id, exc.message)
    return registered
