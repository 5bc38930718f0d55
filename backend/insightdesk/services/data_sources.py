import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from insightdesk.config import settings
from insightdesk.core.errors import ValidationError
from insightdesk.database import storage_errors
from insightdesk.models.data_source import DataSource, DataSourceStatus
from insightdesk.services import scheduler

logger = logging.getLogger(__name__)

AVAILABLE_SOURCES = [
    {"type": "salesforce", "name": "Salesforce", "icon": "🏢", "category": "CRM"},
    {"type": "hubspot", "name": "HubSpot", "icon": "🟠", "category": "CRM"},
    {"type": "shopify", "name": "Shopify", "icon": "🛒", "category": "E-commerce"},
    {"type": "stripe", "name": "Stripe", "icon": "💳", "category": "Payments"},
    {
        "type": "google_analytics",
        "name": "Google Analytics",
        "icon": "📊",
        "category": "Analytics",
    },
    {
        "type": "facebook_ads",
        "name": "Facebook Ads",
        "icon": "📘",
        "category": "Advertising",
    },
    {
        "type": "mailchimp",
        "name": "Mailchimp",
        "icon": "📧",
        "category": "Email Marketing",
    },
    {"type": "quickbooks", "name": "QuickBooks", "icon": "📋", "category": "Accounting"},
    {"type": "paypal", "name": "PayPal", "icon": "💰", "category": "Payments"},
    {"type": "instagram", "name": "Instagram", "icon": "📷", "category": "Social Media"},
    {"type": "linkedin", "name": "LinkedIn", "icon": "💼", "category": "Social Media"},
    {"type": "twitter", "name": "Twitter", "icon": "🐦", "category": "Social Media"},
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def list_available(search: str | None = None, category: str | None = None) -> list[dict]:
    term = (search or "").lower()
    return [
        dict(s)
        for s in AVAILABLE_SOURCES
        if (term in s["name"].lower() or term in s["type"].lower())
        and (not category or category == "all" or s["category"] == category)
    ]


def get_catalog_entry(source_type: str) -> dict | None:
    return next((s for s in AVAILABLE_SOURCES if s["type"] == source_type), None)


def get_one(db: Session, id: UUID, user_id: str | None = None) -> DataSource | None:
    q = db.query(DataSource).filter(DataSource.id == id)
    if user_id:
        q = q.filter(DataSource.userId == user_id)
    return q.first()


def list_connected(
    db: Session,
    user_id: str,
    status: str | None = None,
    search: str | None = None,
) -> list[DataSource]:
    if status and status != "all" and status not in {s.value for s in DataSourceStatus}:
        raise ValidationError(f"Unknown data source status: {status}")
    with storage_errors(db, "Failed to load data sources"):
        q = (
            db.query(DataSource)
            .filter(DataSource.userId == user_id)
            .order_by(DataSource.createdAt.desc())
        )
        if status and status != "all":
            q = q.filter(DataSource.status == status)
        if search:
            q = q.filter(DataSource.name.ilike(f"%{search}%"))
        return q.all()


def toggle_connection(db: Session, user_id: str, source_type: str) -> DataSource:
    """Connect, disconnect or reconnect depending on the current row.

    No row: create it connected. Connected: disconnect and clear lastSync.
    Any other status: reconnect the same row and stamp lastSync.
    """
    entry = get_catalog_entry(source_type)
    if entry is None:
        raise ValidationError(f"Unknown data source type: {source_type}")

    disconnected = False
    with storage_errors(db, "Failed to connect data source"):
        source = (
            db.query(DataSource)
            .filter(DataSource.userId == user_id, DataSource.type == source_type)
            .first()
        )
        now = _utcnow()
        if source is None:
            source = DataSource(
                userId=user_id,
                name=entry["name"],
                type=source_type,
                status=DataSourceStatus.CONNECTED,
                lastSync=now,
                config={},
            )
            db.add(source)
        elif source.status == DataSourceStatus.CONNECTED:
            source.status = DataSourceStatus.DISCONNECTED
            source.lastSync = None
            disconnected = True
        else:
            source.status = DataSourceStatus.CONNECTED
            source.lastSync = now
            source.updatedAt = now
        db.commit()
        db.refresh(source)

    if disconnected:
        scheduler.cancel_sync_completion(source.id)
        logger.info("%s disconnected for user %s", entry["name"], user_id)
    else:
        logger.info("%s connected for user %s", entry["name"], user_id)
    return source


def refresh(
    db: Session,
    source_id: UUID,
    user_id: str | None = None,
    delay_seconds: int | None = None,
) -> DataSource | None:
    """Mark a source as syncing and schedule its completion."""
    with storage_errors(db, "Failed to refresh data source"):
        source = get_one(db, source_id, user_id)
        if source is None:
            return None
        source.status = DataSourceStatus.SYNCING
        source.updatedAt = _utcnow()
        db.commit()
        db.refresh(source)

    delay = settings.sync_delay_seconds if delay_seconds is None else delay_seconds
    scheduler.schedule_sync_completion(source.id, delay)
    return source


def complete_sync(db: Session, source_id: UUID) -> DataSource | None:
    with storage_errors(db, "Failed to refresh data source"):
        source = get_one(db, source_id)
        if source is None:
            logger.warning("Sync completion: data source %s no longer exists", source_id)
            return None
        if source.status != DataSourceStatus.SYNCING:
            logger.info(
                "Sync completion: source %s is %s, leaving unchanged",
                source_id,
                source.status.value,
            )
            return source
        now = _utcnow()
        source.status = DataSourceStatus.CONNECTED
        source.lastSync = now
        source.updatedAt = now
        db.commit()
        db.refresh(source)
    logger.info("Sync complete for %s (%s)", source.name, source_id)
    return source


def get_stats(db: Session, user_id: str) -> dict:
    with storage_errors(db, "Failed to load data sources"):
        rows = (
            db.query(DataSource.status, func.count(DataSource.id))
            .filter(DataSource.userId == user_id)
            .group_by(DataSource.status)
            .all()
        )
    by_status = {s.value: c for s, c in rows}
    return {
        "total": sum(by_status.values()),
        "connected": by_status.get(DataSourceStatus.CONNECTED.value, 0),
        "syncing": by_status.get(DataSourceStatus.SYNCING.value, 0),
        "error": by_status.get(DataSourceStatus.ERROR.value, 0),
    }
