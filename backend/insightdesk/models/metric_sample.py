import uuid

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, String, Uuid
from sqlalchemy.sql import func

from insightdesk.database import Base, JSONType


class MetricSample(Base):
    """One time-series fact: a metric value recorded for a day."""

    __tablename__ = "analytics_data"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    userId = Column(String, nullable=False, index=True)
    sourceId = Column(
        Uuid,
        ForeignKey("data_sources.id", ondelete="SET NULL"),
        nullable=True,
    )

    metricName = Column(String, nullable=False, index=True)
    metricValue = Column(Float, nullable=False)
    # Opaque payload from the integration, e.g. {"trend": "up", "change": 4.2}
    metricData = Column(JSONType, nullable=True)
    dateRecorded = Column(Date, nullable=False)

    createdAt = Column(DateTime(timezone=True), server_default=func.now())
