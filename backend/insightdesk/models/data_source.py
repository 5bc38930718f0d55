import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, String, Uuid
from sqlalchemy.sql import func

from insightdesk.database import Base, JSONType


class DataSourceStatus(str, enum.Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"
    SYNCING = "syncing"


class DataSource(Base):
    __tablename__ = "data_sources"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    userId = Column(String, nullable=False, index=True)

    name = Column(String, nullable=False)
    # Catalog key, e.g. "stripe" or "google_analytics". One row per (userId, type).
    type = Column(String, nullable=False)
    status = Column(
        Enum(
            DataSourceStatus,
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
            name="data_sources_status_enum",
        ),
        nullable=False,
        default=DataSourceStatus.DISCONNECTED,
    )
    lastSync = Column(DateTime(timezone=True), nullable=True)
    config = Column(JSONType, nullable=True)

    createdAt = Column(DateTime(timezone=True), server_default=func.now())
    updatedAt = Column(
        DateTime(timezone=True),
        default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
