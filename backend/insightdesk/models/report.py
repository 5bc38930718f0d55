import uuid

from sqlalchemy import Boolean, Column, DateTime, String, Uuid
from sqlalchemy.sql import func

from insightdesk.database import Base, JSONType


class Report(Base):
    __tablename__ = "reports"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    userId = Column(String, nullable=False, index=True)

    name = Column(String, nullable=False)
    type = Column(String, nullable=False)  # template key
    schedule = Column(String, nullable=True)  # 5-field crontab
    isActive = Column(Boolean, nullable=False, default=True)
    lastGenerated = Column(DateTime(timezone=True), nullable=True)
    config = Column(JSONType, nullable=True)

    createdAt = Column(DateTime(timezone=True), server_default=func.now())
    updatedAt = Column(
        DateTime(timezone=True),
        default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
