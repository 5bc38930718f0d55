import uuid

from sqlalchemy import Column, DateTime, Integer, String, Text, Uuid
from sqlalchemy.sql import func

from insightdesk.database import Base


class LlmLog(Base):
    """Audit row for each outbound analyst completion call."""

    __tablename__ = "llm_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    callId = Column(String, nullable=False, index=True)
    userId = Column(String, nullable=True, index=True)
    provider = Column(String, nullable=False)
    model = Column(String, nullable=False)
    systemPrompt = Column(Text, nullable=True)
    message = Column(Text, nullable=False)
    response = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="success")  # success | error
    errorMessage = Column(Text, nullable=True)
    elapsedMs = Column(Integer, nullable=True)
    createdAt = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
