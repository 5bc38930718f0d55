import uuid

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.sql import func

from insightdesk.database import Base, JSONType


class ChatConversation(Base):
    """Latest analyst exchange for a user; one row per user, replaced on each turn."""

    __tablename__ = "chat_conversations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    userId = Column(String, unique=True, nullable=False)
    title = Column(String, nullable=True)
    # [{"role": "user" | "assistant", "content": str, "timestamp": iso8601}]
    messages = Column(JSONType, nullable=True)

    createdAt = Column(DateTime(timezone=True), server_default=func.now())
    updatedAt = Column(
        DateTime(timezone=True),
        default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
