from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from insightdesk.models.insight import (
    InsightCategory,
    InsightImpact,
    InsightSeverity,
    InsightType,
)


class InsightResponse(BaseModel):
    id: UUID
    type: InsightType
    title: str
    description: str
    severity: InsightSeverity
    category: InsightCategory
    impact: InsightImpact
    confidence: int = Field(ge=0, le=100)
    dataSource: str | None = None
    isRead: bool = False
    createdAt: datetime | None = None

    model_config = {"from_attributes": True}


class InsightSummary(BaseModel):
    total: int
    unread: int
    bySeverity: dict[str, int]
    byType: dict[str, int]
