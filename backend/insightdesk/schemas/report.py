from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class CreateReport(BaseModel):
    type: str  # template key


class UpdateSchedule(BaseModel):
    schedule: str | None = None  # 5-field crontab; null clears it


class ReportTemplate(BaseModel):
    type: str
    name: str
    description: str


class ReportResponse(BaseModel):
    id: UUID
    name: str
    type: str
    schedule: str | None = None
    isActive: bool
    lastGenerated: datetime | None = None
    config: dict | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None

    model_config = {"from_attributes": True}


class ReportStats(BaseModel):
    total: int
    active: int
    scheduled: int
    generated: int
