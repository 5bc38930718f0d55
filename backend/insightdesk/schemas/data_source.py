from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from insightdesk.models.data_source import DataSourceStatus


class CatalogEntry(BaseModel):
    type: str
    name: str
    icon: str
    category: str


class DataSourceResponse(BaseModel):
    id: UUID
    name: str
    type: str
    status: DataSourceStatus
    lastSync: datetime | None = None
    config: dict | None = None
    createdAt: datetime | None = None
    updatedAt: datetime | None = None

    model_config = {"from_attributes": True}


class DataSourceStats(BaseModel):
    total: int
    connected: int
    syncing: int
    error: int
