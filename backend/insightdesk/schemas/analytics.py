from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel

from insightdesk.schemas.data_source import DataSourceResponse


class MetricSampleResponse(BaseModel):
    id: UUID
    metricName: str
    metricValue: float
    metricData: dict | None = None
    dateRecorded: date
    sourceId: UUID | None = None
    createdAt: datetime | None = None

    model_config = {"from_attributes": True}


class MetricTrendResponse(BaseModel):
    value: float
    label: str
    direction: str


class MetricSummary(BaseModel):
    metricName: str
    label: str
    value: float
    trend: MetricTrendResponse | None = None


class AnalyticsDashboardResponse(BaseModel):
    sources: list[DataSourceResponse]
    samples: list[MetricSampleResponse]
    count: int
    days: int
    summary: list[MetricSummary]


class SampleDataResponse(BaseModel):
    inserted: int
