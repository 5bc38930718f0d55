from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from insightdesk.api.deps import get_current_user_id
from insightdesk.core.aggregator import parse_date_range
from insightdesk.database import get_db
from insightdesk.schemas.analytics import AnalyticsDashboardResponse, SampleDataResponse
from insightdesk.services.analytics import generate_sample_data, get_dashboard

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsDashboardResponse)
def analytics_dashboard(
    sourceId: str | None = Query(None, description="Data source id or all"),
    metric: str | None = Query(None, description="Metric name or all"),
    range: str = Query("7d", description="7d | 30d | 90d"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    days = parse_date_range(range)
    return get_dashboard(db, user_id, source_id=sourceId, metric=metric, days=days)


@router.post("/sample-data", response_model=SampleDataResponse)
def create_sample_data(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return SampleDataResponse(inserted=generate_sample_data(db, user_id))
