"""API routes for the insight feed.

GET    /insights            filtered feed (search, severity, type, category)
GET    /insights/summary    counts by severity and type
POST   /insights/{id}/read  mark as read
DELETE /insights/{id}       dismiss (deletes the insight)

Insights are produced by the generation pipeline; there is no create route.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from insightdesk.api.deps import get_current_user_id
from insightdesk.core.insight_feed import InsightFilter
from insightdesk.database import get_db
from insightdesk.schemas.insight import InsightResponse, InsightSummary
from insightdesk.services.insights import dismiss, get_summary, list_insights, mark_read

router = APIRouter(prefix="/insights", tags=["insights"])


@router.get("", response_model=list[InsightResponse])
def list_feed(
    search: str | None = Query(None, description="Matches title or description"),
    severity: str | None = Query(None, description="low | medium | high | critical"),
    type: str | None = Query(
        None, description="anomaly | trend | forecast | benchmark | recommendation"
    ),
    category: str | None = Query(
        None, description="revenue | traffic | conversion | user | marketing"
    ),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    filters = InsightFilter(
        search=search, severity=severity, type=type, category=category
    )
    return list_insights(db, user_id, filters, limit=limit, offset=offset)


@router.get("/summary", response_model=InsightSummary)
def insight_summary(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return get_summary(db, user_id)


@router.post("/{id}/read", response_model=InsightResponse)
def read_insight(
    id: UUID,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    insight = mark_read(db, user_id, id)
    if not insight:
        raise HTTPException(status_code=404, detail="Insight not found")
    return insight


@router.delete("/{id}", status_code=204)
def dismiss_insight(
    id: UUID,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if not dismiss(db, user_id, id):
        raise HTTPException(status_code=404, detail="Insight not found")
