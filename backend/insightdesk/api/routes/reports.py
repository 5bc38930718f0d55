from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from insightdesk.api.deps import get_current_user_id
from insightdesk.database import get_db
from insightdesk.schemas.report import (
    CreateReport,
    ReportResponse,
    ReportStats,
    ReportTemplate,
    UpdateSchedule,
)
from insightdesk.services import reports as report_service

router = APIRouter(prefix="/reports", tags=["reports"])


def _found(report):
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.get("/templates", response_model=list[ReportTemplate])
def templates():
    return report_service.list_templates()


@router.get("/stats", response_model=ReportStats)
def report_stats(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return report_service.get_stats(db, user_id)


@router.get("", response_model=list[ReportResponse])
def list_reports(
    search: str | None = Query(None),
    type: str | None = Query(None, description="Template key or all"),
    status: str | None = Query(None, description="all | active | inactive"),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return report_service.list_reports(
        db, user_id, search=search, type=type, status=status
    )


@router.post("", response_model=ReportResponse, status_code=201)
def create(
    dto: CreateReport,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return report_service.create_from_template(db, user_id, dto.type)


@router.post("/{id}/generate", response_model=ReportResponse)
def generate(
    id: UUID,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return _found(report_service.generate(db, id, user_id=user_id))


@router.post("/{id}/toggle", response_model=ReportResponse)
def toggle(
    id: UUID,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return _found(report_service.toggle_active(db, id, user_id=user_id))


@router.put("/{id}/schedule", response_model=ReportResponse)
def update_schedule(
    id: UUID,
    dto: UpdateSchedule,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return _found(report_service.set_schedule(db, id, dto.schedule, user_id=user_id))


@router.delete("/{id}", status_code=204)
def delete(
    id: UUID,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if not report_service.delete(db, id, user_id=user_id):
        raise HTTPException(status_code=404, detail="Report not found")
