from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from insightdesk.api.deps import get_current_user_id
from insightdesk.database import get_db
from insightdesk.schemas.data_source import (
    CatalogEntry,
    DataSourceResponse,
    DataSourceStats,
)
from insightdesk.services.data_sources import (
    get_stats,
    list_available,
    list_connected,
    refresh,
    toggle_connection,
)

router = APIRouter(prefix="/data-sources", tags=["data-sources"])


@router.get("/available", response_model=list[CatalogEntry])
def available_sources(
    search: str | None = Query(None, description="Matches name or type"),
    category: str | None = Query(None, description="e.g. CRM, Payments, or all"),
):
    return list_available(search=search, category=category)


@router.get("/stats", response_model=DataSourceStats)
def data_source_stats(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return get_stats(db, user_id)


@router.get("", response_model=list[DataSourceResponse])
def list_data_sources(
    status: str | None = Query(
        None, description="connected | disconnected | error | syncing | all"
    ),
    search: str | None = Query(None),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return list_connected(db, user_id, status=status, search=search)


@router.post("/{source_type}/toggle", response_model=DataSourceResponse)
def toggle(
    source_type: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Connect, disconnect or reconnect an integration for the current user."""
    return toggle_connection(db, user_id, source_type)


@router.post("/{id}/refresh", response_model=DataSourceResponse)
def refresh_source(
    id: UUID,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Start a sync. The source reports ``syncing`` until the job completes."""
    source = refresh(db, id, user_id=user_id)
    if not source:
        raise HTTPException(status_code=404, detail="Data source not found")
    return source
