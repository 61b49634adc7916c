"""
routers/dashboard.py — Dashboard Feed Routes

Drives the per-user DashboardSession: refresh (first page, new filters),
load more (next page), and read (current list with local filters).

Business Rules:
- Refresh without a body reuses the profile's saved filters
- Score and budget query params on GET filter that response only, without
  a refetch; they are not kept on the session (refresh sets those)
- Fetch failures come back as state "loaded" with "error" set, never 5xx

Called by: main.py (router mount)
Depends on: dependencies, services/dashboard_service.py, services/tender_service.py
"""

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_subscription
from ..models import UserProfile
from ..rate_limit import limiter
from ..schemas.responses import DashboardResponse
from ..schemas.tenders import DashboardFilters
from ..services import dashboard_service, tender_service

router = APIRouter(tags=["dashboard"])


def _fetcher(db: Session, profile: UserProfile):
    async def fetch(offset: int, filters: DashboardFilters):
        return await tender_service.get_authorized_tenders(db, profile, offset, filters)

    return fetch


@router.get("/api/dashboard", response_model=DashboardResponse)
async def read_dashboard(
    min_score: int | None = None,
    min_budget: int | None = None,
    max_budget: int | None = None,
    user: UserProfile = Depends(require_subscription),
):
    session = dashboard_service.get_session(user.id)
    local = {
        k: v
        for k, v in (("min_score", min_score), ("min_budget", min_budget), ("max_budget", max_budget))
        if v is not None
    }
    if not local:
        return session.snapshot()
    # Re-validated so clamping applies; the session keeps its own filters
    view = DashboardFilters.model_validate({**session.filters.model_dump(), **local})
    return session.snapshot(view)


@router.post("/api/dashboard/refresh", response_model=DashboardResponse)
@limiter.limit("30/minute")
async def refresh_dashboard(
    request: Request,
    filters: DashboardFilters | None = Body(None),
    user: UserProfile = Depends(require_subscription),
    db: Session = Depends(get_db),
):
    if filters is None:
        filters = DashboardFilters.model_validate(user.saved_dashboard_filters or {})
    session = dashboard_service.get_session(user.id)
    await session.refresh(_fetcher(db, user), filters)
    return session.snapshot()


@router.post("/api/dashboard/more", response_model=DashboardResponse)
@limiter.limit("60/minute")
async def load_more(
    request: Request,
    user: UserProfile = Depends(require_subscription),
    db: Session = Depends(get_db),
):
    session = dashboard_service.get_session(user.id)
    await session.load_more(_fetcher(db, user))
    return session.snapshot()
