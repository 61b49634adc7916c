"""
routers/stats.py — Workspace statistics

Business Rules:
- period is one of 30d | 90d | year | all (default year); anything else is 422

Called by: main.py (router mount)
Depends on: dependencies, services/stats_service.py
"""

from typing import Literal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import UserProfile
from ..schemas.responses import WorkspaceStatsResponse
from ..services import stats_service

router = APIRouter(tags=["stats"])


@router.get("/api/stats", response_model=WorkspaceStatsResponse)
async def workspace_stats(
    period: Literal["30d", "90d", "year", "all"] = "year",
    user: UserProfile = Depends(require_user),
    db: Session = Depends(get_db),
):
    return stats_service.workspace_stats(db, user.id, period)
