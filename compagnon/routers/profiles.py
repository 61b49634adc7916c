"""
routers/profiles.py — Profile & Saved View Routes

Business Rules:
- POST /api/profile completes onboarding: creates the Trial profile for the
  session principal, with the trial clock started; 409 if it already exists
- PUT /api/profile writes only the fields present in the body
- Changing geography or keywords invalidates the dashboard list
- Saved dashboard filters are stored as a JSON snapshot on the profile

Called by: main.py (router mount)
Depends on: dependencies, schemas/profiles.py, services/profile_service.py
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_session_user_id, require_user
from ..models import UserProfile
from ..schemas.profiles import ProfileOut, ProfileUpdate
from ..schemas.responses import OkResponse
from ..schemas.tenders import DashboardFilters
from ..services import dashboard_service, profile_service

router = APIRouter(tags=["profile"])

# Fields that change what BOAMP returns or how tenders score
_FEED_FIELDS = {"specialization", "negative_keywords", "scope", "target_departments"}


@router.get("/api/profile", response_model=ProfileOut)
async def read_profile(user: UserProfile = Depends(require_user)):
    return ProfileOut.model_validate(user, from_attributes=True)


@router.post("/api/profile", response_model=ProfileOut, status_code=201)
async def create_profile(
    body: ProfileUpdate,
    user_id: str = Depends(require_session_user_id),
    db: Session = Depends(get_db),
):
    if profile_service.get_profile(db, user_id) is not None:
        raise HTTPException(409, "Profil déjà créé")
    fields = body.model_dump(exclude_unset=True)
    profile = profile_service.save_profile(
        db, user_id, trial_started_at=datetime.now(timezone.utc), **fields
    )
    logger.info("Onboarding completed for {}", user_id)
    return ProfileOut.model_validate(profile, from_attributes=True)


@router.put("/api/profile", response_model=ProfileOut)
async def update_profile(
    body: ProfileUpdate,
    user: UserProfile = Depends(require_user),
    db: Session = Depends(get_db),
):
    fields = body.model_dump(exclude_unset=True)
    profile = profile_service.save_profile(db, user.id, **fields)
    if _FEED_FIELDS & set(fields):
        dashboard_service.drop_session(user.id)
    logger.info("Profile {} updated: {}", user.id, ", ".join(sorted(fields)) or "nothing")
    return ProfileOut.model_validate(profile, from_attributes=True)


@router.put("/api/profile/filters", response_model=OkResponse)
async def save_filters(
    body: DashboardFilters,
    user: UserProfile = Depends(require_user),
    db: Session = Depends(get_db),
):
    profile_service.save_dashboard_filters(db, user.id, body.model_dump(mode="json"))
    return OkResponse()
