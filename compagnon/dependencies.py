"""
dependencies.py — Shared FastAPI Dependencies

Resolves the authenticated principal once per request and hands the
UserProfile to the route, which passes its id explicitly to every
service call.

Business Rules:
- get_user returns None if not logged in (non-throwing)
- require_session_user_id only needs the session principal (onboarding,
  before any profile row exists)
- require_user raises 401 if no session or no profile, 403 if suspended
- require_subscription raises 402 once the trial or subscription expired

Called by: all routers
Depends on: database, services/profile_service.py
"""

import logging

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .database import get_db
from .models import UserProfile
from .models.profiles import SUB_EXPIRED, SUB_SUSPENDED
from .services import profile_service

log = logging.getLogger(__name__)


def get_user(request: Request, db: Session) -> UserProfile | None:
    """Return the current user's profile from the session, or None."""
    uid = request.session.get("user_id")
    if not uid:
        return None
    return profile_service.get_profile(db, uid)


def require_session_user_id(request: Request) -> str:
    """Dependency: the session principal, 401 if none. No profile needed."""
    uid = request.session.get("user_id")
    if not uid:
        raise HTTPException(401, "Not authenticated")
    return uid


def require_user(request: Request, db: Session = Depends(get_db)) -> UserProfile:
    """Dependency: raises 401 if no authenticated user, 403 if suspended."""
    user = get_user(request, db)
    if not user:
        raise HTTPException(401, "Not authenticated")
    if user.subscription_status == SUB_SUSPENDED:
        raise HTTPException(403, "Compte suspendu — contactez le support")
    return user


def require_subscription(user: UserProfile = Depends(require_user)) -> UserProfile:
    """Dependency: tender feed needs an active, trial or demo account."""
    if user.subscription_status == SUB_EXPIRED:
        raise HTTPException(402, "Période d'essai terminée — abonnement requis")
    return user
