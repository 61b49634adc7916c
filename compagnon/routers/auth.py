"""
routers/auth.py — Session Routes

Identity itself is handled by the external auth provider; this router
only opens the demo session and clears sessions.

Business Rules:
- Demo login creates the demo profile on first use and binds the session
  to it
- Logout clears the session and drops the user's dashboard state

Called by: main.py (router mount)
Depends on: dependencies, services/profile_service.py, services/dashboard_service.py
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_user
from ..services import dashboard_service, profile_service

log = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/auth/demo")
async def demo_login(request: Request, db: Session = Depends(get_db)):
    profile = profile_service.ensure_demo_profile(db)
    request.session["user_id"] = profile.id
    log.info("Demo session opened")
    return {"user_id": profile.id, "subscription_status": profile.subscription_status}


@router.get("/auth/status")
async def auth_status(request: Request, db: Session = Depends(get_db)):
    user = get_user(request, db)
    if not user:
        return {"connected": False}
    return {
        "connected": True,
        "user_id": user.id,
        "company_name": user.company_name,
        "subscription_status": user.subscription_status,
    }


@router.post("/auth/logout")
async def logout(request: Request):
    uid = request.session.get("user_id")
    if uid:
        dashboard_service.drop_session(uid)
    request.session.clear()
    return {"ok": True}
