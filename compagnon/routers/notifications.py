"""
routers/notifications.py — Deadline & Reminder Alerts

Called by: main.py (router mount)
Depends on: dependencies, services/notification_service.py
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import UserProfile
from ..schemas.responses import NotificationListResponse, OkResponse
from ..services import notification_service

router = APIRouter(tags=["notifications"])


@router.get("/api/notifications", response_model=NotificationListResponse)
async def list_notifications(user: UserProfile = Depends(require_user), db: Session = Depends(get_db)):
    items = notification_service.build_notifications(db, user.id)
    return {"unread": sum(1 for n in items if not n["is_read"]), "notifications": items}


@router.post("/api/notifications/{notification_id}/read", response_model=OkResponse)
async def read_notification(
    notification_id: str,
    user: UserProfile = Depends(require_user),
    db: Session = Depends(get_db),
):
    notification_service.mark_read(db, user.id, notification_id)
    return OkResponse()
