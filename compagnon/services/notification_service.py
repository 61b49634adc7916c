"""
notification_service.py — Deadline and reminder alerts on triaged tenders

Built on demand from the user's non-rejected interactions whose tender
is cached; only the read markers are stored.

Business Rules:
- Deadline alert when the tender is still open on our side (saved or to
  qualify) and its deadline is 0 to notification_window_days days away
- Reminder alert when the custom reminder date is today or earlier
- Ids are stable: deadline-<tender>, reminder-<tender>-<date>
- Unread first, then by date descending

Called by: routers/notifications.py
Depends on: services/interaction_service.py, cache/tender_cache.py, models (NotificationRead)
"""

from datetime import date, datetime, timezone

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..cache import TenderCache
from ..config import settings
from ..models import NotificationRead
from ..models.interactions import BLACKLISTED, SAVED, TO_QUALIFY
from . import interaction_service

ACTIVE_STATUSES = frozenset({SAVED, TO_QUALIFY})


def _parse_deadline(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _read_ids(db: Session, user_id: str) -> set[str]:
    rows = db.query(NotificationRead.notification_id).filter_by(user_id=user_id).all()
    return {r[0] for r in rows}


def _clip(text: str, limit: int = 50) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def build_notifications(db: Session, user_id: str, today: date | None = None) -> list[dict]:
    today = today or datetime.now(timezone.utc).date()
    read = _read_ids(db, user_id)
    now_iso = datetime.now(timezone.utc).isoformat()
    notifications = []

    interactions = [i for i in interaction_service.fetch_interactions(db, user_id) if i.status != BLACKLISTED]
    cached = TenderCache(db, user_id).get_many(i.tender_id for i in interactions)

    for interaction in interactions:
        tender = cached.get(interaction.tender_id)
        if tender is None:
            continue
        deadline = _parse_deadline(tender.deadline)
        if interaction.status in ACTIVE_STATUSES and deadline:
            days = (deadline - today).days
            if 0 <= days <= settings.notification_window_days:
                notif_id = f"deadline-{tender.id}"
                notifications.append({
                    "id": notif_id,
                    "type": "deadline",
                    "title": "Expire aujourd'hui !" if days == 0 else f"Expire dans {days} jours",
                    "message": f"L'AO \"{_clip(tender.title)}\" arrive à échéance.",
                    "date": now_iso,
                    "tender_id": tender.id,
                    "is_read": notif_id in read,
                })

        reminder = interaction.custom_reminder_date
        if reminder and reminder <= today:
            notif_id = f"reminder-{tender.id}-{reminder.isoformat()}"
            notes = interaction.internal_notes
            notifications.append({
                "id": notif_id,
                "type": "reminder",
                "title": "Rappel personnalisé",
                "message": f"Note : \"{_clip(notes)}\"" if notes else "Rappel prévu pour cet appel d'offres.",
                "date": reminder.isoformat(),
                "tender_id": tender.id,
                "is_read": notif_id in read,
            })

    notifications.sort(key=lambda n: n["date"], reverse=True)
    notifications.sort(key=lambda n: n["is_read"])
    return notifications


def mark_read(db: Session, user_id: str, notification_id: str) -> None:
    if db.query(NotificationRead.id).filter_by(user_id=user_id, notification_id=notification_id).first():
        return
    db.add(NotificationRead(user_id=user_id, notification_id=notification_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.debug("Notification {} already marked read for {}", notification_id, user_id)
