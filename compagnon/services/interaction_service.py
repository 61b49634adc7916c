"""
interaction_service.py — Per-user triage state on tenders

One row per (user, tender) in user_interactions. Every write goes through
an upsert on that pair, so repeated calls update instead of duplicating.

Business Rules:
- Status is one of the five stored labels
- Notes and reminder date only change when explicitly passed (None clears,
  omission keeps)
- A row first created by an analysis or chat save starts as "À Qualifier"
- Write failures roll back the session and come back as WriteResult(ok=False)

Called by: services/tender_service.py, routers/tenders.py
Depends on: models (UserInteraction), services/results.py
"""

from datetime import date, datetime, timezone

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import UserInteraction
from ..models.interactions import INTERACTION_STATUSES, TO_QUALIFY, TRIAGED_STATUSES
from .results import UNSET, WriteResult


def fetch_interactions(db: Session, user_id: str) -> list[UserInteraction]:
    """Every interaction row for a user, oldest first."""
    return (
        db.query(UserInteraction)
        .filter(UserInteraction.user_id == user_id)
        .order_by(UserInteraction.id)
        .all()
    )


def get_interaction(db: Session, user_id: str, tender_id: str) -> UserInteraction | None:
    return db.query(UserInteraction).filter_by(user_id=user_id, tender_id=tender_id).first()


def triaged_tender_ids(interactions: list[UserInteraction]) -> set[str]:
    """Tender ids the user already handled (blacklisted / saved / won / lost)."""
    return {i.tender_id for i in interactions if i.status in TRIAGED_STATUSES}


def _upsert(db: Session, user_id: str, tender_id: str, **changes) -> WriteResult:
    """Apply `changes` to the (user, tender) row, creating it if missing."""
    try:
        row = get_interaction(db, user_id, tender_id)
        if row is None:
            row = UserInteraction(user_id=user_id, tender_id=tender_id, status=TO_QUALIFY)
            db.add(row)
        for key, value in changes.items():
            setattr(row, key, value)
        row.updated_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(row)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Interaction write failed for {}/{}: {}", user_id, tender_id, e)
        return WriteResult(ok=False, error="Impossible d'enregistrer l'interaction")
    return WriteResult(ok=True, interaction=row)


def upsert_interaction(
    db: Session,
    user_id: str,
    tender_id: str,
    status: str,
    notes=UNSET,
    reminder_date=UNSET,
) -> WriteResult:
    """Set the status of a tender for a user; notes / reminder only when given."""
    if status not in INTERACTION_STATUSES:
        raise ValueError(f"Unknown interaction status: {status!r}")

    changes: dict = {"status": status}
    if notes is not UNSET:
        changes["internal_notes"] = notes
    if reminder_date is not UNSET:
        if reminder_date is not None and not isinstance(reminder_date, date):
            raise ValueError("reminder_date must be a date or None")
        changes["custom_reminder_date"] = reminder_date

    result = _upsert(db, user_id, tender_id, **changes)
    if result.ok:
        logger.info("Interaction {}/{} → {}", user_id, tender_id, status)
    return result


def save_analysis(db: Session, user_id: str, tender_id: str, analysis: dict) -> WriteResult:
    """Persist the AI strategy analysis (risks / strengths / workload / questions)."""
    return _upsert(db, user_id, tender_id, ai_analysis_result=analysis)


def save_chat_history(db: Session, user_id: str, tender_id: str, history: list[dict]) -> WriteResult:
    return _upsert(db, user_id, tender_id, chat_history=history)


def interaction_to_dict(row: UserInteraction) -> dict:
    return {
        "tender_id": row.tender_id,
        "status": row.status,
        "internal_notes": row.internal_notes,
        "custom_reminder_date": row.custom_reminder_date,
        "ai_analysis_result": row.ai_analysis_result,
        "chat_history": row.chat_history,
    }
