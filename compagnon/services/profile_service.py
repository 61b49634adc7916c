"""
profile_service.py — Account profile reads and partial writes

Business Rules:
- Writes are partial: only the fields passed are touched
- A Trial profile without trial_started_at starts its clock on first read
- A Trial older than trial_duration_hours reads (and is stored) as Expired
- The demo account is created on demand with a fixed BTP profile

Called by: dependencies.py, routers/profiles.py, routers/auth.py, services/dashboard_service.py
Depends on: models (UserProfile), config
"""

from datetime import datetime, timedelta, timezone

from loguru import logger
from sqlalchemy.orm import Session

from ..config import settings
from ..models import UserProfile
from ..models.profiles import SCOPE_EUROPE, SCOPE_FRANCE, SUB_ACTIVE, SUB_DEMO, SUB_EXPIRED, SUB_TRIAL
from ..utils import split_csv

_WRITABLE_FIELDS = frozenset({
    "company_name", "contact_email", "siret", "address", "website", "company_size",
    "specialization", "cpv_codes", "target_sectors", "certifications", "negative_keywords",
    "scope", "target_departments", "subscription_status", "trial_started_at",
    "saved_dashboard_filters",
})

DEMO_PROFILE = {
    "company_name": "BatiRénov Expert",
    "specialization": "Rénovation Énergétique BTP",
    "cpv_codes": "45000000",
    "scope": SCOPE_FRANCE,
    "subscription_status": SUB_DEMO,
}


def _apply_trial(db: Session, profile: UserProfile, now: datetime) -> None:
    if profile.subscription_status != SUB_TRIAL:
        return
    if not profile.trial_started_at:
        profile.trial_started_at = now
        db.commit()
        return
    if now - profile.trial_started_at > timedelta(hours=settings.trial_duration_hours):
        profile.subscription_status = SUB_EXPIRED
        db.commit()
        logger.info("Trial expired for {}", profile.id)


def get_profile(db: Session, user_id: str, now: datetime | None = None) -> UserProfile | None:
    profile = db.get(UserProfile, user_id)
    if profile is None:
        return None
    _apply_trial(db, profile, now or datetime.now(timezone.utc))
    return profile


def save_profile(db: Session, user_id: str, **fields) -> UserProfile:
    """Create-or-update the profile with only the given fields."""
    unknown = set(fields) - _WRITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

    profile = db.get(UserProfile, user_id)
    if profile is None:
        profile = UserProfile(id=user_id, subscription_status=SUB_TRIAL)
        db.add(profile)
        logger.info("Profile created for {}", user_id)
    for key, value in fields.items():
        setattr(profile, key, value)
    db.commit()
    db.refresh(profile)
    return profile


def save_dashboard_filters(db: Session, user_id: str, filters: dict) -> UserProfile:
    return save_profile(db, user_id, saved_dashboard_filters=filters)


def ensure_demo_profile(db: Session) -> UserProfile:
    """Demo account; keeps an Active status if it was upgraded, otherwise forces Demo."""
    user_id = settings.demo_user_id
    profile = db.get(UserProfile, user_id)
    if profile is None:
        return save_profile(db, user_id, **DEMO_PROFILE)
    if profile.subscription_status not in (SUB_DEMO, SUB_ACTIVE):
        profile.subscription_status = SUB_DEMO
        profile.trial_started_at = None
        db.commit()
    return profile


def target_departments(profile: UserProfile) -> list[str]:
    return split_csv(profile.target_departments)


def is_nationwide(profile: UserProfile) -> bool:
    return profile.scope in (SCOPE_FRANCE, SCOPE_EUROPE) or not target_departments(profile)
