"""Account profile — one row per user, keyed by the auth principal id."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, String, Text
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base

# Geographic scope
SCOPE_FRANCE = "France"
SCOPE_EUROPE = "Europe"
SCOPE_CUSTOM = "Custom"
SCOPES = (SCOPE_FRANCE, SCOPE_EUROPE, SCOPE_CUSTOM)

# Subscription status
SUB_ACTIVE = "Active"
SUB_SUSPENDED = "Suspended"
SUB_TRIAL = "Trial"
SUB_EXPIRED = "Expired"
SUB_DEMO = "Demo"


class UserProfile(Base):
    __tablename__ = "profiles"
    id = Column(String(64), primary_key=True)

    # Identity
    company_name = Column(String(255), default="")
    contact_email = Column(String(255))
    siret = Column(String(32))
    address = Column(String(500))
    website = Column(String(500))
    company_size = Column(String(20), default="PME")  # TPE | PME | ETI | GE

    # Expertise
    specialization = Column(Text, default="")
    cpv_codes = Column(Text, default="")  # comma separated
    target_sectors = Column(Text, default="")
    certifications = Column(Text, default="")
    negative_keywords = Column(Text, default="")  # comma separated

    # Geography
    scope = Column(String(20), default=SCOPE_FRANCE)
    target_departments = Column(Text, default="")  # comma separated

    subscription_status = Column(String(20), default=SUB_TRIAL)
    trial_started_at = Column(UTCDateTime)

    saved_dashboard_filters = Column(JSON)

    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    interactions = relationship("UserInteraction", back_populates="profile")
