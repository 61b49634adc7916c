"""User ↔ tender relationship — status, notes, reminder, stored AI output."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, Date, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base

# Stored status values (French labels, as persisted by the web client)
TO_QUALIFY = "À Qualifier"
SAVED = "Sauvegardé"
BLACKLISTED = "Rejeté"
WON = "Gagné"
LOST = "Perdu"
INTERACTION_STATUSES = (TO_QUALIFY, SAVED, BLACKLISTED, WON, LOST)

# Already handled: excluded from fresh fetches
TRIAGED_STATUSES = frozenset({BLACKLISTED, SAVED, WON, LOST})
# Shown in the "my tenders" workspace
WORKSPACE_STATUSES = frozenset({SAVED, WON, LOST})


class UserInteraction(Base):
    __tablename__ = "user_interactions"
    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    tender_id = Column(String(64), nullable=False)
    status = Column(String(30), nullable=False, default=TO_QUALIFY)
    internal_notes = Column(Text)
    custom_reminder_date = Column(Date)
    ai_analysis_result = Column(JSON)  # {risks, strengths, workload, questions}
    chat_history = Column(JSON)  # [{role, text}]
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    profile = relationship("UserProfile", back_populates="interactions")

    __table_args__ = (
        UniqueConstraint("user_id", "tender_id", name="uq_interaction_user_tender"),
        Index("ix_interactions_user_status", "user_id", "status"),
    )
