"""Per-user tender storage — cached payloads, visited markers, read notifications.

The BOAMP feed is the source of truth for tender content; these tables only
keep what the user has already seen so workspace and detail views can be
rebuilt without refetching.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, Index, Integer, String, UniqueConstraint

from ..database import UTCDateTime
from .base import Base


class CachedTender(Base):
    __tablename__ = "tender_cache"
    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False)
    tender_id = Column(String(64), nullable=False)
    payload = Column(JSON, nullable=False)
    cached_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))
    last_accessed_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "tender_id", name="uq_tender_cache_user_tender"),
        Index("ix_tender_cache_user_accessed", "user_id", "last_accessed_at"),
    )


class VisitedTender(Base):
    __tablename__ = "visited_tenders"
    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False)
    tender_id = Column(String(64), nullable=False)
    visited_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "tender_id", name="uq_visited_user_tender"),
    )


class NotificationRead(Base):
    __tablename__ = "notification_reads"
    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False)
    notification_id = Column(String(255), nullable=False)
    read_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("user_id", "notification_id", name="uq_notification_read"),
    )
