"""Tender cache — full tender payloads kept per user in the tender_cache table.

The triage store only keeps (user, tender id, status), so workspace and
detail views look tenders up here. Entries are replaced by id on every
fetch. When max_entries is set, the least recently accessed rows beyond
the cap are evicted; an evicted tender that no longer shows up in the
feed is gone, and dependent views silently omit it.
"""

import logging
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..models import CachedTender
from ..schemas.tenders import Tender
from .samples import sample_tenders

log = logging.getLogger("compagnon.cache")


class TenderCache:
    def __init__(self, db: Session, user_id: str, max_entries: int | None = None,
                 seed_samples: bool | None = None):
        self.db = db
        self.user_id = user_id
        self.max_entries = settings.tender_cache_max_entries if max_entries is None else max_entries
        self.seed_samples = settings.tender_cache_seed_samples if seed_samples is None else seed_samples
        self._seed_checked = False

    # ── Reads ────────────────────────────────────────────────────────

    def get(self, tender_id: str) -> Tender | None:
        """Cached tender or None. A hit refreshes its LRU position."""
        self._ensure_seeded()
        row = (
            self.db.query(CachedTender)
            .filter_by(user_id=self.user_id, tender_id=tender_id)
            .first()
        )
        if not row:
            return None
        tender = self._load(row)
        if tender is None:
            return None
        try:
            row.last_accessed_at = datetime.now(timezone.utc)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.debug("Cache touch failed for %s/%s: %s", self.user_id, tender_id, e)
        return tender

    def get_all(self) -> list[Tender]:
        self._ensure_seeded()
        rows = (
            self.db.query(CachedTender)
            .filter_by(user_id=self.user_id)
            .order_by(CachedTender.id)
            .all()
        )
        return [t for t in (self._load(r) for r in rows) if t is not None]

    def get_many(self, tender_ids) -> dict[str, Tender]:
        """{tender_id: Tender} for the ids present in the cache."""
        ids = list(tender_ids)
        if not ids:
            return {}
        self._ensure_seeded()
        rows = (
            self.db.query(CachedTender)
            .filter(CachedTender.user_id == self.user_id, CachedTender.tender_id.in_(ids))
            .all()
        )
        found = {}
        for row in rows:
            tender = self._load(row)
            if tender is not None:
                found[row.tender_id] = tender
        return found

    def count(self) -> int:
        return (
            self.db.query(func.count(CachedTender.id))
            .filter(CachedTender.user_id == self.user_id)
            .scalar()
            or 0
        )

    # ── Writes ───────────────────────────────────────────────────────

    def put(self, tender: Tender) -> None:
        self.put_many([tender])

    def put_many(self, tenders: list[Tender]) -> None:
        """Insert-or-replace by tender id. Failures are logged, never raised."""
        if not tenders:
            return
        self._ensure_seeded()
        now = datetime.now(timezone.utc)
        try:
            existing = {
                row.tender_id: row
                for row in self.db.query(CachedTender)
                .filter(
                    CachedTender.user_id == self.user_id,
                    CachedTender.tender_id.in_([t.id for t in tenders]),
                )
                .all()
            }
            for tender in tenders:
                payload = tender.model_dump(mode="json")
                row = existing.get(tender.id)
                if row:
                    row.payload = payload
                    row.cached_at = now
                    row.last_accessed_at = now
                else:
                    row = CachedTender(
                        user_id=self.user_id,
                        tender_id=tender.id,
                        payload=payload,
                        cached_at=now,
                        last_accessed_at=now,
                    )
                    self.db.add(row)
                    existing[tender.id] = row
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.warning("Cache write error for user %s: %s", self.user_id, e)
            return
        self._evict_overflow()

    # ── Internals ────────────────────────────────────────────────────

    def _load(self, row: CachedTender) -> Tender | None:
        try:
            return Tender.model_validate(row.payload)
        except ValidationError as e:
            log.warning("Dropping unreadable cache entry %s/%s: %s", self.user_id, row.tender_id, e)
            return None

    def _ensure_seeded(self) -> None:
        if self._seed_checked:
            return
        self._seed_checked = True
        if not self.seed_samples or self.count():
            return
        now = datetime.now(timezone.utc)
        try:
            for tender in sample_tenders():
                self.db.add(CachedTender(
                    user_id=self.user_id,
                    tender_id=tender.id,
                    payload=tender.model_dump(mode="json"),
                    cached_at=now,
                    last_accessed_at=now,
                ))
            self.db.commit()
            log.info("Seeded sample tenders for %s", self.user_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            log.warning("Cache seed failed for %s: %s", self.user_id, e)

    def _evict_overflow(self) -> int:
        """Drop least recently accessed rows beyond max_entries. Returns count evicted."""
        if not self.max_entries:
            return 0
        overflow = self.count() - self.max_entries
        if overflow <= 0:
            return 0
        try:
            victims = (
                self.db.query(CachedTender)
                .filter_by(user_id=self.user_id)
                .order_by(CachedTender.last_accessed_at.asc(), CachedTender.id.asc())
                .limit(overflow)
                .all()
            )
            for row in victims:
                self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.warning("Cache eviction failed for %s: %s", self.user_id, e)
            return 0
        log.debug("Cache eviction: removed %d entries for %s", len(victims), self.user_id)
        return len(victims)
