"""
tender_service.py — Tender acquisition, authorization and workspace views

Pipeline for one page: BOAMP fetch (scored per record) → write every tender
to the user's cache → drop tenders the user already triaged.

Business Rules:
- A failed fetch (BOAMP or the interaction read) is a FetchResult(ok=False),
  never an empty success
- Every fetched tender is cached, triaged or not, replacing older copies
- Workspace = saved / won / lost interactions whose tender is in cache;
  cache misses are silently omitted
- Detail view needs the tender in cache; the interaction is optional
- update_interaction caches the tender object first when one is given

Called by: services/dashboard_service.py, routers/tenders.py
Depends on: connectors/boamp.py, cache/tender_cache.py, services/interaction_service.py
"""

from datetime import datetime, timezone

import httpx
from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..cache import TenderCache
from ..connectors.boamp import BoampConnector
from ..models import UserInteraction, VisitedTender
from ..models.interactions import WORKSPACE_STATUSES
from ..schemas.profiles import ProfileOut
from ..schemas.tenders import DashboardFilters, Tender
from . import interaction_service
from .results import UNSET, FetchResult, WriteResult


async def get_authorized_tenders(
    db: Session,
    profile,
    offset: int = 0,
    filters: DashboardFilters | None = None,
    connector: BoampConnector | None = None,
    cache: TenderCache | None = None,
) -> FetchResult:
    """One page of fresh tenders for the profile, minus those already triaged."""
    connector = connector or BoampConnector()
    cache = cache or TenderCache(db, profile.id)

    try:
        interactions = interaction_service.fetch_interactions(db, profile.id)
        tenders = await connector.search(profile, offset=offset, filters=filters)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Interaction read failed for {}: {}", profile.id, e)
        return FetchResult.failure("Base de données indisponible")
    except httpx.HTTPStatusError as e:
        logger.error("BOAMP fetch failed for {} (offset {}): HTTP {}", profile.id, offset, e.response.status_code)
        return FetchResult.failure(f"BOAMP HTTP {e.response.status_code}")
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        logger.error("BOAMP fetch failed for {} (offset {}): {}", profile.id, offset, e)
        return FetchResult.failure(f"BOAMP indisponible: {e.__class__.__name__}")

    blacklist = interaction_service.triaged_tender_ids(interactions)
    cache.put_many(tenders)

    authorized = [t for t in tenders if t.id not in blacklist]
    logger.info(
        "Tenders for {}: {} fetched, {} authorized (offset {})",
        profile.id, len(tenders), len(authorized), offset,
    )
    return FetchResult.success(authorized, fetched=len(tenders))


def get_saved_tenders(db: Session, user_id: str,
                      cache: TenderCache | None = None) -> list[tuple[Tender, UserInteraction]]:
    """Workspace entries (saved / won / lost) whose tender is still cached."""
    cache = cache or TenderCache(db, user_id)
    workspace = [
        i for i in interaction_service.fetch_interactions(db, user_id)
        if i.status in WORKSPACE_STATUSES
    ]
    cached = cache.get_many(i.tender_id for i in workspace)

    results = []
    for interaction in workspace:
        tender = cached.get(interaction.tender_id)
        if tender is None:
            logger.debug("Workspace: tender {} not cached for {}, omitted", interaction.tender_id, user_id)
            continue
        results.append((tender, interaction))
    return results


def get_tender_by_id(db: Session, user_id: str, tender_id: str,
                     cache: TenderCache | None = None) -> tuple[Tender, UserInteraction | None] | None:
    cache = cache or TenderCache(db, user_id)
    tender = cache.get(tender_id)
    if tender is None:
        return None
    return tender, interaction_service.get_interaction(db, user_id, tender_id)


def update_interaction(
    db: Session,
    user_id: str,
    tender_id: str,
    status: str,
    notes=UNSET,
    reminder_date=UNSET,
    tender: Tender | None = None,
    cache: TenderCache | None = None,
) -> WriteResult:
    if tender is not None:
        (cache or TenderCache(db, user_id)).put(tender)
    return interaction_service.upsert_interaction(
        db, user_id, tender_id, status, notes=notes, reminder_date=reminder_date
    )


# ── Visited markers ──────────────────────────────────────────────────


def get_visited_ids(db: Session, user_id: str) -> list[str]:
    rows = (
        db.query(VisitedTender.tender_id)
        .filter(VisitedTender.user_id == user_id)
        .order_by(VisitedTender.id)
        .all()
    )
    return [r[0] for r in rows]


def mark_visited(db: Session, user_id: str, tender_id: str) -> bool:
    """Record that the user opened a tender. Returns False if it was already marked."""
    exists = db.query(VisitedTender.id).filter_by(user_id=user_id, tender_id=tender_id).first()
    if exists:
        return False
    db.add(VisitedTender(user_id=user_id, tender_id=tender_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return False
    return True


# ── Export ───────────────────────────────────────────────────────────


def export_user_data(db: Session, profile) -> dict:
    """Everything stored about the user: profile + interactions."""
    interactions = interaction_service.fetch_interactions(db, profile.id)
    return {
        "profile": ProfileOut.model_validate(profile, from_attributes=True).model_dump(mode="json"),
        "interactions": [
            {
                **interaction_service.interaction_to_dict(i),
                "custom_reminder_date": i.custom_reminder_date.isoformat() if i.custom_reminder_date else None,
            }
            for i in interactions
        ],
        "exported_at": datetime.now(timezone.utc).isoformat(),
    }
