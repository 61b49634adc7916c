"""
routers/tenders.py — Tender Detail, Triage & Workspace Routes

Business Rules:
- Opening a tender marks it visited; 404 when it is not in the user's cache
- Triage writes upsert on (user, tender); a triaged status also drops the
  tender from the live dashboard list
- internal_notes / custom_reminder_date are only written when present in
  the request body (null clears, absent keeps)
- A failed write is a 503, the client keeps its previous state
- Export returns the profile and every interaction as a JSON attachment

Called by: main.py (router mount)
Depends on: dependencies, services/tender_service.py, services/interaction_service.py
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import require_user
from ..models import UserProfile
from ..models.interactions import TRIAGED_STATUSES
from ..schemas.tenders import (
    AIStrategyAnalysis,
    ChatHistoryUpdate,
    InteractionOut,
    InteractionUpdate,
    SavedTenderOut,
    TenderDetailOut,
)
from ..services import dashboard_service, interaction_service, tender_service
from ..services.results import UNSET, WriteResult

router = APIRouter(tags=["tenders"])


def _interaction_out(row) -> InteractionOut | None:
    if row is None:
        return None
    return InteractionOut(**interaction_service.interaction_to_dict(row))


def _check_write(result: WriteResult) -> InteractionOut:
    if not result.ok:
        raise HTTPException(503, result.error or "Enregistrement impossible")
    return _interaction_out(result.interaction)


@router.get("/api/tenders/saved", response_model=list[SavedTenderOut])
async def list_saved(user: UserProfile = Depends(require_user), db: Session = Depends(get_db)):
    return [
        SavedTenderOut(tender=tender, interaction=_interaction_out(interaction))
        for tender, interaction in tender_service.get_saved_tenders(db, user.id)
    ]


@router.get("/api/tenders/visited", response_model=list[str])
async def list_visited(user: UserProfile = Depends(require_user), db: Session = Depends(get_db)):
    return tender_service.get_visited_ids(db, user.id)


@router.get("/api/tenders/{tender_id}", response_model=TenderDetailOut)
async def tender_detail(tender_id: str, user: UserProfile = Depends(require_user), db: Session = Depends(get_db)):
    found = tender_service.get_tender_by_id(db, user.id, tender_id)
    if found is None:
        raise HTTPException(404, "Appel d'offres introuvable")
    tender, interaction = found
    tender_service.mark_visited(db, user.id, tender_id)
    return TenderDetailOut(tender=tender, interaction=_interaction_out(interaction))


@router.put("/api/tenders/{tender_id}/interaction", response_model=InteractionOut)
async def set_interaction(
    tender_id: str,
    body: InteractionUpdate,
    user: UserProfile = Depends(require_user),
    db: Session = Depends(get_db),
):
    sent = body.model_fields_set
    if body.tender is not None and body.tender.id != tender_id:
        raise HTTPException(400, "tender.id ne correspond pas à l'URL")

    result = tender_service.update_interaction(
        db,
        user.id,
        tender_id,
        body.status,
        notes=body.internal_notes if "internal_notes" in sent else UNSET,
        reminder_date=body.custom_reminder_date if "custom_reminder_date" in sent else UNSET,
        tender=body.tender,
    )
    out = _check_write(result)
    if body.status in TRIAGED_STATUSES:
        dashboard_service.get_session(user.id).remove(tender_id)
    return out


@router.put("/api/tenders/{tender_id}/analysis", response_model=InteractionOut)
async def store_analysis(
    tender_id: str,
    body: AIStrategyAnalysis,
    user: UserProfile = Depends(require_user),
    db: Session = Depends(get_db),
):
    return _check_write(interaction_service.save_analysis(db, user.id, tender_id, body.model_dump()))


@router.put("/api/tenders/{tender_id}/chat", response_model=InteractionOut)
async def store_chat(
    tender_id: str,
    body: ChatHistoryUpdate,
    user: UserProfile = Depends(require_user),
    db: Session = Depends(get_db),
):
    history = [m.model_dump() for m in body.history]
    return _check_write(interaction_service.save_chat_history(db, user.id, tender_id, history))


@router.get("/api/export")
async def export_data(user: UserProfile = Depends(require_user), db: Session = Depends(get_db)):
    data = tender_service.export_user_data(db, user)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d")
    logger.info("Data export for {}: {} interactions", user.id, len(data["interactions"]))
    return JSONResponse(
        data,
        headers={"Content-Disposition": f'attachment; filename="compagnon-export-{stamp}.json"'},
    )

