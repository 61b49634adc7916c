"""
schemas/tenders.py — Tender, interaction and dashboard filter models

Tender is rebuilt from the BOAMP feed on every fetch and cached per user
as model_dump(mode="json"). Interaction payloads validate the writes the
web client sends for triage, notes, reminders and stored AI output.

Business Rules:
- compatibility_score stays within 0-100
- Filter min_score clamped 0-100, non-positive budgets mean no bound
- Blank strings in filters normalize to None
- Status must be one of the five stored labels
- Chat roles limited to user | model

Called by: connectors/boamp.py, cache/tender_cache.py, services/*, routers/*
Depends on: pydantic, models/interactions.py (status labels)
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, field_validator

from ..models.interactions import INTERACTION_STATUSES


class TenderContact(BaseModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    url_buyer_profile: str | None = None


class TenderLot(BaseModel):
    lot_number: str
    title: str
    description: str | None = None
    cpv: list[str] = Field(default_factory=list)


class Tender(BaseModel):
    id: str
    id_web: str
    title: str
    buyer: str = ""
    deadline: str = "Non spécifiée"
    link_dce: str = ""
    departments: list[str] = Field(default_factory=list)
    descriptors: list[str] = Field(default_factory=list)
    procedure_type: str = "Procédure non spécifiée"
    publication_date: str | None = None
    contact: TenderContact | None = None
    lots: list[TenderLot] = Field(default_factory=list)
    ai_summary: str = ""
    compatibility_score: int = Field(0, ge=0, le=100)
    estimated_budget: int | None = None
    full_description: str = ""


class DashboardFilters(BaseModel):
    search_term: str | None = None
    min_score: int = 0
    min_budget: int | None = None
    max_budget: int | None = None
    selected_region: str | None = None
    procedure_type: str | None = None
    publication_date: date | None = None
    raw_keywords: str | None = None

    @field_validator("search_term", "selected_region", "procedure_type", "raw_keywords", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("publication_date", mode="before")
    @classmethod
    def blank_date(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("min_score", mode="before")
    @classmethod
    def clamp_score(cls, v) -> int:
        try:
            v = int(v or 0)
        except (TypeError, ValueError):
            return 0
        return max(0, min(100, v))

    @field_validator("min_budget", "max_budget")
    @classmethod
    def non_negative(cls, v: int | None) -> int | None:
        if v is None or v <= 0:
            return None
        return v


class AIStrategyAnalysis(BaseModel):
    risks: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    workload: str = Field("Moyenne", pattern="^(Faible|Moyenne|Élevée)$")
    questions: list[str] = Field(default_factory=list)


class ChatMessage(BaseModel):
    role: str = Field(..., pattern="^(user|model)$")
    text: str


class InteractionUpdate(BaseModel):
    status: str
    internal_notes: str | None = None
    custom_reminder_date: date | None = None
    tender: Tender | None = None

    @field_validator("status")
    @classmethod
    def known_status(cls, v: str) -> str:
        if v not in INTERACTION_STATUSES:
            raise ValueError(f"status must be one of {', '.join(INTERACTION_STATUSES)}")
        return v


class ChatHistoryUpdate(BaseModel):
    history: list[ChatMessage] = Field(default_factory=list)


class InteractionOut(BaseModel):
    tender_id: str
    status: str
    internal_notes: str | None = None
    custom_reminder_date: date | None = None
    ai_analysis_result: dict | None = None
    chat_history: list[dict] | None = None


class SavedTenderOut(BaseModel):
    tender: Tender
    interaction: InteractionOut


class TenderDetailOut(BaseModel):
    tender: Tender
    interaction: InteractionOut | None = None
