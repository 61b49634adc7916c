"""
schemas/responses.py — Shared response models for OpenAPI documentation

Called by: routers/*.py
Depends on: pydantic, schemas/tenders.py
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .tenders import Tender


class OkResponse(BaseModel):
    ok: bool = True


class HeroStats(BaseModel):
    high_match_count: int = 0
    total_budget: int = 0
    avg_score: int = 0


class DashboardResponse(BaseModel):
    state: str
    offset: int = 0
    has_more: bool = True
    total_loaded: int = 0
    error: str | None = None
    stats: HeroStats = Field(default_factory=HeroStats)
    tenders: list[Tender] = Field(default_factory=list)


class NotificationOut(BaseModel):
    id: str
    type: str
    title: str
    message: str
    date: str
    tender_id: str
    is_read: bool = False


class NotificationListResponse(BaseModel):
    unread: int = 0
    notifications: list[NotificationOut] = Field(default_factory=list)


class NamedCount(BaseModel):
    name: str
    value: int = 0


class WorkspaceStatsResponse(BaseModel):
    period: str
    total_opportunities: int = 0
    total_budget: int = 0
    avg_score: int = 0
    winnable_count: int = 0
    won_count: int = 0
    lost_count: int = 0
    conversion_rate: int = 0
    trend: list[NamedCount] = Field(default_factory=list)
    by_status: list[NamedCount] = Field(default_factory=list)
    top_procedures: list[NamedCount] = Field(default_factory=list)
    top_departments: list[NamedCount] = Field(default_factory=list)
