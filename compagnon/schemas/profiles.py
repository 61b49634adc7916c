"""
schemas/profiles.py — Pydantic models for profile endpoints

Business Rules:
- Every field optional on update: only fields sent are written
- scope must be France | Europe | Custom
- Comma-separated lists are normalized ("33 ,40,," → "33, 40")

Called by: routers/profiles.py
Depends on: pydantic, models/profiles.py
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

from ..models.profiles import SCOPES
from ..utils import split_csv


class ProfileUpdate(BaseModel):
    company_name: str | None = None
    contact_email: str | None = None
    siret: str | None = None
    address: str | None = None
    website: str | None = None
    company_size: str | None = None
    specialization: str | None = None
    cpv_codes: str | None = None
    target_sectors: str | None = None
    certifications: str | None = None
    negative_keywords: str | None = None
    scope: str | None = None
    target_departments: str | None = None

    @field_validator("scope")
    @classmethod
    def known_scope(cls, v: str | None) -> str | None:
        if v is not None and v not in SCOPES:
            raise ValueError(f"scope must be one of {', '.join(SCOPES)}")
        return v

    @field_validator("cpv_codes", "target_sectors", "certifications", "negative_keywords", "target_departments")
    @classmethod
    def normalize_csv(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return ", ".join(split_csv(v))


class ProfileOut(BaseModel, extra="ignore"):
    id: str
    company_name: str | None = ""
    contact_email: str | None = None
    siret: str | None = None
    address: str | None = None
    website: str | None = None
    company_size: str | None = None
    specialization: str | None = ""
    cpv_codes: str | None = ""
    target_sectors: str | None = ""
    certifications: str | None = ""
    negative_keywords: str | None = ""
    scope: str | None = None
    target_departments: str | None = ""
    subscription_status: str | None = None
    trial_started_at: datetime | None = None
    saved_dashboard_filters: dict | None = None
