"""
test_stats_service.py — Workspace statistics

Covers: KPIs, conversion rate with and without closed tenders, period
filter on deadlines, monthly trend, top breakdowns, GET /api/stats.

Called by: pytest
Depends on: compagnon/services/stats_service.py, tests/conftest.py
"""

from datetime import date, timedelta

import pytest

from compagnon.cache import TenderCache
from compagnon.models.interactions import BLACKLISTED, LOST, SAVED, TO_QUALIFY, WON
from compagnon.services import interaction_service, stats_service

TODAY = date(2026, 6, 15)


def _add(db, make_tender, tender_id, status, days=0, **fields):
    deadline = (TODAY + timedelta(days=days)).isoformat() if days is not None else "Non spécifiée"
    TenderCache(db, "user-001", seed_samples=False).put(make_tender(tender_id, deadline=deadline, **fields))
    interaction_service.upsert_interaction(db, "user-001", tender_id, status)


def _stats(db, period="all"):
    return stats_service.workspace_stats(db, "user-001", period, today=TODAY)


def test_empty_workspace(db_session, test_profile):
    stats = _stats(db_session)
    assert stats["total_opportunities"] == 0
    assert stats["avg_score"] == 0
    assert stats["conversion_rate"] == 0
    assert [m["value"] for m in stats["trend"]] == [0] * 12


def test_kpis(db_session, test_profile, make_tender):
    _add(db_session, make_tender, "A", SAVED, compatibility_score=80, estimated_budget=100_000)
    _add(db_session, make_tender, "B", WON, compatibility_score=40, estimated_budget=50_000)
    _add(db_session, make_tender, "C", LOST, compatibility_score=60)
    _add(db_session, make_tender, "D", BLACKLISTED, compatibility_score=99)
    _add(db_session, make_tender, "E", TO_QUALIFY, compatibility_score=99)

    stats = _stats(db_session)

    assert stats["total_opportunities"] == 3
    assert stats["total_budget"] == 150_000
    assert stats["avg_score"] == 60
    assert stats["winnable_count"] == 2  # A by score, B because won
    assert (stats["won_count"], stats["lost_count"]) == (1, 1)
    assert stats["conversion_rate"] == 50


def test_conversion_rate_zero_without_closed_tenders(db_session, test_profile, make_tender):
    _add(db_session, make_tender, "A", SAVED)
    _add(db_session, make_tender, "B", SAVED)
    stats = _stats(db_session)
    assert stats["won_count"] == stats["lost_count"] == 0
    assert stats["conversion_rate"] == 0


def test_conversion_rate_rounded(db_session, test_profile, make_tender):
    _add(db_session, make_tender, "A", WON)
    _add(db_session, make_tender, "B", LOST)
    _add(db_session, make_tender, "C", LOST)
    assert _stats(db_session)["conversion_rate"] == 33


@pytest.mark.parametrize("period,expected", [
    ("30d", {"near", "past", "undated"}),
    ("90d", {"near", "past", "undated", "quarter"}),
    ("year", {"near", "past", "undated", "quarter", "far"}),
    ("all", {"near", "past", "undated", "quarter", "far", "ancient"}),
])
def test_period_filter(db_session, test_profile, make_tender, period, expected):
    _add(db_session, make_tender, "near", SAVED, days=30)
    _add(db_session, make_tender, "past", SAVED, days=-30)
    _add(db_session, make_tender, "undated", SAVED, days=None)
    _add(db_session, make_tender, "quarter", SAVED, days=60)
    _add(db_session, make_tender, "far", SAVED, days=-300)
    _add(db_session, make_tender, "ancient", SAVED, days=-400)

    assert _stats(db_session, period)["total_opportunities"] == len(expected)


def test_unknown_period_rejected(db_session):
    with pytest.raises(ValueError):
        _stats(db_session, "week")


def test_trend_counts_current_year_deadlines(db_session, test_profile, make_tender):
    _add(db_session, make_tender, "A", SAVED, days=0)  # June
    _add(db_session, make_tender, "B", SAVED, days=1)  # June
    _add(db_session, make_tender, "C", WON, days=-120)  # February
    _add(db_session, make_tender, "D", SAVED, days=-400)  # previous year
    _add(db_session, make_tender, "E", SAVED, days=None)

    trend = {m["name"]: m["value"] for m in _stats(db_session)["trend"]}
    assert trend["Juin"] == 2
    assert trend["Fév"] == 1
    assert sum(trend.values()) == 3


def test_top_breakdowns(db_session, test_profile, make_tender):
    _add(db_session, make_tender, "A", SAVED, procedure_type="Procédure adaptée", departments=["33", "40"])
    _add(db_session, make_tender, "B", SAVED, procedure_type="Procédure ouverte", departments=["33"])
    _add(db_session, make_tender, "C", WON, procedure_type="Appel d'offres ouvert", departments=["64"])

    stats = _stats(db_session)
    assert stats["top_procedures"][0] == {"name": "Procédure", "value": 2}
    assert stats["top_departments"][0] == {"name": "33", "value": 2}
    assert {s["name"]: s["value"] for s in stats["by_status"]} == {SAVED: 2, WON: 1}


# ── Route ────────────────────────────────────────────────────────────


def test_stats_route(client, make_tender, db_session):
    _add(db_session, make_tender, "A", WON, days=None, compatibility_score=90)
    data = client.get("/api/stats", params={"period": "30d"}).json()
    assert data["period"] == "30d"
    assert data["total_opportunities"] == 1
    assert data["conversion_rate"] == 100
    assert len(data["trend"]) == 12


def test_stats_route_rejects_unknown_period(client):
    resp = client.get("/api/stats", params={"period": "week"})
    assert resp.status_code == 422
