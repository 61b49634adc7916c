"""
stats_service.py — Workspace statistics over saved / won / lost tenders

Pure computation over tender_service.get_saved_tenders; nothing is stored.

Business Rules:
- Period filter on the tender deadline: within 30 / 90 / 365 days of today,
  either side; a tender without deadline counts as today; "all" keeps all
- winnable = score >= 70 or status won
- conversion_rate = round(100 * won / (won + lost)), 0 when nothing is closed
- trend = deadlines per month of the current calendar year
- top procedures (first word of the procedure type) and top departments

Called by: routers/stats.py
Depends on: services/tender_service.py
"""

from collections import Counter
from datetime import date, datetime, timezone

from loguru import logger
from sqlalchemy.orm import Session

from ..models.interactions import LOST, WON
from . import tender_service

PERIOD_DAYS = {"30d": 30, "90d": 90, "year": 365, "all": None}
WINNABLE_SCORE = 70
MONTHS = ("Jan", "Fév", "Mar", "Avr", "Mai", "Juin", "Juil", "Août", "Sep", "Oct", "Nov", "Déc")


def _deadline(tender) -> date | None:
    if not tender.deadline:
        return None
    try:
        return date.fromisoformat(tender.deadline[:10])
    except ValueError:
        return None


def in_period(tender, period: str, today: date) -> bool:
    days = PERIOD_DAYS[period]
    if days is None:
        return True
    reference = _deadline(tender) or today
    return abs((reference - today).days) <= days


def _top(counter: Counter, n: int) -> list[dict]:
    return [{"name": name, "value": count} for name, count in counter.most_common(n)]


def workspace_stats(db: Session, user_id: str, period: str = "year", today: date | None = None) -> dict:
    if period not in PERIOD_DAYS:
        raise ValueError(f"Unknown period: {period}")
    today = today or datetime.now(timezone.utc).date()

    entries = [
        (tender, interaction)
        for tender, interaction in tender_service.get_saved_tenders(db, user_id)
        if in_period(tender, period, today)
    ]
    total = len(entries)

    won = sum(1 for _, i in entries if i.status == WON)
    lost = sum(1 for _, i in entries if i.status == LOST)
    closed = won + lost

    trend = [0] * 12
    for tender, _ in entries:
        deadline = _deadline(tender)
        if deadline and deadline.year == today.year:
            trend[deadline.month - 1] += 1

    procedures = Counter((t.procedure_type or "").split(" ")[0] or "Autre" for t, _ in entries)
    departments = Counter(d for t, _ in entries for d in t.departments)

    logger.debug("Workspace stats for {} ({}): {} tenders", user_id, period, total)
    return {
        "period": period,
        "total_opportunities": total,
        "total_budget": sum(t.estimated_budget or 0 for t, _ in entries),
        "avg_score": round(sum(t.compatibility_score for t, _ in entries) / total) if total else 0,
        "winnable_count": sum(
            1 for t, i in entries if t.compatibility_score >= WINNABLE_SCORE or i.status == WON
        ),
        "won_count": won,
        "lost_count": lost,
        "conversion_rate": round(100 * won / closed) if closed else 0,
        "trend": [{"name": m, "value": v} for m, v in zip(MONTHS, trend)],
        "by_status": _top(Counter(i.status for _, i in entries), 5),
        "top_procedures": _top(procedures, 4),
        "top_departments": _top(departments, 5),
    }
