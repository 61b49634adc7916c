"""
dashboard_service.py — Dashboard session: fetch, paginate, filter

One DashboardSession per user holds the list the dashboard is showing.
The fetch itself is injected (an async callable returning FetchResult), so
the session only owns ordering, pagination and local filtering.

States:
    idle → loading → loaded            (refresh: first load or filter change)
    loaded → loading_more → loaded     (load more)

Business Rules:
- refresh resets the offset to 0 and replaces the list
- load_more advances the offset by one page and appends, de-duplicated by id
- load_more while a load is in flight, or after the last page, is ignored
- A response from before the latest refresh is discarded
- has_more = last page returned a full page (before the triage filter);
  a short page is taken as exhausted
- A failed refresh leaves an empty list, a failed load_more leaves the list
  and offset unchanged; both return to loaded with last_error set
- A fetcher that raises counts as a failed fetch
- min_score / min_budget / max_budget are applied locally on top of the
  server-side filters, since BOAMP knows nothing about our score

Called by: routers/dashboard.py
Depends on: config, schemas/tenders.py, services/results.py
"""

from typing import Awaitable, Callable

from loguru import logger

from ..config import settings
from ..schemas.tenders import DashboardFilters, Tender
from .results import FetchResult

IDLE = "idle"
LOADING = "loading"
LOADED = "loaded"
LOADING_MORE = "loading_more"

HIGH_MATCH_THRESHOLD = 75

Fetcher = Callable[[int, DashboardFilters], Awaitable[FetchResult]]


def merge_unique(existing: list[Tender], incoming: list[Tender]) -> list[Tender]:
    """Append incoming tenders whose id is not already listed (first copy wins)."""
    seen = {t.id for t in existing}
    merged = list(existing)
    for tender in incoming:
        if tender.id not in seen:
            seen.add(tender.id)
            merged.append(tender)
    return merged


def apply_local_filters(tenders: list[Tender], filters: DashboardFilters) -> list[Tender]:
    visible = []
    for t in tenders:
        if t.compatibility_score < filters.min_score:
            continue
        if filters.min_budget and (not t.estimated_budget or t.estimated_budget < filters.min_budget):
            continue
        if filters.max_budget and t.estimated_budget and t.estimated_budget > filters.max_budget:
            continue
        visible.append(t)
    return visible


def hero_stats(tenders: list[Tender]) -> dict:
    if not tenders:
        return {"high_match_count": 0, "total_budget": 0, "avg_score": 0}
    return {
        "high_match_count": sum(1 for t in tenders if t.compatibility_score > HIGH_MATCH_THRESHOLD),
        "total_budget": sum(t.estimated_budget or 0 for t in tenders),
        "avg_score": round(sum(t.compatibility_score for t in tenders) / len(tenders)),
    }


class DashboardSession:
    def __init__(self, user_id: str, page_size: int | None = None):
        self.user_id = user_id
        self.page_size = page_size or settings.boamp_page_size
        self.state = IDLE
        self.filters = DashboardFilters()
        self.offset = 0
        self.tenders: list[Tender] = []
        self.has_more = True
        self.last_error: str | None = None
        self._generation = 0

    async def refresh(self, fetch: Fetcher, filters: DashboardFilters | None = None) -> bool:
        """Load the first page. Returns False if a newer refresh overtook this one."""
        self._generation += 1
        generation = self._generation
        if filters is not None:
            self.filters = filters
        self.state = LOADING
        self.offset = 0

        result = await self._fetch(fetch, 0)
        if generation != self._generation:
            logger.debug("Dashboard {}: stale refresh response dropped", self.user_id)
            return False

        if result.ok:
            self.tenders = merge_unique([], result.tenders)
            self.has_more = result.fetched >= self.page_size
            self.last_error = None
        else:
            self.tenders = []
            self.has_more = False
            self.last_error = result.error
            logger.warning("Dashboard {}: refresh failed: {}", self.user_id, result.error)
        self.state = LOADED
        return True

    async def load_more(self, fetch: Fetcher) -> bool:
        """Append the next page. Returns False when the call was ignored or overtaken."""
        if self.state != LOADED or not self.has_more:
            logger.debug("Dashboard {}: load_more ignored in state {}", self.user_id, self.state)
            return False

        generation = self._generation
        next_offset = self.offset + self.page_size
        self.state = LOADING_MORE

        result = await self._fetch(fetch, next_offset)
        if generation != self._generation:
            logger.debug("Dashboard {}: stale page at offset {} dropped", self.user_id, next_offset)
            return False

        if result.ok:
            self.offset = next_offset
            self.tenders = merge_unique(self.tenders, result.tenders)
            self.has_more = result.fetched >= self.page_size
            self.last_error = None
        else:
            self.last_error = result.error
            logger.warning("Dashboard {}: load_more failed at offset {}: {}", self.user_id, next_offset, result.error)
        self.state = LOADED
        return True

    async def _fetch(self, fetch: Fetcher, offset: int) -> FetchResult:
        try:
            return await fetch(offset, self.filters)
        except Exception as e:
            logger.exception("Dashboard {}: fetch at offset {} raised", self.user_id, offset)
            return FetchResult.failure(f"Chargement impossible: {e.__class__.__name__}")

    def remove(self, tender_id: str) -> None:
        """Drop a tender the user just triaged from the current list."""
        self.tenders = [t for t in self.tenders if t.id != tender_id]

    def visible(self, filters: DashboardFilters | None = None) -> list[Tender]:
        return apply_local_filters(self.tenders, filters or self.filters)

    def snapshot(self, filters: DashboardFilters | None = None) -> dict:
        """Current state; `filters` overrides the session's local filters for this view only."""
        visible = self.visible(filters)
        return {
            "state": self.state,
            "offset": self.offset,
            "has_more": self.has_more,
            "total_loaded": len(self.tenders),
            "error": self.last_error,
            "stats": hero_stats(self.tenders),
            "tenders": visible,
        }


# ── Session registry (process-local) ─────────────────────────────────

_sessions: dict[str, DashboardSession] = {}


def get_session(user_id: str) -> DashboardSession:
    session = _sessions.get(user_id)
    if session is None:
        session = _sessions[user_id] = DashboardSession(user_id)
    return session


def drop_session(user_id: str) -> None:
    _sessions.pop(user_id, None)


def reset_sessions() -> None:
    _sessions.clear()
