"""BOAMP open-data connector (OpenDataSoft Explore API v2.1).

Endpoint: GET {boamp_api_url}?limit=20&offset=0&order_by=dateparution desc&where=...
Response: { total_count: N, results: [{ idweb, objet, nomacheteur, datelimitereponse,
            url_avis, code_departement, descripteur_libelle, procedure_libelle,
            dateparution, donnees: "<JSON string>" }] }

Records are mapped to Tender and scored against the requesting profile.
"""

import json
import logging
import re

from ..config import settings
from ..schemas.tenders import DashboardFilters, Tender, TenderContact, TenderLot
from ..scoring import score_tender, smart_summary
from ..services.profile_service import is_nationwide, target_departments
from ..utils import as_list, split_csv
from .base import BaseConnector

log = logging.getLogger(__name__)

_BUDGET_RE = re.compile(r"(\d[\d\s]*)(?:€|euros)", re.IGNORECASE)


# ── Query building ───────────────────────────────────────────────────


def _quote(value: str) -> str:
    """ODSQL string literal."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_where_clause(profile, filters: DashboardFilters | None = None) -> str:
    """Translate profile scope + server-side filters into an ODSQL where clause.

    Returns "" when nothing restricts the query (whole-country scope, no filters).
    """
    clauses = []

    if not is_nationwide(profile):
        depts = target_departments(profile)
        clauses.append(f"code_departement in ({', '.join(_quote(d) for d in depts)})")

    if filters:
        if filters.search_term:
            clauses.append(f"search(objet, {_quote(filters.search_term)})")
        if filters.selected_region:
            clauses.append(f"code_departement = {_quote(filters.selected_region)}")
        if filters.procedure_type:
            clauses.append(f"procedure_libelle = {_quote(filters.procedure_type)}")
        if filters.publication_date:
            clauses.append(f"dateparution >= date'{filters.publication_date.isoformat()}'")
        if filters.raw_keywords:
            for kw in split_csv(filters.raw_keywords):
                clauses.append(f"search(objet, {_quote(kw)})")

    return " and ".join(clauses)


def build_params(profile, offset: int = 0, filters: DashboardFilters | None = None,
                 page_size: int | None = None) -> dict:
    params = {
        "limit": str(page_size or settings.boamp_page_size),
        "offset": str(max(0, offset)),
        "order_by": "dateparution desc",
    }
    where = build_where_clause(profile, filters)
    if where:
        params["where"] = where
    return params


# ── Record mapping ───────────────────────────────────────────────────


def _parse_donnees(raw) -> dict:
    """`donnees` is a JSON string; a malformed one only empties this record's details."""
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        log.debug("BOAMP: unparsable donnees, ignoring details")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        return " ".join(_as_text(v) for v in value.values() if v)
    if isinstance(value, list):
        return " ".join(_as_text(v) for v in value if v)
    return str(value).strip()


def extract_budget(text: str) -> int | None:
    """'Montant estimé : 450 000 € HT' → 450000"""
    match = _BUDGET_RE.search(text or "")
    if not match:
        return None
    digits = re.sub(r"\s", "", match.group(1))
    return int(digits) if digits else None


def _parse_contact(identity: dict) -> TenderContact:
    return TenderContact(
        name=_as_text(identity.get("CORRESPONDANT") or identity.get("CONTACT")) or "Non spécifié",
        email=_as_text(identity.get("MEL")) or None,
        phone=_as_text(identity.get("TEL")) or None,
        address=", ".join(
            p for p in (_as_text(identity.get(k)) for k in ("ADRESSE", "CP", "VILLE")) if p
        ),
        url_buyer_profile=_as_text(identity.get("URL_PROFIL_ACHETEUR")) or None,
    )


def _parse_lots(objet: dict) -> list[TenderLot]:
    lots_block = objet.get("LOTS") or {}
    raw_lots = lots_block.get("LOT") if isinstance(lots_block, dict) else lots_block
    lots = []
    for i, lot in enumerate(as_list(raw_lots), start=1):
        if not isinstance(lot, dict):
            continue
        cpv = lot.get("CPV") or {}
        codes = as_list(cpv.get("PRINCIPAL")) if isinstance(cpv, dict) else as_list(cpv)
        lots.append(
            TenderLot(
                lot_number=_as_text(lot.get("NUM")) or str(i),
                title=_as_text(lot.get("INTITULE")) or f"Lot {i}",
                description=_as_text(lot.get("DESCRIPTION")) or None,
                cpv=[_as_text(c) for c in codes if c],
            )
        )
    return lots


def map_record(record: dict, profile) -> Tender | None:
    """Map one BOAMP record to a scored Tender. Records without idweb are skipped."""
    idweb = _as_text(record.get("idweb"))
    if not idweb:
        return None

    details = _parse_donnees(record.get("donnees"))
    objet = details.get("OBJET") if isinstance(details.get("OBJET"), dict) else {}
    caracteristiques = objet.get("CARACTERISTIQUES") if isinstance(objet.get("CARACTERISTIQUES"), dict) else {}

    title = _as_text(record.get("objet")) or "Sans titre"
    quantite = _as_text(caracteristiques.get("QUANTITE"))
    description_parts = [
        _as_text(objet.get("OBJET_COMPLET")),
        quantite,
        _as_text(details.get("RESUME_OBJET")),
        _as_text(record.get("objet")),
    ]
    full_description = " ".join(p for p in description_parts if p)

    identity = details.get("IDENTITE") if isinstance(details.get("IDENTITE"), dict) else {}
    deadline = _as_text(record.get("datelimitereponse"))

    return Tender(
        id=idweb,
        id_web=idweb,
        title=title,
        buyer=_as_text(record.get("nomacheteur")),
        deadline=deadline.split("T")[0] if deadline else "Non spécifiée",
        link_dce=_as_text(record.get("url_avis")),
        departments=[_as_text(d) for d in as_list(record.get("code_departement"))],
        descriptors=[_as_text(d) for d in as_list(record.get("descripteur_libelle"))],
        procedure_type=_as_text(record.get("procedure_libelle")) or "Procédure non spécifiée",
        publication_date=_as_text(record.get("dateparution")) or None,
        contact=_parse_contact(identity),
        lots=_parse_lots(objet),
        ai_summary=smart_summary(title, full_description, getattr(profile, "specialization", None)),
        compatibility_score=score_tender(title, full_description, profile),
        estimated_budget=extract_budget(quantite),
        full_description=full_description,
    )


# ── Connector ────────────────────────────────────────────────────────


class BoampConnector(BaseConnector):
    """BOAMP records feed — public, no auth."""

    def __init__(self, api_url: str | None = None, page_size: int | None = None,
                 timeout: float | None = None, max_retries: int | None = None):
        super().__init__(
            timeout=timeout if timeout is not None else settings.boamp_timeout,
            max_retries=max_retries if max_retries is not None else settings.boamp_max_retries,
        )
        self.api_url = api_url or settings.boamp_api_url
        self.page_size = page_size or settings.boamp_page_size

    async def _do_search(self, profile, offset: int = 0,
                         filters: DashboardFilters | None = None) -> list[Tender]:
        from ..http_client import http

        params = build_params(profile, offset, filters, self.page_size)
        r = await http.get(self.api_url, params=params, timeout=self.timeout)
        if r.status_code != 200:
            log.warning(f"BOAMP: HTTP {r.status_code} at offset {offset}: {r.text[:200]}")
        r.raise_for_status()

        body = r.json()
        return self._parse(body, profile)

    def _parse(self, body: dict, profile) -> list[Tender]:
        records = body.get("results") if isinstance(body, dict) else None
        if not isinstance(records, list):
            return []

        tenders = []
        for record in records:
            if not isinstance(record, dict):
                continue
            tender = map_record(record, profile)
            if tender:
                tenders.append(tender)

        log.info(f"BOAMP: {len(tenders)} tenders (total: {body.get('total_count', '?')})")
        return tenders
