"""
test_interaction_service.py — Triage state upserts

Covers: one row per (user, tender), notes kept when omitted, reminder
dates, unknown statuses, AI analysis / chat storage, write failures.

Called by: pytest
Depends on: compagnon/services/interaction_service.py, tests/conftest.py
"""

from datetime import date
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from compagnon.models import UserInteraction
from compagnon.models.interactions import BLACKLISTED, LOST, SAVED, TO_QUALIFY, WON
from compagnon.services import interaction_service
from compagnon.services.results import UNSET


def _rows(db, user_id="user-001"):
    return db.query(UserInteraction).filter_by(user_id=user_id).all()


def test_upsert_twice_keeps_one_row_with_latest_notes(db_session, test_profile):
    interaction_service.upsert_interaction(db_session, test_profile.id, "t-1", SAVED, notes="premier appel")
    interaction_service.upsert_interaction(db_session, test_profile.id, "t-1", SAVED, notes="relancer lundi")

    rows = _rows(db_session)
    assert len(rows) == 1
    assert rows[0].internal_notes == "relancer lundi"


def test_omitted_notes_are_kept(db_session, test_profile):
    interaction_service.upsert_interaction(db_session, test_profile.id, "t-1", SAVED, notes="à chiffrer")
    result = interaction_service.upsert_interaction(db_session, test_profile.id, "t-1", WON)

    assert result.ok
    assert result.interaction.status == WON
    assert result.interaction.internal_notes == "à chiffrer"


def test_none_clears_notes(db_session, test_profile):
    interaction_service.upsert_interaction(db_session, test_profile.id, "t-1", SAVED, notes="x")
    result = interaction_service.upsert_interaction(db_session, test_profile.id, "t-1", SAVED, notes=None)
    assert result.interaction.internal_notes is None


def test_reminder_date_set_and_kept(db_session, test_profile):
    interaction_service.upsert_interaction(
        db_session, test_profile.id, "t-1", SAVED, reminder_date=date(2099, 2, 1)
    )
    result = interaction_service.upsert_interaction(db_session, test_profile.id, "t-1", LOST)
    assert result.interaction.custom_reminder_date == date(2099, 2, 1)


def test_reminder_must_be_a_date(db_session, test_profile):
    with pytest.raises(ValueError):
        interaction_service.upsert_interaction(db_session, test_profile.id, "t-1", SAVED, reminder_date="demain")


def test_unknown_status_rejected(db_session, test_profile):
    with pytest.raises(ValueError, match="Unknown interaction status"):
        interaction_service.upsert_interaction(db_session, test_profile.id, "t-1", "En cours")
    assert _rows(db_session) == []


def test_triaged_ids_exclude_to_qualify(db_session, test_profile):
    for tid, status in [("a", BLACKLISTED), ("b", SAVED), ("c", TO_QUALIFY), ("d", WON), ("e", LOST)]:
        interaction_service.upsert_interaction(db_session, test_profile.id, tid, status)
    rows = interaction_service.fetch_interactions(db_session, test_profile.id)
    assert interaction_service.triaged_tender_ids(rows) == {"a", "b", "d", "e"}


def test_analysis_creates_row_to_qualify(db_session, test_profile):
    analysis = {"risks": ["pénalités"], "strengths": [], "workload": "Moyenne", "questions": []}
    result = interaction_service.save_analysis(db_session, test_profile.id, "t-1", analysis)

    assert result.ok
    assert result.interaction.status == TO_QUALIFY
    assert result.interaction.ai_analysis_result == analysis


def test_chat_history_keeps_status(db_session, test_profile):
    interaction_service.upsert_interaction(db_session, test_profile.id, "t-1", SAVED)
    history = [{"role": "user", "text": "Quels lots ?"}, {"role": "model", "text": "Deux lots."}]
    result = interaction_service.save_chat_history(db_session, test_profile.id, "t-1", history)

    assert result.interaction.status == SAVED
    assert result.interaction.chat_history == history


def test_interactions_scoped_per_user(db_session, test_profile):
    from compagnon.services import profile_service

    profile_service.save_profile(db_session, "user-002", company_name="Autre")
    interaction_service.upsert_interaction(db_session, "user-002", "t-1", BLACKLISTED)
    assert interaction_service.fetch_interactions(db_session, test_profile.id) == []


def test_write_failure_returns_not_ok(db_session, test_profile):
    with patch.object(db_session, "commit", side_effect=OperationalError("UPDATE", {}, Exception("locked"))):
        result = interaction_service.upsert_interaction(db_session, test_profile.id, "t-1", SAVED)

    assert result.ok is False
    assert result.error
    assert _rows(db_session) == []


def test_unset_is_falsy_singleton():
    from compagnon.services.results import _Unset

    assert not UNSET
    assert _Unset() is UNSET
    assert repr(UNSET) == "UNSET"
