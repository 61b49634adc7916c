"""
test_scoring.py — Compatibility score and smart snippet

Covers: base score, positive / negative hits, clamping, token rules,
monotonicity, and sentence selection for the card summary.

Called by: pytest
Depends on: compagnon/scoring.py
"""

from types import SimpleNamespace

import pytest

from compagnon.scoring import (
    EMPTY_SUMMARY,
    MAX_SCORE,
    MIN_SCORE,
    clamp_score,
    negative_tokens,
    score_breakdown,
    score_tender,
    smart_summary,
    specialization_tokens,
)


def _profile(specialization="", negative_keywords=""):
    return SimpleNamespace(specialization=specialization, negative_keywords=negative_keywords)


# ── Tokens ───────────────────────────────────────────────────────────


def test_specialization_tokens_drop_short_words():
    assert specialization_tokens("Rénovation énergétique du BTP") == ["rénovation", "énergétique"]


def test_specialization_tokens_distinct():
    assert specialization_tokens("peinture Peinture façade") == ["peinture", "façade"]


def test_specialization_tokens_empty():
    assert specialization_tokens(None) == []
    assert specialization_tokens("") == []


def test_negative_tokens_trim_and_skip_empty():
    assert negative_tokens("plomberie, , Nettoyage ,") == ["plomberie", "nettoyage"]


# ── Score ────────────────────────────────────────────────────────────


def test_renovation_scenario_scores_seventy():
    profile = _profile("rénovation énergétique")
    assert score_tender("rénovation énergétique du lycée", "", profile) == 70


def test_no_profile_keywords_gives_base():
    assert score_tender("Entretien des espaces verts", "", _profile()) == 50


def test_negative_hit_outweighs_positive():
    profile = _profile("rénovation énergétique", "nettoyage")
    # 50 + 20 - 40
    assert score_tender("Rénovation énergétique et nettoyage", "", profile) == 30


def test_match_is_case_insensitive_substring():
    profile = _profile("menuiserie")
    assert score_tender("MENUISERIES extérieures", "", profile) == 60


def test_description_counts_too():
    profile = _profile("isolation")
    assert score_tender("Lot 3", "Isolation thermique par l'extérieur", profile) == 60


def test_repeated_keyword_counts_once():
    profile = _profile("toiture")
    assert score_tender("toiture toiture toiture", "toiture", profile) == 60


def test_clamped_low():
    profile = _profile("", "nettoyage, vitrerie, gardiennage")
    bd = score_breakdown("nettoyage vitrerie gardiennage", profile.specialization, profile.negative_keywords)
    assert bd.raw_total == -70
    assert bd.final_score == MIN_SCORE


def test_clamped_high():
    wanted = "alpha1 bravo2 charlie3 delta4 echo55 foxtrot6"
    text = wanted
    assert score_breakdown(text, wanted, "").final_score == MAX_SCORE


@pytest.mark.parametrize("raw,expected", [(-100, 5), (4, 5), (5, 5), (50, 50), (99, 99), (250, 99)])
def test_clamp_score(raw, expected):
    assert clamp_score(raw) == expected


def test_score_always_within_bounds():
    wanted_list = ["", "rénovation", "rénovation énergétique bâtiment chauffage", "a b c d"]
    negatives = ["", "nettoyage", "nettoyage, rénovation, chauffage"]
    texts = ["", "rénovation", "rénovation énergétique du bâtiment avec chauffage et nettoyage"]
    for wanted in wanted_list:
        for neg in negatives:
            for text in texts:
                assert MIN_SCORE <= score_breakdown(text, wanted, neg).final_score <= MAX_SCORE


def test_adding_matching_specialization_never_decreases():
    text = "Travaux de rénovation énergétique et menuiserie"
    before = score_breakdown(text, "rénovation", "")
    after = score_breakdown(text, "rénovation menuiserie", "")
    assert after.final_score >= before.final_score


def test_adding_matching_negative_never_increases():
    text = "Travaux de rénovation énergétique et nettoyage"
    before = score_breakdown(text, "rénovation", "")
    after = score_breakdown(text, "rénovation", "nettoyage")
    assert after.final_score <= before.final_score


def test_breakdown_lists_hits():
    bd = score_breakdown("Rénovation et nettoyage", "rénovation énergétique", "nettoyage")
    assert bd.to_dict() == {
        "matched_keywords": ["rénovation"],
        "negative_hits": ["nettoyage"],
        "raw_total": 20,
        "final_score": 20,
    }


# ── Smart snippet ────────────────────────────────────────────────────


def test_summary_empty_description():
    assert smart_summary("Titre", "", "rénovation") == EMPTY_SUMMARY


def test_summary_without_specialization_truncates():
    text = "x" * 300
    summary = smart_summary("Titre", text, None)
    assert summary == "x" * 180 + "..."


def test_summary_picks_best_matching_sentence():
    description = (
        "Le présent marché concerne la commune. "
        "Les travaux portent sur la rénovation thermique de 3 écoles. "
        "Visite obligatoire."
    )
    assert smart_summary("Marché", description, "rénovation thermique") == (
        "Les travaux portent sur la rénovation thermique de 3 écoles."
    )


def test_summary_strips_prefix_label():
    description = "Objet du marché : Réfection complète de la toiture du gymnase municipal."
    assert smart_summary("X", description, "toiture").startswith("Réfection complète")


def test_summary_falls_back_when_nothing_matches():
    description = "Marché alloti. Voir le règlement de consultation pour le détail des prestations."
    assert smart_summary("X", description, "plomberie") == description
