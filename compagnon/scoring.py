"""
Scoring Engine — local compatibility score between a tender and a profile.

Score = clamp(50 + 10 × specialization hits − 40 × negative hits, 5, 99)

A specialization hit is a distinct whitespace token longer than 4 characters
found anywhere in the tender's title + description (case-insensitive
substring). A negative hit is a distinct comma-separated negative keyword
found the same way. No stemming, no frequency weighting: one negative hit
outweighs several positive ones on purpose.

Also builds the "smart snippet" shown on tender cards.
"""
import re
from dataclasses import dataclass, field

BASE_SCORE = 50
POSITIVE_BONUS = 10
NEGATIVE_PENALTY = 40
MIN_SCORE = 5
MAX_SCORE = 99
MIN_TOKEN_LENGTH = 5  # tokens of 4 chars or less are treated as stopwords

SUMMARY_MAX_CHARS = 180
EMPTY_SUMMARY = "Aucune description détaillée fournie par l'acheteur."


# --- Helpers ---

def specialization_tokens(specialization: str | None) -> list[str]:
    """'Rénovation énergétique du BTP' → ['rénovation', 'énergétique'] (distinct, ordered)"""
    seen: list[str] = []
    for tok in (specialization or "").lower().split():
        if len(tok) >= MIN_TOKEN_LENGTH and tok not in seen:
            seen.append(tok)
    return seen


def negative_tokens(negative_keywords: str | None) -> list[str]:
    """'plomberie, , Nettoyage' → ['plomberie', 'nettoyage']"""
    seen: list[str] = []
    for tok in (negative_keywords or "").lower().split(","):
        tok = tok.strip()
        if tok and tok not in seen:
            seen.append(tok)
    return seen


def clamp_score(raw: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, raw))


# --- Score breakdown ---

@dataclass
class ScoreBreakdown:
    matched_keywords: list[str] = field(default_factory=list)
    negative_hits: list[str] = field(default_factory=list)
    raw_total: int = BASE_SCORE
    final_score: int = BASE_SCORE

    def to_dict(self) -> dict:
        return {
            "matched_keywords": self.matched_keywords,
            "negative_hits": self.negative_hits,
            "raw_total": self.raw_total,
            "final_score": self.final_score,
        }


def score_breakdown(text: str, specialization: str | None, negative_keywords: str | None) -> ScoreBreakdown:
    """Score tender text against a profile's specialization and negative keywords."""
    haystack = (text or "").lower()
    bd = ScoreBreakdown()
    bd.matched_keywords = [t for t in specialization_tokens(specialization) if t in haystack]
    bd.negative_hits = [t for t in negative_tokens(negative_keywords) if t in haystack]
    bd.raw_total = (
        BASE_SCORE
        + POSITIVE_BONUS * len(bd.matched_keywords)
        - NEGATIVE_PENALTY * len(bd.negative_hits)
    )
    bd.final_score = clamp_score(bd.raw_total)
    return bd


def score_tender(title: str, full_description: str, profile) -> int:
    """Compatibility score (5-99) for a tender against a UserProfile-like object."""
    text = f"{title or ''} {full_description or ''}"
    return score_breakdown(
        text,
        getattr(profile, "specialization", None),
        getattr(profile, "negative_keywords", None),
    ).final_score


# --- Smart snippet ---

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")


def _truncate(text: str) -> str:
    return text[:SUMMARY_MAX_CHARS] + ("..." if len(text) > SUMMARY_MAX_CHARS else "")


def smart_summary(title: str, full_description: str, specialization: str | None) -> str:
    """Pick the description sentence that best matches the profile.

    Sentence score: +10 per specialization keyword (len > 3), +2 if it
    contains a digit, -5 if shorter than 20 chars. Falls back to the first
    180 characters when nothing matches.
    """
    text = re.sub(r"Objet du marché :", "", full_description or "", flags=re.IGNORECASE)
    text = re.sub(r"\s+", " ", text).strip()

    # Drop a leading copy of the title, but only if enough text remains
    if title and text.startswith(title) and len(text) > len(title) + 50:
        text = text[len(title):].strip()

    if len(text) < 5:
        return EMPTY_SUMMARY
    if not specialization:
        return _truncate(text)

    keywords = [w for w in re.split(r"[\s,]+", specialization.lower()) if len(w) > 3]
    sentences = _SENTENCE_RE.findall(text) or [text]

    best, best_score = "", -1
    for sentence in sentences:
        lowered = sentence.lower()
        score = sum(10 for kw in keywords if kw in lowered)
        if re.search(r"\d", sentence):
            score += 2
        if len(sentence) < 20:
            score -= 5
        if score > best_score:
            best, best_score = sentence, score

    if best_score > 0:
        return best.strip()
    return _truncate(text)
