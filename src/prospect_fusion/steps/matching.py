from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from rapidfuzz.distance import Jaro, Levenshtein

from prospect_fusion.models import CandidateRecord, MatchConfidence, MatchMethod, MatchResult

logger = logging.getLogger(__name__)

CONTACT_MATCH_SCORE = 0.99
EXACT_NAME_SCORE = 0.99
CASE_INSENSITIVE_SCORE = 0.95
SUFFIX_STRIPPED_SCORE = 0.92
FIRST_LAST_SCORE = 0.88
FIRST_TOKEN_PARTIAL_SCORE = 0.65
FIRST_TOKEN_ONLY_SCORE = 0.60
JARO_WINKLER_ACCEPT = 0.90
LEVENSHTEIN_ACCEPT = 0.85
PREFIX_SCALE = 0.1
MAX_PREFIX = 4

_NAME_SUFFIXES = frozenset({"jr", "jr.", "sr", "sr.", "ii", "iii", "iv"})
_NON_DIGITS = re.compile(r"\D")


class IdentityMatcher:
    """Heuristic pairwise matcher: contact overrides, then name rules.

    Rules are tried in order and the first applicable one wins. Two records
    sharing an email or a phone number are treated as the same person whatever
    their names say. Every rule is symmetric in its arguments.
    """

    def match(self, left: CandidateRecord, right: CandidateRecord) -> float:
        return self.match_detailed(left, right).score

    def match_detailed(self, left: CandidateRecord, right: CandidateRecord) -> MatchResult:
        left_name = clean_name(left.name)
        right_name = clean_name(right.name)
        if not left_name or not right_name:
            return _result(0.0, "missing_name", "No name on one or both records")

        shared = _shared_contact(left, right)
        if shared:
            return _result(CONTACT_MATCH_SCORE, "contact_override", f"Same {shared} on both records")

        return _name_match(left_name, right_name)


def explain_matches(
    records: Sequence[CandidateRecord],
    min_score: float = 0.6,
    matcher: IdentityMatcher | None = None,
) -> list[tuple[str, str, MatchResult]]:
    """Every record pair scoring at least ``min_score``, for debugging a run."""
    matcher = matcher or IdentityMatcher()
    pairs: list[tuple[str, str, MatchResult]] = []
    for i, left in enumerate(records):
        for right in records[i + 1 :]:
            result = matcher.match_detailed(left, right)
            if result.score >= min_score:
                pairs.append((left.record_id, right.record_id, result))
    return pairs


def clean_name(name: object) -> str:
    if not isinstance(name, str):
        return ""
    return " ".join(name.split())


def normalize_phone(phone: str | None) -> str:
    if not phone:
        return ""
    return _NON_DIGITS.sub("", str(phone))[-10:]


def normalize_email(email: str | None) -> str:
    if not email:
        return ""
    return str(email).strip().lower()


def jaro_winkler(left: str, right: str) -> float:
    """Jaro similarity plus the Winkler prefix boost, applied at any Jaro value."""
    left, right = sorted((left, right))
    jaro = Jaro.similarity(left, right)
    prefix = 0
    for c1, c2 in zip(left[:MAX_PREFIX], right[:MAX_PREFIX]):
        if c1 != c2:
            break
        prefix += 1
    return jaro + prefix * PREFIX_SCALE * (1.0 - jaro)


def levenshtein_similarity(left: str, right: str) -> float:
    return Levenshtein.normalized_similarity(left, right)


def confidence_tier(score: float) -> tuple[MatchConfidence, MatchMethod]:
    if score >= 0.95:
        return MatchConfidence.HIGH, MatchMethod.EXACT
    if score >= 0.85:
        return MatchConfidence.HIGH, MatchMethod.STRONG
    if score >= 0.75:
        return MatchConfidence.MEDIUM, MatchMethod.LIKELY
    if score >= 0.60:
        return MatchConfidence.LOW, MatchMethod.POSSIBLE
    return MatchConfidence.LOW, MatchMethod.WEAK


def _name_match(left: str, right: str) -> MatchResult:
    if left == right:
        return _result(EXACT_NAME_SCORE, "exact_name", "Names are identical")

    left_lower, right_lower = left.lower(), right.lower()
    if left_lower == right_lower:
        return _result(CASE_INSENSITIVE_SCORE, "case_insensitive_name", "Names differ only in case")

    left_tokens, right_tokens = left_lower.split(), right_lower.split()
    first_tokens_match = left_tokens[0] == right_tokens[0]
    if len(left_tokens) >= 2 and len(right_tokens) >= 2 and first_tokens_match:
        if left_tokens[-1] == right_tokens[-1]:
            return _result(FIRST_LAST_SCORE, "first_last_name", "First and last names match")
        return _result(FIRST_TOKEN_PARTIAL_SCORE, "first_name_partial", "First names match, last names differ")

    left_bare, right_bare = _strip_suffixes(left_tokens), _strip_suffixes(right_tokens)
    if left_bare and left_bare == right_bare:
        return _result(SUFFIX_STRIPPED_SCORE, "suffix_stripped", "Names match without generational suffix")

    jw = jaro_winkler(left_lower, right_lower)
    if jw >= JARO_WINKLER_ACCEPT:
        return _result(jw, "jaro_winkler", f"Jaro-Winkler similarity {jw:.2f}")

    lev = levenshtein_similarity(left_lower, right_lower)
    if lev >= LEVENSHTEIN_ACCEPT:
        return _result(lev, "levenshtein", f"Edit-distance similarity {lev:.2f}")

    if first_tokens_match:
        return _result(FIRST_TOKEN_ONLY_SCORE, "first_name_only", "Only first names match")

    best = max(jw, lev)
    return _result(best, "fuzzy_fallback", f"Best fuzzy similarity {best:.2f}")


def _shared_contact(left: CandidateRecord, right: CandidateRecord) -> str:
    left_email, right_email = normalize_email(left.email), normalize_email(right.email)
    if left_email and left_email == right_email:
        return "email"
    left_phone, right_phone = normalize_phone(left.phone), normalize_phone(right.phone)
    if left_phone and left_phone == right_phone:
        return "phone"
    return ""


def _strip_suffixes(tokens: Sequence[str]) -> str:
    kept = [token for token in tokens if token.rstrip(",") not in _NAME_SUFFIXES]
    return " ".join(token.rstrip(",") for token in kept)


def _result(score: float, rule: str, explanation: str) -> MatchResult:
    confidence, method = confidence_tier(score)
    logger.debug("Identity rule %s -> %.3f", rule, score)
    return MatchResult(score=score, confidence=confidence, method=method, explanation=explanation, rule=rule)
