from __future__ import annotations

import logging
from dataclasses import dataclass, field

from prospect_fusion.lexicons import (
    INTENT_PHRASES,
    LEADERSHIP_TITLES,
    LIFE_EVENT_PHRASES,
    PAIN_PHRASES,
    Lexicon,
)
from prospect_fusion.models import (
    EngagementMetrics,
    LeadRank,
    MergedEntity,
    ScoreBreakdown,
    ScoreCategory,
    ScoreFactor,
    ScoreResult,
)

logger = logging.getLogger(__name__)

MAX_SCORE = 100
LEADERSHIP_POINTS = 12
MAX_ENGAGEMENT_POINTS = 10
MAX_INTERACTION_POINTS = 5

_FOLLOWER_TIERS = ((10_000, 15), (5_000, 12), (1_000, 8))
_MUTUAL_TIERS = ((50, 10), (20, 7), (5, 4))
_RAW_TEXT_KEYS = ("text", "content", "bio")


@dataclass(slots=True, frozen=True)
class ProfileFlags:
    has_occupation: bool = False
    has_location: bool = False
    has_social_links: bool = False
    has_skills: bool = False


@dataclass(slots=True, frozen=True)
class ScoringInput:
    """Everything the scoring engine looks at for one prospect."""

    text: str = ""
    occupation: str | None = None
    interests: tuple[str, ...] = ()
    signals: tuple[str, ...] = ()
    profile: ProfileFlags = field(default_factory=ProfileFlags)
    metrics: EngagementMetrics = field(default_factory=EngagementMetrics)

    @classmethod
    def from_entity(cls, entity: MergedEntity) -> "ScoringInput":
        parts: list[str] = [entity.name, *entity.occupations, *entity.interests, *entity.signals, *entity.topics]
        for payloads in entity.raw_sources.values():
            for payload in payloads:
                parts.extend(
                    payload[key] for key in _RAW_TEXT_KEYS if isinstance(payload.get(key), str) and payload[key]
                )
        return cls(
            text=" ".join(part for part in parts if part),
            occupation=entity.occupations[0] if entity.occupations else None,
            interests=entity.interests,
            signals=entity.signals,
            profile=ProfileFlags(
                has_occupation=bool(entity.occupations),
                has_location=entity.has_location,
                has_social_links=bool(entity.social_links),
                has_skills=bool(entity.interests),
            ),
            metrics=entity.metrics,
        )


class ScoringEngine:
    """Six-category lead score ("ScoutScore").

    Each category sums the points of every matched rule and is capped at its
    ceiling; the capped categories are summed and capped at 100. Factors keep
    the uncapped points of every award so the result can be explained.
    """

    def __init__(
        self,
        intent: Lexicon = INTENT_PHRASES,
        pain: Lexicon = PAIN_PHRASES,
        life_events: Lexicon = LIFE_EVENT_PHRASES,
        leadership: Lexicon = LEADERSHIP_TITLES,
    ) -> None:
        self._intent = intent
        self._pain = pain
        self._life_events = life_events
        self._leadership = leadership

    def score_entity(self, entity: MergedEntity) -> ScoreResult:
        return self.score(ScoringInput.from_entity(entity))

    def score(self, inputs: ScoringInput) -> ScoreResult:
        factors: list[ScoreFactor] = []
        text = inputs.text if isinstance(inputs.text, str) else ""
        tags = (*inputs.interests, *inputs.signals)

        breakdown = ScoreBreakdown(
            intent_signals=_lexicon_points(ScoreCategory.INTENT_SIGNALS, self._intent, text, tags, factors),
            pain_points=_lexicon_points(ScoreCategory.PAIN_POINTS, self._pain, text, tags, factors),
            life_events=_lexicon_points(ScoreCategory.LIFE_EVENTS, self._life_events, text, tags, factors),
            authority=self._authority(inputs, factors),
            relationship=_relationship(inputs.metrics, factors),
            profile_completeness=_completeness(inputs.profile, factors),
        )
        score = min(MAX_SCORE, breakdown.total())
        confidence = _confidence(factors, has_occupation=bool(inputs.occupation))
        return ScoreResult(
            score=score,
            rank=LeadRank.from_score(score),
            confidence=confidence,
            breakdown=breakdown,
            factors=tuple(factors),
        )

    def _authority(self, inputs: ScoringInput, factors: list[ScoreFactor]) -> int:
        category = ScoreCategory.AUTHORITY
        awards: list[tuple[str, int]] = []

        followers = max(0, inputs.metrics.followers)
        tier = _tier_points(followers, _FOLLOWER_TIERS)
        if tier:
            awards.append((f"{followers} followers", tier))

        engagement = max(0, inputs.metrics.engagement)
        engagement_points = min(MAX_ENGAGEMENT_POINTS, engagement // 50)
        if engagement_points:
            awards.append((f"{engagement} engagements", engagement_points))

        if inputs.occupation:
            titles = self._leadership.matches(inputs.occupation)
            if titles:
                awards.append((f"leadership title: {titles[0].phrase}", LEADERSHIP_POINTS))

        return _award(category, awards, factors)


def _lexicon_points(
    category: ScoreCategory,
    lexicon: Lexicon,
    text: str,
    tags: tuple[str, ...],
    factors: list[ScoreFactor],
) -> int:
    awards = [(entry.phrase, entry.points) for entry in lexicon.matches(text, tags)]
    return _award(category, awards, factors)


def _relationship(metrics: EngagementMetrics, factors: list[ScoreFactor]) -> int:
    awards: list[tuple[str, int]] = []
    mutuals = max(0, metrics.mutual_connections)
    tier = _tier_points(mutuals, _MUTUAL_TIERS)
    if tier:
        awards.append((f"{mutuals} mutual connections", tier))
    interactions = min(MAX_INTERACTION_POINTS, max(0, metrics.past_interactions))
    if interactions:
        awards.append((f"{metrics.past_interactions} past interactions", interactions))
    return _award(ScoreCategory.RELATIONSHIP, awards, factors)


def _completeness(profile: ProfileFlags, factors: list[ScoreFactor]) -> int:
    awards: list[tuple[str, int]] = []
    if profile.has_occupation:
        awards.append(("has occupation", 3))
    if profile.has_location:
        awards.append(("has location", 2))
    if profile.has_social_links:
        awards.append(("has social links", 3))
    if profile.has_skills:
        awards.append(("has skills or interests", 2))
    return _award(ScoreCategory.PROFILE_COMPLETENESS, awards, factors)


def _award(category: ScoreCategory, awards: list[tuple[str, int]], factors: list[ScoreFactor]) -> int:
    for signal, points in awards:
        factors.append(ScoreFactor(category=category, signal=signal, points=points, weight=category.weight))
    total = sum(points for _, points in awards)
    if total > category.cap:
        logger.debug("%s capped: %d -> %d", category.value, total, category.cap)
    return min(total, category.cap)


def _tier_points(value: int, tiers: tuple[tuple[int, int], ...]) -> int:
    for minimum, points in tiers:
        if value >= minimum:
            return points
    return 0


def _confidence(factors: list[ScoreFactor], has_occupation: bool) -> float:
    confidence = 0.5
    if len(factors) >= 5:
        confidence += 0.2
    if len(factors) >= 10:
        confidence += 0.15
    if any(factor.points >= 20 for factor in factors):
        confidence += 0.1
    if has_occupation:
        confidence += 0.05
    return round(min(1.0, confidence), 2)
