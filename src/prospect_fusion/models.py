from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from prospect_fusion.schema import SourceChannel


class MatchConfidence(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MatchMethod(StrEnum):
    EXACT = "exact"
    STRONG = "strong"
    LIKELY = "likely"
    POSSIBLE = "possible"
    WEAK = "weak"


class ContactType(StrEnum):
    EMAIL = "email"
    PHONE = "phone"
    LOCATION = "location"


class Platform(StrEnum):
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    LINKEDIN = "linkedin"
    TIKTOK = "tiktok"
    UNKNOWN = "unknown"


class LeadRank(StrEnum):
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"

    @classmethod
    def from_score(cls, score: int) -> "LeadRank":
        if score >= 70:
            return cls.HOT
        if score >= 50:
            return cls.WARM
        return cls.COLD


class ScoreCategory(StrEnum):
    INTENT_SIGNALS = "intent_signals"
    PAIN_POINTS = "pain_points"
    LIFE_EVENTS = "life_events"
    AUTHORITY = "authority"
    RELATIONSHIP = "relationship"
    PROFILE_COMPLETENESS = "profile_completeness"

    @property
    def cap(self) -> int:
        return _CATEGORY_CAPS[self]

    @property
    def weight(self) -> float:
        """Relative weight, reported alongside factors only."""
        return _CATEGORY_CAPS[self] / 100


_CATEGORY_CAPS = {
    ScoreCategory.INTENT_SIGNALS: 30,
    ScoreCategory.PAIN_POINTS: 20,
    ScoreCategory.LIFE_EVENTS: 15,
    ScoreCategory.AUTHORITY: 15,
    ScoreCategory.RELATIONSHIP: 10,
    ScoreCategory.PROFILE_COMPLETENESS: 10,
}


def merge_confidence(merged_count: int) -> float:
    if merged_count >= 3:
        return 0.95
    if merged_count == 2:
        return 0.85
    return 0.70


@dataclass(slots=True, frozen=True)
class EngagementMetrics:
    followers: int = 0
    engagement: int = 0
    mutual_connections: int = 0
    past_interactions: int = 0

    def combine(self, other: "EngagementMetrics") -> "EngagementMetrics":
        return EngagementMetrics(
            followers=max(self.followers, other.followers),
            engagement=max(self.engagement, other.engagement),
            mutual_connections=max(self.mutual_connections, other.mutual_connections),
            past_interactions=max(self.past_interactions, other.past_interactions),
        )


@dataclass(slots=True)
class CandidateRecord:
    """One channel's description of a person, before fusion."""

    record_id: str
    name: str
    channel: SourceChannel
    email: str | None = None
    phone: str | None = None
    location: str | None = None
    occupation: str | None = None
    profile_url: str | None = None
    interests: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    signals: tuple[str, ...] = ()
    text: str = ""
    metrics: EngagementMetrics = field(default_factory=EngagementMetrics)
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class MatchResult:
    """Pairwise identity decision with a human-readable reason."""

    score: float
    confidence: MatchConfidence
    method: MatchMethod
    explanation: str
    rule: str = ""


@dataclass(slots=True)
class Cluster:
    """Records believed to describe the same person. The seed comes first."""

    cluster_id: str
    records: list[CandidateRecord]
    scores: dict[str, float] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.records)

    @property
    def record_ids(self) -> list[str]:
        return [record.record_id for record in self.records]

    @property
    def confidence(self) -> float:
        return merge_confidence(self.size)


@dataclass(slots=True, frozen=True)
class ContactInfo:
    type: ContactType
    value: str


@dataclass(slots=True, frozen=True)
class SocialLink:
    platform: Platform
    url: str


@dataclass(slots=True, frozen=True)
class ScoreFactor:
    category: ScoreCategory
    signal: str
    points: int
    weight: float


@dataclass(slots=True, frozen=True)
class ScoreBreakdown:
    """Per-category points, each already capped at its ceiling."""

    intent_signals: int = 0
    pain_points: int = 0
    life_events: int = 0
    authority: int = 0
    relationship: int = 0
    profile_completeness: int = 0

    def points_for(self, category: ScoreCategory) -> int:
        return getattr(self, category.value)

    def total(self) -> int:
        return sum(self.points_for(category) for category in ScoreCategory)

    def as_dict(self) -> dict[str, int]:
        return {category.value: self.points_for(category) for category in ScoreCategory}


@dataclass(slots=True, frozen=True)
class ScoreResult:
    score: int
    rank: LeadRank
    confidence: float
    breakdown: ScoreBreakdown
    factors: tuple[ScoreFactor, ...] = ()


@dataclass(slots=True)
class MergedEntity:
    """A resolved identity fused from one or more candidate records."""

    entity_id: str
    name: str
    mentions: tuple[SourceChannel, ...]
    raw_sources: dict[str, list[dict[str, Any]]]
    merged_count: int
    confidence: float
    occupations: tuple[str, ...] = ()
    interests: tuple[str, ...] = ()
    signals: tuple[str, ...] = ()
    sentiment_indicators: tuple[str, ...] = ()
    topics: tuple[str, ...] = ()
    activities: tuple[str, ...] = ()
    contact_info: tuple[ContactInfo, ...] = ()
    social_links: tuple[SocialLink, ...] = ()
    metrics: EngagementMetrics = field(default_factory=EngagementMetrics)
    relationship_strength: float = 0.0
    score: ScoreResult | None = None

    @property
    def has_location(self) -> bool:
        return any(contact.type == ContactType.LOCATION for contact in self.contact_info)

    @property
    def score_value(self) -> int:
        return self.score.score if self.score else 0


@dataclass(slots=True, frozen=True)
class RunSummary:
    total: int
    hot: int
    warm: int
    cold: int

    @classmethod
    def from_entities(cls, entities: list[MergedEntity]) -> "RunSummary":
        ranks = [LeadRank.from_score(entity.score_value) for entity in entities]
        return cls(
            total=len(entities),
            hot=ranks.count(LeadRank.HOT),
            warm=ranks.count(LeadRank.WARM),
            cold=ranks.count(LeadRank.COLD),
        )


@dataclass(slots=True)
class FusionResult:
    run_id: str
    entities: list[MergedEntity]
    clusters: list[Cluster]
    summary: RunSummary
