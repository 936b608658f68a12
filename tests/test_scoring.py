import pytest

from prospect_fusion.config import Settings
from prospect_fusion.models import (
    EngagementMetrics,
    LeadRank,
    MergedEntity,
    ScoreCategory,
)
from prospect_fusion.runners import LocalFusionPipeline
from prospect_fusion.steps.scoring import ProfileFlags, ScoringEngine, ScoringInput


def _factor_points(result, category: ScoreCategory) -> int:
    return sum(factor.points for factor in result.factors if factor.category == category)


def test_same_person_on_three_channels_scores_intent_and_pain() -> None:
    bio = "Looking for extra income. Pagod sa trabaho na ako."
    sources = {
        "screenshot": [{"name": "Juan Dela Cruz", "bio": bio}],
        "csv_import": [{"name": "juan dela cruz", "email": "juan@mail.com"}],
        "manual_text": [{"name": "Juan Dela Cruz", "text": bio}],
    }

    result = LocalFusionPipeline(settings=Settings()).run(sources)

    assert len(result.entities) == 1
    entity = result.entities[0]
    assert entity.merged_count == 3
    assert entity.confidence == 0.95
    assert entity.score.breakdown.intent_signals >= 25
    assert entity.score.breakdown.pain_points >= 17


def test_authority_is_capped_below_follower_plus_title() -> None:
    inputs = ScoringInput(
        occupation="Regional Director",
        metrics=EngagementMetrics(followers=12_000),
    )

    result = ScoringEngine().score(inputs)

    assert result.breakdown.authority == 15
    assert _factor_points(result, ScoreCategory.AUTHORITY) == 27


def test_empty_entity_is_cold_with_base_confidence() -> None:
    entity = MergedEntity(
        entity_id="prospect_000001",
        name="",
        mentions=(),
        raw_sources={},
        merged_count=1,
        confidence=0.70,
    )

    result = ScoringEngine().score_entity(entity)

    assert result.score == 0
    assert result.rank == LeadRank.COLD
    assert result.confidence == 0.5
    assert result.factors == ()


def test_intent_phrases_stack_until_the_cap() -> None:
    result = ScoringEngine().score(ScoringInput(text="Financial freedom through negosyo or a side hustle"))

    assert result.breakdown.intent_signals == 30
    assert _factor_points(result, ScoreCategory.INTENT_SIGNALS) == 30 + 28 + 25
    assert result.score == 30
    assert result.confidence == pytest.approx(0.6)


def test_phrases_match_tags_as_well_as_text() -> None:
    result = ScoringEngine().score(ScoringInput(signals=("Insurance",)))

    assert result.breakdown.intent_signals == 22


def test_every_category_maxed_totals_100() -> None:
    inputs = ScoringInput(
        text="financial freedom negosyo side hustle laid off debt new job relocating",
        occupation="Regional Director",
        interests=("travel",),
        profile=ProfileFlags(has_occupation=True, has_location=True, has_social_links=True, has_skills=True),
        metrics=EngagementMetrics(followers=12_000, engagement=600, mutual_connections=60, past_interactions=7),
    )

    result = ScoringEngine().score(inputs)

    assert result.breakdown.as_dict() == {
        "intent_signals": 30,
        "pain_points": 20,
        "life_events": 15,
        "authority": 15,
        "relationship": 10,
        "profile_completeness": 10,
    }
    assert result.score == 100
    assert result.rank == LeadRank.HOT
    assert len(result.factors) == 16
    assert result.confidence == 1.0


def test_authority_and_relationship_tiers() -> None:
    engine = ScoringEngine()

    def authority(followers: int, engagement: int = 0) -> int:
        metrics = EngagementMetrics(followers=followers, engagement=engagement)
        return engine.score(ScoringInput(metrics=metrics)).breakdown.authority

    def relationship(mutuals: int, interactions: int = 0) -> int:
        metrics = EngagementMetrics(mutual_connections=mutuals, past_interactions=interactions)
        return engine.score(ScoringInput(metrics=metrics)).breakdown.relationship

    assert [authority(n) for n in (999, 1_000, 5_000, 10_000)] == [0, 8, 12, 15]
    assert authority(0, engagement=149) == 2
    assert authority(0, engagement=5_000) == 10
    assert [relationship(n) for n in (4, 5, 20, 50)] == [0, 4, 7, 10]
    assert relationship(0, interactions=3) == 3
    assert relationship(20, interactions=9) == 10


def test_negative_metrics_count_as_no_evidence() -> None:
    metrics = EngagementMetrics(followers=-10, engagement=-500, mutual_connections=-1, past_interactions=-3)

    result = ScoringEngine().score(ScoringInput(metrics=metrics))

    assert result.score == 0


def test_completeness_points() -> None:
    result = ScoringEngine().score(
        ScoringInput(occupation="Nurse", profile=ProfileFlags(has_occupation=True, has_skills=True))
    )

    assert result.breakdown.profile_completeness == 5
    assert result.confidence == pytest.approx(0.55)


def test_factors_report_category_weight() -> None:
    result = ScoringEngine().score(ScoringInput(text="laid off"))

    (factor,) = result.factors
    assert factor.category == ScoreCategory.PAIN_POINTS
    assert factor.signal == "laid off"
    assert factor.points == 20
    assert factor.weight == pytest.approx(0.20)


@pytest.mark.parametrize(
    ("score", "rank"),
    [
        (100, LeadRank.HOT),
        (70, LeadRank.HOT),
        (69, LeadRank.WARM),
        (50, LeadRank.WARM),
        (49, LeadRank.COLD),
        (0, LeadRank.COLD),
    ],
)
def test_rank_thresholds(score: int, rank: LeadRank) -> None:
    assert LeadRank.from_score(score) == rank
