"""Cross-source prospect identity resolution, fusion and lead scoring."""

from prospect_fusion.models import (
    CandidateRecord,
    Cluster,
    FusionResult,
    LeadRank,
    MatchResult,
    MergedEntity,
    RunSummary,
    ScoreResult,
)
from prospect_fusion.schema import FieldTag, RecordSchema, SourceChannel

__all__ = [
    "CandidateRecord",
    "Cluster",
    "FusionResult",
    "LeadRank",
    "MatchResult",
    "MergedEntity",
    "RunSummary",
    "ScoreResult",
    "FieldTag",
    "RecordSchema",
    "SourceChannel",
]
