from prospect_fusion.steps.grouping import (
    BlockingIndex,
    SeedDuplicateGrouper,
    TransitiveDuplicateGrouper,
    build_grouper,
)
from prospect_fusion.steps.matching import IdentityMatcher, explain_matches
from prospect_fusion.steps.merging import ProfileMerger, SequentialIdGenerator, UuidIdGenerator
from prospect_fusion.steps.normalize import FusionSources, SourceNormalizer
from prospect_fusion.steps.scoring import ProfileFlags, ScoringEngine, ScoringInput
from prospect_fusion.steps.signals import ExtractedSignals, SignalExtractor

__all__ = [
    "BlockingIndex",
    "SeedDuplicateGrouper",
    "TransitiveDuplicateGrouper",
    "build_grouper",
    "IdentityMatcher",
    "explain_matches",
    "ProfileMerger",
    "SequentialIdGenerator",
    "UuidIdGenerator",
    "FusionSources",
    "SourceNormalizer",
    "ProfileFlags",
    "ScoringEngine",
    "ScoringInput",
    "ExtractedSignals",
    "SignalExtractor",
]
