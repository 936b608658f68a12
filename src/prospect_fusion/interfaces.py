from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Protocol, Sequence

from prospect_fusion.models import (
    CandidateRecord,
    Cluster,
    MatchResult,
    MergedEntity,
    RunSummary,
    ScoreResult,
)

if TYPE_CHECKING:
    from prospect_fusion.steps.normalize import FusionSources


class Normalizer(Protocol):
    """Step 1: flatten per-channel payloads into candidate records."""

    def normalize(self, sources: "FusionSources | Mapping[str, Any]") -> list[CandidateRecord]:
        ...


class IdentityScorer(Protocol):
    """Step 2a: pairwise identity similarity in [0, 1]."""

    def match(self, left: CandidateRecord, right: CandidateRecord) -> float:
        ...

    def match_detailed(self, left: CandidateRecord, right: CandidateRecord) -> MatchResult:
        ...


class DuplicateGrouper(Protocol):
    """Step 2b: partition records into clusters of the same person."""

    def group(self, records: Sequence[CandidateRecord]) -> list[Cluster]:
        ...


class Merger(Protocol):
    """Step 3: fuse a cluster into one entity."""

    def fuse(self, cluster: Cluster) -> MergedEntity:
        ...


class Scorer(Protocol):
    """Step 4: lead score for a merged entity."""

    def score_entity(self, entity: MergedEntity) -> ScoreResult:
        ...


class IdGenerator(Protocol):
    def __call__(self) -> str:
        ...


class ProgressReporter(Protocol):
    """External status collaborator called at stage boundaries."""

    def report(self, run_id: str, step: str, percent: int, message: str) -> None:
        ...


class AsyncProgressReporter(Protocol):
    async def report(self, run_id: str, step: str, percent: int, message: str) -> None:
        ...


class PersistenceSink(Protocol):
    """External store for a finished run."""

    def save(self, run_id: str, entities: Sequence[MergedEntity], summary: RunSummary) -> None:
        ...


class AsyncPersistenceSink(Protocol):
    async def save(self, run_id: str, entities: Sequence[MergedEntity], summary: RunSummary) -> None:
        ...
