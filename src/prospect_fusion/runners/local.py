from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from prospect_fusion.config import Settings, get_settings
from prospect_fusion.interfaces import DuplicateGrouper, Merger, Normalizer, ProgressReporter, Scorer
from prospect_fusion.models import CandidateRecord, Cluster, FusionResult, MergedEntity, RunSummary
from prospect_fusion.progress import Stage
from prospect_fusion.steps.grouping import build_grouper
from prospect_fusion.steps.merging import ProfileMerger, SequentialIdGenerator
from prospect_fusion.steps.normalize import FusionSources, SourceNormalizer
from prospect_fusion.steps.scoring import ScoringEngine

logger = logging.getLogger(__name__)


class LocalFusionPipeline:
    """In-process runner for one ingestion run.

    Stages are exposed individually so an async orchestrator can await its
    own collaborators between them. A fresh merger is built for every run so
    generated ids restart and repeated runs produce identical output.
    """

    def __init__(
        self,
        normalizer: Normalizer | None = None,
        grouper: DuplicateGrouper | None = None,
        merger_factory: Callable[[], Merger] | None = None,
        scorer: Scorer | None = None,
        reporter: ProgressReporter | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._normalizer = normalizer or SourceNormalizer()
        self._grouper = grouper or build_grouper(
            settings.grouping_strategy,
            threshold=settings.match_threshold,
            blocking=settings.blocking_enabled,
        )
        self._merger_factory = merger_factory or (
            lambda: ProfileMerger(id_generator=SequentialIdGenerator(settings.id_prefix))
        )
        self._scorer = scorer or ScoringEngine()
        self._reporter = reporter

    def run(self, sources: FusionSources | Mapping[str, Any], run_id: str = "local") -> FusionResult:
        return self.run_records(self.normalize(sources), run_id=run_id)

    def run_records(self, records: Sequence[CandidateRecord], run_id: str = "local") -> FusionResult:
        self._report(run_id, Stage.IDENTITY_MATCHING)
        clusters = self.cluster(records)
        self._report(run_id, Stage.DATA_FUSION)
        entities = self.fuse(clusters)
        self._report(run_id, Stage.SCORING)
        entities = self.score(entities)
        self._report(run_id, Stage.FINALIZING)
        return build_result(run_id, entities, clusters)

    def normalize(self, sources: FusionSources | Mapping[str, Any]) -> list[CandidateRecord]:
        return self._normalizer.normalize(sources)

    def cluster(self, records: Sequence[CandidateRecord]) -> list[Cluster]:
        return self._grouper.group(records)

    def fuse(self, clusters: Sequence[Cluster]) -> list[MergedEntity]:
        merger = self._merger_factory()
        entities = [merger.fuse(cluster) for cluster in clusters]
        logger.info("Merged down to %d unique prospects", len(entities))
        return entities

    def score(self, entities: Sequence[MergedEntity]) -> list[MergedEntity]:
        """Attach scores and return entities sorted by descending score (stable)."""
        for entity in entities:
            entity.score = self._scorer.score_entity(entity)
        return sorted(entities, key=lambda entity: entity.score_value, reverse=True)

    def _report(self, run_id: str, stage: Stage) -> None:
        if self._reporter is None:
            return
        try:
            self._reporter.report(run_id, stage.step, stage.percent, stage.message)
        except Exception:
            logger.warning("Progress reporter failed at %s", stage.step, exc_info=True)


def build_result(run_id: str, entities: list[MergedEntity], clusters: list[Cluster]) -> FusionResult:
    summary = RunSummary.from_entities(entities)
    logger.info(
        "Run %s: %d prospects (%d hot, %d warm, %d cold)",
        run_id,
        summary.total,
        summary.hot,
        summary.warm,
        summary.cold,
    )
    return FusionResult(run_id=run_id, entities=entities, clusters=clusters, summary=summary)
