from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from prospect_fusion.errors import PersistenceError
from prospect_fusion.interfaces import AsyncPersistenceSink, AsyncProgressReporter
from prospect_fusion.models import FusionResult
from prospect_fusion.progress import Stage
from prospect_fusion.runners.local import LocalFusionPipeline, build_result
from prospect_fusion.steps.normalize import FusionSources

logger = logging.getLogger(__name__)


class AsyncFusionPipeline:
    """Drive the local stages from async code.

    Progress is awaited between stages; those are the only suspension points.
    The sink is called once the whole result is computed. A sink failure is
    raised as ``PersistenceError`` carrying the computed result.
    """

    def __init__(
        self,
        pipeline: LocalFusionPipeline | None = None,
        reporter: AsyncProgressReporter | None = None,
        sink: AsyncPersistenceSink | None = None,
    ) -> None:
        self._pipeline = pipeline or LocalFusionPipeline()
        self._reporter = reporter
        self._sink = sink

    async def run(self, sources: FusionSources | Mapping[str, Any], run_id: str) -> FusionResult:
        records = self._pipeline.normalize(sources)
        await self._report(run_id, Stage.IDENTITY_MATCHING)
        clusters = self._pipeline.cluster(records)
        await self._report(run_id, Stage.DATA_FUSION)
        entities = self._pipeline.fuse(clusters)
        await self._report(run_id, Stage.SCORING)
        entities = self._pipeline.score(entities)
        await self._report(run_id, Stage.FINALIZING)
        result = build_result(run_id, entities, clusters)

        if self._sink is not None:
            try:
                await self._sink.save(run_id, result.entities, result.summary)
            except Exception as exc:
                raise PersistenceError(f"Failed to persist run {run_id}", result) from exc
        return result

    async def _report(self, run_id: str, stage: Stage) -> None:
        if self._reporter is None:
            return
        try:
            await self._reporter.report(run_id, stage.step, stage.percent, stage.message)
        except Exception:
            logger.warning("Progress reporter failed at %s", stage.step, exc_info=True)
