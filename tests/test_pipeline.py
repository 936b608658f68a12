import asyncio
import json

import pytest

from prospect_fusion.config import Settings
from prospect_fusion.datasets import ProspectDatasetGenerator
from prospect_fusion.errors import PersistenceError
from prospect_fusion.runners import AsyncFusionPipeline, LocalFusionPipeline
from prospect_fusion.sinks import InMemorySink, JsonDirectorySink, entity_to_row, save_result

_STAGES = [
    ("IDENTITY_MATCHING", 35),
    ("DATA_FUSION", 50),
    ("SCORING", 70),
    ("FINALIZING", 90),
]


class RecordingReporter:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, int]] = []

    def report(self, run_id: str, step: str, percent: int, message: str) -> None:
        self.calls.append((run_id, step, percent))


class BrokenReporter:
    def report(self, run_id: str, step: str, percent: int, message: str) -> None:
        raise RuntimeError("status table unavailable")


class AsyncRecordingReporter(RecordingReporter):
    async def report(self, run_id: str, step: str, percent: int, message: str) -> None:
        RecordingReporter.report(self, run_id, step, percent, message)


class AsyncMemorySink:
    def __init__(self) -> None:
        self.saved: dict[str, int] = {}

    async def save(self, run_id, entities, summary) -> None:
        self.saved[run_id] = len(entities)


class AsyncBrokenSink:
    async def save(self, run_id, entities, summary) -> None:
        raise OSError("database is down")


def _sources() -> dict:
    return {
        "screenshot": [
            {"name": "Juan Dela Cruz", "bio": "Looking for extra income. Pagod sa trabaho.", "followers": 12_000},
            {"name": "Ky Wu", "occupation": "Nurse"},
        ],
        "csv_import": [
            {"name": "juan dela cruz", "email": "juan@mail.com", "occupation": "Sales Manager"},
            {"name": "Maria Santos", "email": "maria@mail.com"},
        ],
        "manual_text": [
            {"name": "Maria S.", "email": "maria@mail.com", "text": "Bagong trabaho!"},
        ],
    }


def test_pipeline_partitions_records_and_sorts_by_score() -> None:
    result = LocalFusionPipeline(settings=Settings()).run(_sources(), run_id="run-1")

    assert sum(entity.merged_count for entity in result.entities) == 5
    assert sorted(entity.name for entity in result.entities) == ["Juan Dela Cruz", "Ky Wu", "Maria Santos"]
    scores = [entity.score_value for entity in result.entities]
    assert scores == sorted(scores, reverse=True)
    assert result.entities[0].name == "Juan Dela Cruz"
    assert result.summary.total == 3
    assert result.summary.hot + result.summary.warm + result.summary.cold == 3


def test_pipeline_is_idempotent() -> None:
    sources = ProspectDatasetGenerator(seed=11).generate(size=60, duplicate_rate=0.3)
    pipeline = LocalFusionPipeline(settings=Settings())

    def snapshot(result):
        return [(e.entity_id, e.name, e.merged_count, e.score) for e in result.entities]

    first = pipeline.run(sources)
    second = pipeline.run(sources)

    assert snapshot(first) == snapshot(second)
    assert [c.record_ids for c in first.clusters] == [c.record_ids for c in second.clusters]


def test_transitive_strategy_from_settings() -> None:
    settings = Settings(grouping_strategy="transitive", blocking_enabled=True)

    result = LocalFusionPipeline(settings=settings).run(_sources())

    assert sum(entity.merged_count for entity in result.entities) == 5
    assert result.summary.total == 3


def test_progress_is_reported_at_each_stage() -> None:
    reporter = RecordingReporter()

    LocalFusionPipeline(reporter=reporter, settings=Settings()).run(_sources(), run_id="run-7")

    assert reporter.calls == [("run-7", step, percent) for step, percent in _STAGES]


def test_broken_reporter_does_not_abort_the_run() -> None:
    result = LocalFusionPipeline(reporter=BrokenReporter(), settings=Settings()).run(_sources())

    assert result.summary.total == 3


def test_async_pipeline_reports_and_persists() -> None:
    reporter = AsyncRecordingReporter()
    sink = AsyncMemorySink()
    pipeline = AsyncFusionPipeline(LocalFusionPipeline(settings=Settings()), reporter=reporter, sink=sink)

    result = asyncio.run(pipeline.run(_sources(), run_id="async-1"))

    assert [step for _, step, _ in reporter.calls] == [step for step, _ in _STAGES]
    assert sink.saved == {"async-1": result.summary.total}


def test_async_persistence_failure_keeps_the_result() -> None:
    pipeline = AsyncFusionPipeline(LocalFusionPipeline(settings=Settings()), sink=AsyncBrokenSink())

    with pytest.raises(PersistenceError) as exc_info:
        asyncio.run(pipeline.run(_sources(), run_id="async-2"))

    assert isinstance(exc_info.value.__cause__, OSError)
    assert exc_info.value.result.run_id == "async-2"
    assert exc_info.value.result.summary.total == 3


def test_sinks_store_rows_and_summary(tmp_path) -> None:
    result = LocalFusionPipeline(settings=Settings()).run(_sources(), run_id="run-9")

    memory = InMemorySink()
    save_result(memory, result)
    JsonDirectorySink(tmp_path).save(result.run_id, result.entities, result.summary)

    assert len(memory.rows["run-9"]) == 3
    assert memory.summaries["run-9"] == result.summary
    entities = json.loads((tmp_path / "run-9" / "entities.json").read_text(encoding="utf-8"))
    summary = json.loads((tmp_path / "run-9" / "summary.json").read_text(encoding="utf-8"))
    assert [row["name"] for row in entities] == [entity.name for entity in result.entities]
    assert summary["total"] == 3


def test_save_result_wraps_sink_errors() -> None:
    class Broken:
        def save(self, run_id, entities, summary) -> None:
            raise OSError("disk full")

    result = LocalFusionPipeline(settings=Settings()).run(_sources())

    with pytest.raises(PersistenceError) as exc_info:
        save_result(Broken(), result)
    assert exc_info.value.result is result


def test_entity_row_shape() -> None:
    result = LocalFusionPipeline(settings=Settings()).run(_sources(), run_id="run-3")
    juan = result.entities[0]

    row = entity_to_row("run-3", juan)

    assert row["name"] == "Juan Dela Cruz"
    assert row["score"] == juan.score.score
    assert row["rank"] == juan.score.rank.value
    assert row["content"] == {"mentions": ["screenshot", "csv_import"], "merged_count": 2, "confidence": 0.85}
    assert set(row["metadata"]["score_breakdown"]) == {
        "intent_signals",
        "pain_points",
        "life_events",
        "authority",
        "relationship",
        "profile_completeness",
    }
    assert row["metadata"]["contact_info"] == [{"type": "email", "value": "juan@mail.com"}]
    assert set(row["metadata"]["raw_sources"]) == {"screenshot", "csv_import"}
