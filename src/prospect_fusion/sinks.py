from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import asdict
from pathlib import Path
from typing import Any

from prospect_fusion.errors import PersistenceError
from prospect_fusion.interfaces import PersistenceSink
from prospect_fusion.models import FusionResult, LeadRank, MergedEntity, RunSummary
from prospect_fusion.progress import LoggingProgressReporter

logger = logging.getLogger(__name__)

__all__ = [
    "InMemorySink",
    "JsonDirectorySink",
    "LoggingProgressReporter",
    "entity_to_row",
    "save_result",
]


def entity_to_row(run_id: str, entity: MergedEntity) -> dict[str, Any]:
    """Flatten a merged entity into the row shape stored per prospect."""
    score = entity.score
    return {
        "run_id": run_id,
        "entity_id": entity.entity_id,
        "name": entity.name,
        "score": entity.score_value,
        "rank": (score.rank if score else LeadRank.from_score(0)).value,
        "content": {
            "mentions": [channel.value for channel in entity.mentions],
            "merged_count": entity.merged_count,
            "confidence": entity.confidence,
        },
        "metadata": {
            "occupations": list(entity.occupations),
            "interests": list(entity.interests),
            "signals": list(entity.signals),
            "sentiment_indicators": list(entity.sentiment_indicators),
            "topics": list(entity.topics),
            "activities": list(entity.activities),
            "score_breakdown": score.breakdown.as_dict() if score else {},
            "score_factors": [_factor_row(factor) for factor in score.factors] if score else [],
            "score_confidence": score.confidence if score else None,
            "contact_info": [{"type": c.type.value, "value": c.value} for c in entity.contact_info],
            "social_links": [{"platform": s.platform.value, "url": s.url} for s in entity.social_links],
            "metrics": asdict(entity.metrics),
            "raw_sources": entity.raw_sources,
        },
    }


def _factor_row(factor) -> dict[str, Any]:
    return {
        "category": factor.category.value,
        "signal": factor.signal,
        "points": factor.points,
        "weight": factor.weight,
    }


class InMemorySink:
    """Keeps saved rows per run; handy in tests and notebooks."""

    def __init__(self) -> None:
        self.rows: dict[str, list[dict[str, Any]]] = {}
        self.summaries: dict[str, RunSummary] = {}

    def save(self, run_id: str, entities: Sequence[MergedEntity], summary: RunSummary) -> None:
        self.rows[run_id] = [entity_to_row(run_id, entity) for entity in entities]
        self.summaries[run_id] = summary


class JsonDirectorySink:
    """Write ``<root>/<run_id>/entities.json`` and ``summary.json``."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def path_for(self, run_id: str) -> Path:
        return self._root / run_id

    def save(self, run_id: str, entities: Sequence[MergedEntity], summary: RunSummary) -> None:
        run_dir = self.path_for(run_id)
        run_dir.mkdir(parents=True, exist_ok=True)
        _write_json(run_dir / "entities.json", [entity_to_row(run_id, entity) for entity in entities])
        _write_json(run_dir / "summary.json", asdict(summary))
        logger.info("Saved %d prospects to %s", len(entities), run_dir)


def save_result(sink: PersistenceSink, result: FusionResult) -> None:
    try:
        sink.save(result.run_id, result.entities, result.summary)
    except Exception as exc:
        raise PersistenceError(f"Failed to persist run {result.run_id}", result) from exc


def _write_json(path: Path, payload: object) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False, default=str)
