from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from prospect_fusion.config import Settings
from prospect_fusion.datasets import ProspectDatasetGenerator
from prospect_fusion.models import FusionResult
from prospect_fusion.progress import LoggingProgressReporter
from prospect_fusion.runners import LocalFusionPipeline
from prospect_fusion.schema import FieldTag
from prospect_fusion.sinks import JsonDirectorySink, save_result
from prospect_fusion.steps import IdentityMatcher, SourceNormalizer, explain_matches

_TAG_TRANSFORMS = {
    FieldTag.EMAIL: lambda value: value.strip().lower(),
    FieldTag.LOCATION: lambda value: " ".join(value.split()),
}


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        settings = _settings_from_args(args)
        setup_logging(settings.log_level)
        run(
            settings=settings,
            input_path=args.input,
            size=args.size,
            duplicate_rate=args.duplicate_rate,
            seed=args.seed,
            output_dir=args.output_dir,
            run_id=args.run_id,
            show_top=args.show_top,
        )
        return

    if args.command == "explain":
        setup_logging(args.log_level or "WARNING")
        explain(input_path=args.input, min_score=args.min_score)
        return

    parser.print_help()


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def run(
    *,
    settings: Settings,
    input_path: Path | None,
    size: int,
    duplicate_rate: float,
    seed: int,
    output_dir: Path,
    run_id: str,
    show_top: int,
) -> FusionResult:
    output_dir.mkdir(parents=True, exist_ok=True)

    if input_path is None:
        sources = ProspectDatasetGenerator(seed=seed).generate(size=size, duplicate_rate=duplicate_rate)
        dataset_path = output_dir / "test_sources.json"
        _write_json(dataset_path, sources)
    else:
        sources = _read_json(input_path)
        dataset_path = input_path

    pipeline = LocalFusionPipeline(
        normalizer=SourceNormalizer(tag_transforms=_TAG_TRANSFORMS),
        reporter=LoggingProgressReporter(),
        settings=settings,
    )
    result = pipeline.run(sources, run_id=run_id)

    sink = JsonDirectorySink(output_dir)
    save_result(sink, result)
    run_dir = sink.path_for(run_id)

    print(f"Sources: {dataset_path}")
    print(f"Entities: {run_dir / 'entities.json'}")
    print(f"Summary: {run_dir / 'summary.json'}")
    print("---")
    print(f"records={sum(cluster.size for cluster in result.clusters)}")
    print(f"prospects={result.summary.total}")
    print(f"hot={result.summary.hot}")
    print(f"warm={result.summary.warm}")
    print(f"cold={result.summary.cold}")
    if show_top > 0:
        print("---")
        print("top_prospects=")
        print(json.dumps(_top_payload(result, limit=show_top), indent=2, ensure_ascii=False))
    return result


def explain(*, input_path: Path, min_score: float) -> list[dict[str, Any]]:
    records = SourceNormalizer(tag_transforms=_TAG_TRANSFORMS).normalize(_read_json(input_path))
    names = {record.record_id: record.name for record in records}
    payload = [
        {
            "left": {"record_id": left_id, "name": names[left_id]},
            "right": {"record_id": right_id, "name": names[right_id]},
            "score": round(result.score, 4),
            "confidence": result.confidence.value,
            "method": result.method.value,
            "rule": result.rule,
            "explanation": result.explanation,
        }
        for left_id, right_id, result in explain_matches(records, min_score=min_score, matcher=IdentityMatcher())
    ]
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return payload


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="prospect-fusion", description="Prospect fusion CLI")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser(
        "run",
        help="Load or generate multi-channel sources, fuse and score them, and write entities + summary",
    )
    run_parser.add_argument("--input", type=Path, default=None, help="Sources JSON keyed by channel")
    run_parser.add_argument("--size", type=int, default=200)
    run_parser.add_argument("--duplicate-rate", type=float, default=0.2)
    run_parser.add_argument("--seed", type=int, default=42)
    run_parser.add_argument("--output-dir", type=Path, default=Path("data/cli_output"))
    run_parser.add_argument("--run-id", type=str, default="local")
    run_parser.add_argument("--strategy", choices=["seed", "transitive"], default=None)
    run_parser.add_argument("--blocking", action="store_true", default=None)
    run_parser.add_argument("--threshold", type=float, default=None)
    run_parser.add_argument("--log-level", type=str, default=None)
    run_parser.add_argument("--show-top", type=int, default=10)

    explain_parser = subparsers.add_parser("explain", help="Print pairwise identity decisions for a sources file")
    explain_parser.add_argument("--input", type=Path, required=True)
    explain_parser.add_argument("--min-score", type=float, default=0.6)
    explain_parser.add_argument("--log-level", type=str, default=None)

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "grouping_strategy": args.strategy,
        "blocking_enabled": args.blocking,
        "match_threshold": args.threshold,
        "log_level": args.log_level,
    }
    return Settings(**{key: value for key, value in overrides.items() if value is not None})


def _top_payload(result: FusionResult, limit: int = 10) -> list[dict[str, Any]]:
    payload: list[dict[str, Any]] = []
    for entity in result.entities[:limit]:
        score = entity.score
        payload.append(
            {
                "entity_id": entity.entity_id,
                "name": entity.name,
                "score": entity.score_value,
                "rank": score.rank.value if score else None,
                "merged_count": entity.merged_count,
                "mentions": [channel.value for channel in entity.mentions],
                "breakdown": score.breakdown.as_dict() if score else {},
            }
        )
    return payload


def _write_json(path: Path, payload: object) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


if __name__ == "__main__":
    main()
