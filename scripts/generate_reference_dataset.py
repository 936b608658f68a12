from __future__ import annotations

import argparse
import json
from pathlib import Path

from prospect_fusion.datasets import ProspectDatasetGenerator


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a synthetic multi-channel prospect dataset")
    parser.add_argument("--size", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--duplicate-rate", type=float, default=0.2)
    parser.add_argument("--output", type=Path, default=Path("data/reference_prospect_sources.json"))
    args = parser.parse_args()

    sources = ProspectDatasetGenerator(seed=args.seed).generate(
        size=args.size,
        duplicate_rate=args.duplicate_rate,
    )

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with args.output.open("w", encoding="utf-8") as handle:
        json.dump(sources, handle, indent=2, ensure_ascii=False)


if __name__ == "__main__":
    main()
