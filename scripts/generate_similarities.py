"""
Precompute the similar-projects index.

Usage (example):
    uv run python scripts/generate_similarities.py \
        --projects data/projects.json --output data/similarities.json

Loads every project, scores each one against the rest of the corpus and writes the
top-N neighbours per project together with a generation timestamp.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from project_similarity.config import DEFAULT_MAX_LOG_DIFF, DEFAULT_WEIGHTS, SimilarityConfig, load_weights
from project_similarity.diagnostics import index_score_summary
from project_similarity.pipeline import build_similarity_index
from project_similarity.records import load_projects
from project_similarity.scorers import derive_max_log_diff


def parse_max_log_diff(value: str) -> float | str:
    if value == "auto":
        return value
    return float(value)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Precompute similar projects for every project in the dataset.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--projects", default="data/projects.json", help="Dataset JSON (default: data/projects.json).")
    parser.add_argument(
        "--output", default="data/similarities.json", help="Index output path (default: data/similarities.json)."
    )
    parser.add_argument("--top-n", type=int, default=5, help="Recommendations kept per project (default: 5).")
    parser.add_argument("--weights", default=None, help="JSON file with hierarchy/text/financial/attribute weights.")
    parser.add_argument(
        "--max-log-diff",
        type=parse_max_log_diff,
        default=DEFAULT_MAX_LOG_DIFF,
        help="Log-cost spread for the financial axis, or 'auto' to derive it from the corpus (default: 23).",
    )
    parser.add_argument("--workers", type=int, default=1, help="Threads for ranking (default: 1).")
    args = parser.parse_args()

    projects = load_projects(args.projects)
    print(f"Projects: {len(projects)}")

    max_log_diff = args.max_log_diff
    if max_log_diff == "auto":
        max_log_diff = derive_max_log_diff(p.latest_total_cost for p in projects)
        print(f"Derived max log diff: {max_log_diff:.4f}")

    weights = load_weights(args.weights) if args.weights else DEFAULT_WEIGHTS
    config = SimilarityConfig(
        weights=weights,
        top_n=args.top_n,
        max_log_diff=max_log_diff,
        num_workers=args.workers,
    )

    index = build_similarity_index(projects, config, progress=True)
    out_path = index.save(Path(args.output))

    summary = index_score_summary(index)
    print(
        f"Edges: {summary['edges']} (empty lists: {summary['empty']}), "
        f"score mean={summary['mean']:.4f}, min={summary['min']:.4f}, max={summary['max']:.4f}"
    )
    print(f"Saved similarity index to {out_path}")


if __name__ == "__main__":
    main()
