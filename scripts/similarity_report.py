"""
Report on corpus IDF values and a precomputed similarity index.

Usage (example):
    uv run python scripts/similarity_report.py \
        --projects data/projects.json --index data/similarities.json

Prints summary stats, optionally explains one pair axis by axis, and saves
histograms of IDF values and recommendation scores.
"""

from __future__ import annotations

import argparse
from pathlib import Path

import matplotlib.pyplot as plt

from project_similarity.corpus import ProjectCorpus
from project_similarity.diagnostics import explain_pair, idf_histogram_data, index_score_summary
from project_similarity.index import SimilarityIndex, SimilarityIndexReader
from project_similarity.records import ProjectRepository


def main() -> None:
    parser = argparse.ArgumentParser(description="Similarity index report.")
    parser.add_argument("--projects", default="data/projects.json", help="Dataset JSON (default: data/projects.json).")
    parser.add_argument(
        "--index", default="data/similarities.json", help="Similarity index (default: data/similarities.json)."
    )
    parser.add_argument("--pair", nargs=2, metavar=("ID_A", "ID_B"), help="Explain the score of one pair.")
    parser.add_argument(
        "--output", default="similarity_report.png", help="Path to save histogram plot (default: similarity_report.png)."
    )
    args = parser.parse_args()

    repository = ProjectRepository.from_json(args.projects)
    index = SimilarityIndex.load(args.index)
    # Fails loudly when the index was built from a different corpus version.
    SimilarityIndexReader(index, repository)

    corpus = ProjectCorpus(repository.get_all_projects())
    idf = idf_histogram_data(corpus.inverse_document_frequency)
    scores = index_score_summary(index)

    print(f"Index generated at: {index.generated_at}")
    print(f"Vocabulary: {len(idf['values'])} tokens")
    print(f"IDF   : mean={idf['mean']:.4f}, std={idf['std']:.4f}, min={idf['min']:.4f}, max={idf['max']:.4f}")
    print(
        f"Scores: mean={scores['mean']:.4f}, std={scores['std']:.4f}, "
        f"min={scores['min']:.4f}, max={scores['max']:.4f} over {scores['edges']} edges"
    )

    if args.pair:
        id_a, id_b = args.pair
        project_a = repository.get_project_by_id(id_a)
        project_b = repository.get_project_by_id(id_b)
        if project_a is None or project_b is None:
            parser.error(f"Unknown project id in pair: {id_a}, {id_b}")
        print(f"Pair {id_a} / {id_b}:", explain_pair(project_a, project_b, corpus)._asdict())

    fig, (ax_idf, ax_scores) = plt.subplots(1, 2, figsize=(12, 5))
    ax_idf.hist(idf["values"], bins=50)
    ax_idf.set_xlabel("IDF value")
    ax_idf.set_ylabel("Count")
    ax_idf.set_title("IDF distribution")
    ax_scores.hist(scores["values"], bins=50, range=(0.0, 1.0))
    ax_scores.set_xlabel("Similarity score")
    ax_scores.set_title("Recommendation scores")
    out_path = Path(args.output)
    fig.tight_layout()
    fig.savefig(out_path)
    print(f"Saved histogram to {out_path}")


if __name__ == "__main__":
    main()
