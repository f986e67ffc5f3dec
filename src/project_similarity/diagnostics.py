"""Summary statistics for corpus IDF values and a built similarity index (no plotting)."""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np

from project_similarity.config import SimilarityConfig
from project_similarity.corpus import ProjectCorpus
from project_similarity.index import SimilarityIndex
from project_similarity.ranking import AxisScores, score_breakdown
from project_similarity.records import Project


def _stats(values: list[float]) -> dict[str, float]:
    arr = np.array(values, dtype=np.float64)
    return {
        "mean": float(arr.mean()) if arr.size else 0.0,
        "std": float(arr.std()) if arr.size else 0.0,
        "min": float(arr.min()) if arr.size else 0.0,
        "max": float(arr.max()) if arr.size else 0.0,
    }


def idf_histogram_data(idf_map: Mapping[str, float]) -> dict:
    """
    Prepare histogram-friendly data from an IDF map.
    """
    values = sorted(float(v) for v in idf_map.values())
    return {"values": values, **_stats(values)}


def index_score_summary(index: SimilarityIndex) -> dict:
    """
    Coverage and score distribution of a similarity index.

    Returns:
        {"records", "edges", "empty", "values", "mean", "std", "min", "max"}
    """
    scores = [entry.score for entries in index.similarities.values() for entry in entries]
    return {
        "records": len(index),
        "edges": len(scores),
        "empty": sum(1 for entries in index.similarities.values() if not entries),
        "values": scores,
        **_stats(scores),
    }


def explain_pair(
    project_a: Project,
    project_b: Project,
    corpus: ProjectCorpus,
    config: SimilarityConfig | None = None,
) -> AxisScores:
    """Per-axis scores for a pair, using the corpus-wide IDF table."""
    config = config or SimilarityConfig()
    return score_breakdown(
        project_a,
        project_b,
        corpus.inverse_document_frequency,
        config.weights,
        config.max_log_diff,
    )
