"""
Combined scoring and top-N selection.

This is where the four axes are assembled into one score:

    score = w_h * hierarchy + w_t * text + w_f * financial + w_a * attribute

Usage:
    from project_similarity.ranking import top_similar

    edges = top_similar(project, projects, n=5)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

from project_similarity.config import DEFAULT_MAX_LOG_DIFF, DEFAULT_TOP_N, DEFAULT_WEIGHTS, SimilarityWeights
from project_similarity.corpus import ProjectCorpus
from project_similarity.records import Project
from project_similarity.scorers import (
    attribute_similarity,
    financial_similarity,
    hierarchy_similarity,
    text_similarity,
)

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass(frozen=True)
class SimilarityEdge:
    """A scored comparison from one project to another."""

    source_id: str
    target_id: str
    score: float

    def __post_init__(self):
        if self.source_id == self.target_id:
            raise ValueError(f"Similarity edge cannot point to itself: {self.source_id}")


class AxisScores(NamedTuple):
    hierarchy: float
    text: float
    financial: float
    attribute: float
    combined: float


def combine(
    hierarchy: float,
    text: float,
    financial: float,
    attribute: float,
    weights: SimilarityWeights = DEFAULT_WEIGHTS,
) -> float:
    """Weighted sum of the four axis scores, kept within [0, 1]."""
    total = (
        weights.hierarchy * hierarchy
        + weights.text * text
        + weights.financial * financial
        + weights.attribute * attribute
    )
    return min(max(total, 0.0), 1.0)


def score_breakdown(
    project_a: Project,
    project_b: Project,
    idf: Mapping[str, float] | None = None,
    weights: SimilarityWeights = DEFAULT_WEIGHTS,
    max_log_diff: float = DEFAULT_MAX_LOG_DIFF,
) -> AxisScores:
    """Each axis score for a pair, plus their combination."""
    hierarchy = hierarchy_similarity(project_a, project_b)
    text = text_similarity(project_a, project_b, idf)
    financial = financial_similarity(project_a, project_b, max_log_diff)
    attribute = attribute_similarity(project_a, project_b)
    return AxisScores(hierarchy, text, financial, attribute, combine(hierarchy, text, financial, attribute, weights))


def combined_score(
    project_a: Project,
    project_b: Project,
    idf: Mapping[str, float] | None = None,
    weights: SimilarityWeights = DEFAULT_WEIGHTS,
    max_log_diff: float = DEFAULT_MAX_LOG_DIFF,
) -> float:
    """Overall similarity of two projects in [0, 1]."""
    return score_breakdown(project_a, project_b, idf, weights, max_log_diff).combined


def select_top_n(scores: NDArray[np.float64], n: int | None) -> NDArray[np.int64]:
    """
    Indices of the ``n`` highest scores, descending.

    Uses a stable sort so equal scores keep their original order.
    """
    order = np.argsort(-scores, kind="stable").astype(np.int64)
    return order if n is None else order[:n]


def top_similar(
    target: Project,
    corpus: ProjectCorpus | Sequence[Project],
    n: int = DEFAULT_TOP_N,
    weights: SimilarityWeights = DEFAULT_WEIGHTS,
    max_log_diff: float = DEFAULT_MAX_LOG_DIFF,
) -> list[SimilarityEdge]:
    """
    Rank every other project in the corpus against ``target``.

    Args:
        target: Project to find neighbours for.
        corpus: A prepared ``ProjectCorpus`` (shares its IDF table) or a plain
            sequence of projects (an IDF table is built over it).
        n: Maximum number of edges returned.
        weights: Axis weights.
        max_log_diff: Financial-axis log spread.

    Returns:
        At most ``min(n, len(corpus) - 1)`` edges, sorted by descending score.
        The target itself is never included.
    """
    if not isinstance(corpus, ProjectCorpus):
        corpus = ProjectCorpus(corpus)
    if n <= 0 or len(corpus) == 0:
        return []

    candidates = [idx for idx, project in enumerate(corpus) if project.id != target.id]
    if not candidates:
        return []

    text_scores = corpus.text_scores(target)
    scores = np.array(
        [
            combine(
                hierarchy_similarity(target, corpus[idx]),
                float(text_scores[idx]),
                financial_similarity(target, corpus[idx], max_log_diff),
                attribute_similarity(target, corpus[idx]),
                weights,
            )
            for idx in candidates
        ],
        dtype=np.float64,
    )

    return [
        SimilarityEdge(target.id, corpus[candidates[pos]].id, float(scores[pos]))
        for pos in select_top_n(scores, n)
    ]


__all__ = [
    "AxisScores",
    "SimilarityEdge",
    "combine",
    "combined_score",
    "score_breakdown",
    "select_top_n",
    "top_similar",
]
