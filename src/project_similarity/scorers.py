"""
The four similarity axes. Every scorer is pure and returns a float in [0, 1].

Absent data never raises: a missing financial figure or a document with no known
tokens scores 0 on that axis.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

from project_similarity.config import DEFAULT_MAX_LOG_DIFF
from project_similarity.corpus import build_idf, cosine_similarity, vectorize
from project_similarity.records import Project

HIERARCHY_BASIC_PROJECT_MATCH = 1.0
HIERARCHY_MEASURE_MATCH = 0.7
HIERARCHY_POLICY_MATCH = 0.3

ATTRIBUTE_DEPARTMENT_CREDIT = 0.4
ATTRIBUTE_CATEGORY_CREDIT = 0.3
ATTRIBUTE_FUTURE_DIRECTION_CREDIT = 0.3


def hierarchy_similarity(project_a: Project, project_b: Project) -> float:
    """Deepest shared level of the policy tree: basic project 1.0, measure 0.7, policy 0.3."""
    if project_a.basic_project.id == project_b.basic_project.id:
        return HIERARCHY_BASIC_PROJECT_MATCH
    if project_a.measure.id == project_b.measure.id:
        return HIERARCHY_MEASURE_MATCH
    if project_a.policy.id == project_b.policy.id:
        return HIERARCHY_POLICY_MATCH
    return 0.0


def text_similarity(
    project_a: Project,
    project_b: Project,
    idf: Mapping[str, float] | None = None,
) -> float:
    """
    TF-IDF cosine similarity of the two projects' text.

    Args:
        project_a: First project.
        project_b: Second project.
        idf: Corpus-wide IDF table. When omitted, a table is built from the two texts
            alone, which is only meaningful for ad-hoc comparisons.

    Returns:
        Cosine similarity clipped to [0, 1].
    """
    if idf is None:
        idf = build_idf([project_a.text, project_b.text])
    similarity = cosine_similarity(vectorize(project_a.text, idf), vectorize(project_b.text, idf))
    return min(max(similarity, 0.0), 1.0)


def financial_similarity(
    project_a: Project,
    project_b: Project,
    max_log_diff: float = DEFAULT_MAX_LOG_DIFF,
) -> float:
    """
    Closeness of latest total cost on a log scale.

        score = clamp(1 - |ln(a + 1) - ln(b + 1)| / max_log_diff, 0, 1)
    """
    cost_a = project_a.latest_total_cost
    cost_b = project_b.latest_total_cost
    if cost_a is None or cost_b is None:
        return 0.0
    if cost_a == cost_b:
        return 1.0
    log_diff = abs(math.log1p(cost_a) - math.log1p(cost_b))
    return max(0.0, min(1.0, 1.0 - log_diff / max_log_diff))


def attribute_similarity(project_a: Project, project_b: Project) -> float:
    """Partial credit for matching department (0.4), category (0.3) and future direction (0.3)."""
    score = 0.0
    if project_a.department == project_b.department:
        score += ATTRIBUTE_DEPARTMENT_CREDIT
    if project_a.category == project_b.category:
        score += ATTRIBUTE_CATEGORY_CREDIT
    if project_a.future_direction == project_b.future_direction:
        score += ATTRIBUTE_FUTURE_DIRECTION_CREDIT
    return min(score, 1.0)


def derive_max_log_diff(costs: Iterable[float | None]) -> float:
    """
    Log-cost spread of an actual corpus, as an alternative to the fixed constant.

    Falls back to the default when fewer than two distinct costs are present.
    """
    present = [cost for cost in costs if cost is not None]
    if not present:
        return DEFAULT_MAX_LOG_DIFF
    spread = math.log1p(max(present)) - math.log1p(min(present))
    return spread if spread > 0 else DEFAULT_MAX_LOG_DIFF
