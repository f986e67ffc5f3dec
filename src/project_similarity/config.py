"""
Tunable parameters for similarity scoring.

Weights and limits are passed explicitly into the combiner, the top-N selector and the
pipeline, so alternate settings can be tried without touching scorer code:

    weights = SimilarityWeights(hierarchy=0.5, text=0.3, financial=0.1, attribute=0.1)
    config = SimilarityConfig(weights=weights, top_n=10)
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path

from project_similarity.errors import InvalidWeightConfiguration

# Allowed deviation of the weight sum from 1.0
WEIGHT_SUM_TOLERANCE = 1e-3

# ln(1e10): roughly the log spread between a 1-unit and a 10-billion-unit budget
DEFAULT_MAX_LOG_DIFF = 23.0

DEFAULT_TOP_N = 5


@dataclass(frozen=True)
class SimilarityWeights:
    """
    Per-axis weights of the combined score.

    Must be a convex combination (non-negative, summing to 1.0) so that the combined
    score stays in [0, 1].
    """

    hierarchy: float = 0.35
    text: float = 0.30
    financial: float = 0.20
    attribute: float = 0.15

    def __post_init__(self):
        for name, value in self.as_dict().items():
            if not math.isfinite(value) or value < 0:
                raise InvalidWeightConfiguration(f"Weight {name!r} must be a non-negative number, got {value}")
        total = sum(self.as_dict().values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise InvalidWeightConfiguration(f"Weights must sum to 1.0, got {total:.6f}")

    def as_dict(self) -> dict[str, float]:
        return {
            "hierarchy": self.hierarchy,
            "text": self.text,
            "financial": self.financial,
            "attribute": self.attribute,
        }


DEFAULT_WEIGHTS = SimilarityWeights()


@dataclass(frozen=True)
class SimilarityConfig:
    """
    Settings for one precomputation run.

    Attributes:
        weights: Axis weights for the combined score.
        top_n: Number of recommendations kept per record.
        max_log_diff: Log-cost spread that maps to financial similarity 0.
        num_workers: Threads for the outer ranking loop (1 = sequential).
    """

    weights: SimilarityWeights = field(default_factory=SimilarityWeights)
    top_n: int = DEFAULT_TOP_N
    max_log_diff: float = DEFAULT_MAX_LOG_DIFF
    num_workers: int = 1

    def __post_init__(self):
        if self.top_n < 1:
            raise ValueError(f"top_n must be at least 1, got {self.top_n}")
        if not self.max_log_diff > 0:
            raise ValueError(f"max_log_diff must be positive, got {self.max_log_diff}")
        if self.num_workers < 1:
            raise ValueError(f"num_workers must be at least 1, got {self.num_workers}")


def load_weights(path: str | Path) -> SimilarityWeights:
    """Read weights from a JSON object with hierarchy/text/financial/attribute keys."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    unknown = set(data) - set(DEFAULT_WEIGHTS.as_dict())
    if unknown:
        raise InvalidWeightConfiguration(f"Unknown weight keys: {sorted(unknown)}")
    return SimilarityWeights(**{key: float(value) for key, value in data.items()})
