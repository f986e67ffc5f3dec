"""
The persisted similarity index and its runtime reader.

File format (JSON, UTF-8):

    {
      "generatedAt": "2025-01-01T00:00:00.000Z",
      "similarities": {
        "P001": [{"id": "P002", "score": 0.83}, ...],
        ...
      }
    }

Each list is sorted by descending score and never contains its own key.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, NamedTuple

from project_similarity.config import DEFAULT_TOP_N
from project_similarity.errors import ReferencedEntityNotFound
from project_similarity.records import ProjectRepository


class SimilarProject(NamedTuple):
    """One recommendation entry: target id and score."""

    id: str
    score: float


def utc_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class SimilarityIndex:
    """
    Precomputed top-N recommendations keyed by project id.

    Immutable once built; lists are stored as tuples behind a read-only mapping.
    """

    generated_at: str
    similarities: Mapping[str, tuple[SimilarProject, ...]]

    def __post_init__(self):
        frozen = {}
        for project_id, entries in self.similarities.items():
            entries = tuple(SimilarProject(str(e[0]), float(e[1])) for e in entries)
            _validate_entries(project_id, entries)
            frozen[project_id] = entries
        object.__setattr__(self, "similarities", MappingProxyType(frozen))

    def __len__(self) -> int:
        return len(self.similarities)

    def __contains__(self, project_id: object) -> bool:
        return project_id in self.similarities

    def get(self, project_id: str) -> tuple[SimilarProject, ...] | None:
        return self.similarities.get(project_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "similarities": {
                project_id: [{"id": entry.id, "score": entry.score} for entry in entries]
                for project_id, entries in self.similarities.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimilarityIndex":
        try:
            generated_at = data["generatedAt"]
            raw = data["similarities"]
        except KeyError as e:
            raise ValueError(f"Similarity index is missing field {e.args[0]!r}") from e
        similarities = {
            str(project_id): tuple(SimilarProject(str(entry["id"]), float(entry["score"])) for entry in entries)
            for project_id, entries in raw.items()
        }
        return cls(generated_at=str(generated_at), similarities=similarities)

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)

    @classmethod
    def loads(cls, text: str) -> "SimilarityIndex":
        return cls.from_dict(json.loads(text))

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.dumps(), encoding="utf-8")
        return path

    @classmethod
    def load(cls, path: str | Path) -> "SimilarityIndex":
        return cls.loads(Path(path).read_text(encoding="utf-8"))


def _validate_entries(project_id: str, entries: tuple[SimilarProject, ...]) -> None:
    previous = float("inf")
    for entry in entries:
        if entry.id == project_id:
            raise ValueError(f"Similarity index lists {project_id} as similar to itself")
        if not 0.0 <= entry.score <= 1.0:
            raise ValueError(f"Score out of range for {project_id} -> {entry.id}: {entry.score}")
        if entry.score > previous:
            raise ValueError(f"Similarities for {project_id} are not sorted by descending score")
        previous = entry.score


@dataclass(frozen=True)
class SimilarProjectDisplay:
    """A recommendation joined with the fields shown on a project page."""

    id: str
    name: str
    score: float
    policy_name: str
    measure_name: str
    department: str
    total_cost: float


class SimilarityIndexReader:
    """
    Runtime lookup of precomputed recommendations.

    Never recomputes a score. The index and repository are injected; with ``verify``
    enabled, a stale index is rejected at construction instead of at first lookup.

    Args:
        index: Loaded similarity index.
        repository: Source of display fields for each target id.
        verify: Check that index and repository cover the same ids.
    """

    def __init__(self, index: SimilarityIndex, repository: ProjectRepository, verify: bool = True):
        self.index = index
        self.repository = repository
        if verify:
            self.verify()

    def verify(self) -> None:
        """Raise ``ReferencedEntityNotFound`` if the index does not match the repository."""
        referenced = set(self.index.similarities)
        for entries in self.index.similarities.values():
            referenced.update(entry.id for entry in entries)
        missing = sorted(pid for pid in referenced if self.repository.get_project_by_id(pid) is None)
        if missing:
            raise ReferencedEntityNotFound(
                f"Similarity index references {len(missing)} project(s) absent from the repository: "
                f"{', '.join(missing[:10])}",
                missing,
            )
        unindexed = [p.id for p in self.repository.get_all_projects() if p.id not in self.index]
        if unindexed:
            raise ReferencedEntityNotFound(
                f"{len(unindexed)} project(s) have no entry in the similarity index "
                f"(generated at {self.index.generated_at}): {', '.join(unindexed[:10])}",
                unindexed,
            )

    def get_similar(self, project_id: str, n: int = DEFAULT_TOP_N) -> list[SimilarProjectDisplay]:
        """The first ``n`` recommendations for ``project_id`` with display fields."""
        entries = self.index.get(project_id)
        if entries is None:
            raise ReferencedEntityNotFound(f"Project not in similarity index: {project_id}", [project_id])

        result = []
        for entry in entries[: max(n, 0)]:
            project = self.repository.get_project_by_id(entry.id)
            if project is None:
                raise ReferencedEntityNotFound(f"Project not found: {entry.id}", [entry.id])
            result.append(
                SimilarProjectDisplay(
                    id=project.id,
                    name=project.name,
                    score=entry.score,
                    policy_name=project.policy.name,
                    measure_name=project.measure.name,
                    department=project.department,
                    total_cost=project.latest_total_cost or 0.0,
                )
            )
        return result
