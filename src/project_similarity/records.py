"""
Project records and the read-only repository the similarity engine consumes.

Records come from the dataset file written by the spreadsheet ETL step:

    {"generatedAt": "...", "totalCount": 123, "projects": [{...}, ...]}

Only the fields that feed a similarity axis or a display row are parsed; everything
else in a project object is ignored.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator


@dataclass(frozen=True)
class PolicyHierarchy:
    """One level of the policy tree. Only ``id`` is used for matching."""

    id: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PolicyHierarchy":
        data = data or {}
        return cls(id=str(data.get("id", "")), name=str(data.get("name", "")))


@dataclass(frozen=True)
class YearlyFinancial:
    """Financial figures for one fiscal year (thousands of yen)."""

    year: int
    total_cost: float = 0.0
    grand_total: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "YearlyFinancial":
        return cls(
            year=int(data.get("year", 0)),
            total_cost=float(data.get("totalCost", 0) or 0),
            grand_total=float(data.get("grandTotal", 0) or 0),
        )


@dataclass(frozen=True)
class Project:
    """
    A single administrative project evaluation record.

    Attributes:
        id: Stable project identifier.
        policy, measure, basic_project: The three nested hierarchy levels.
        department, category, future_direction: Categorical attributes compared by equality.
        overview, target, intent: Free-text fields joined into ``text``.
        financials: Per-year figures in dataset order (the ETL writes oldest year first).
    """

    id: str
    name: str
    policy: PolicyHierarchy
    measure: PolicyHierarchy
    basic_project: PolicyHierarchy
    department: str = ""
    category: str = ""
    future_direction: str = ""
    overview: str = ""
    target: str = ""
    intent: str = ""
    financials: tuple[YearlyFinancial, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Project":
        evaluation = data.get("evaluation") or {}
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            policy=PolicyHierarchy.from_dict(data.get("policy")),
            measure=PolicyHierarchy.from_dict(data.get("measure")),
            basic_project=PolicyHierarchy.from_dict(data.get("basicProject")),
            department=str(data.get("department", "")),
            category=str(data.get("category", "")),
            future_direction=str(evaluation.get("futureDirection", "")),
            overview=str(data.get("overview", "")),
            target=str(data.get("target", "")),
            intent=str(data.get("intent", "")),
            financials=tuple(YearlyFinancial.from_dict(f) for f in data.get("financials") or []),
        )

    @property
    def text(self) -> str:
        """Overview, target and intent joined by single spaces."""
        return f"{self.overview} {self.target} {self.intent}"

    @property
    def latest_total_cost(self) -> float | None:
        """Grand total of the newest fiscal year, or None without financial data."""
        if not self.financials:
            return None
        return max(self.financials, key=lambda f: f.year).grand_total


def load_projects(path: str | Path) -> list[Project]:
    """Load all projects from a dataset JSON file."""
    with open(path, encoding="utf-8") as f:
        dataset = json.load(f)
    return [Project.from_dict(p) for p in dataset.get("projects", [])]


class ProjectRepository:
    """
    In-memory, read-only access to the project corpus.

    Args:
        projects: Records in dataset order. Ids must be unique.
    """

    def __init__(self, projects: list[Project]):
        self._projects = tuple(projects)
        self._by_id: dict[str, Project] = {}
        for project in self._projects:
            if project.id in self._by_id:
                raise ValueError(f"Duplicate project id: {project.id}")
            self._by_id[project.id] = project

    @classmethod
    def from_json(cls, path: str | Path) -> "ProjectRepository":
        return cls(load_projects(path))

    def __len__(self) -> int:
        return len(self._projects)

    def __iter__(self) -> Iterator[Project]:
        return iter(self._projects)

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._by_id

    def get_all_projects(self) -> list[Project]:
        return list(self._projects)

    def get_project_by_id(self, project_id: str) -> Project | None:
        return self._by_id.get(project_id)
