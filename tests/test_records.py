import json

import pytest

from project_similarity.records import Project, ProjectRepository, load_projects

RAW = {
    "id": "P100",
    "name": "防災訓練事業",
    "year": 2024,
    "policy": {"id": "POL1", "name": "安全・安心なまちづくり"},
    "measure": {"id": "MES3", "name": "防災"},
    "basicProject": {"id": "BP7", "name": "防災訓練"},
    "department": "防災管理室",
    "manager": "佐藤",
    "category": "一般",
    "overview": "総合防災訓練を実施する",
    "target": "市民",
    "intent": "防災意識を高める",
    "financials": [
        {"year": 2024, "totalCost": 1200, "grandTotal": 1500},
        {"year": 2023, "totalCost": 1000, "grandTotal": 1300},
    ],
    "evaluation": {"direction": "改善", "futureDirection": "拡充", "comments": []},
}


def test_from_dict():
    project = Project.from_dict(RAW)

    assert project.id == "P100"
    assert project.basic_project.id == "BP7"
    assert project.measure.name == "防災"
    assert project.future_direction == "拡充"
    assert project.latest_total_cost == 1500
    assert project.text == "総合防災訓練を実施する 市民 防災意識を高める"


def test_missing_optional_fields():
    project = Project.from_dict({"id": 7})

    assert project.id == "7"
    assert project.latest_total_cost is None
    assert project.text == "  "
    assert project.policy.id == ""


def test_repository(make_project):
    a, b = make_project("A"), make_project("B")
    repository = ProjectRepository([a, b])

    assert len(repository) == 2
    assert repository.get_all_projects() == [a, b]
    assert repository.get_project_by_id("B") is b
    assert repository.get_project_by_id("C") is None
    assert "A" in repository


def test_repository_rejects_duplicate_ids(make_project):
    with pytest.raises(ValueError):
        ProjectRepository([make_project("A"), make_project("A")])


def test_load_projects(tmp_path):
    path = tmp_path / "projects.json"
    path.write_text(
        json.dumps({"generatedAt": "2025-01-01", "totalCount": 1, "projects": [RAW]}, ensure_ascii=False),
        encoding="utf-8",
    )

    projects = load_projects(path)
    assert [p.id for p in projects] == ["P100"]
    assert ProjectRepository.from_json(path).get_project_by_id("P100") == projects[0]


def test_latest_cost_uses_newest_year_in_etl_order():
    # The ETL writes financial years oldest first.
    raw = dict(
        RAW,
        financials=[
            {"year": 2022, "totalCost": 100, "grandTotal": 100},
            {"year": 2023, "totalCost": 200, "grandTotal": 200},
            {"year": 2024, "totalCost": 900, "grandTotal": 900},
        ],
    )
    assert Project.from_dict(raw).latest_total_cost == 900
