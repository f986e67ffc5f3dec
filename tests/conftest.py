import pytest

from project_similarity.records import Project


def project_dict(
    project_id: str,
    *,
    name: str = "",
    policy: tuple[str, str] = ("POL1", "安全・安心なまちづくり"),
    measure: tuple[str, str] = ("MES1", "道路整備"),
    basic_project: tuple[str, str] = ("BP1", "市道維持管理"),
    department: str = "建設部",
    category: str = "一般",
    future_direction: str = "現状維持",
    overview: str = "",
    target: str = "",
    intent: str = "",
    grand_total: float | None = None,
) -> dict:
    """A project object in the dataset's camelCase layout."""
    financials = []
    if grand_total is not None:
        financials.append({"year": 2024, "totalCost": grand_total, "grandTotal": grand_total})
    return {
        "id": project_id,
        "name": name,
        "year": 2024,
        "policy": {"id": policy[0], "name": policy[1]},
        "measure": {"id": measure[0], "name": measure[1]},
        "basicProject": {"id": basic_project[0], "name": basic_project[1]},
        "department": department,
        "category": category,
        "overview": overview,
        "target": target,
        "intent": intent,
        "financials": financials,
        "evaluation": {"direction": future_direction, "futureDirection": future_direction, "comments": []},
    }


@pytest.fixture
def make_project():
    def _make(project_id: str, **overrides) -> Project:
        return Project.from_dict(project_dict(project_id, **overrides))

    return _make


@pytest.fixture
def road(make_project) -> Project:
    return make_project(
        "P001",
        name="道路維持管理事業",
        overview="市道の舗装補修や除草作業を実施する",
        target="市内全域の市道",
        intent="安全な道路環境を維持する",
        grand_total=55000,
    )


@pytest.fixture
def bridge(make_project) -> Project:
    return make_project(
        "P002",
        name="橋梁維持管理事業",
        basic_project=("BP2", "橋梁維持管理"),
        overview="橋梁の点検と補修を実施する",
        target="市内の全橋梁",
        intent="安全な橋梁環境を維持する",
        grand_total=50000,
    )


@pytest.fixture
def tourism(make_project) -> Project:
    return make_project(
        "P003",
        name="観光振興事業",
        policy=("POL2", "産業振興"),
        measure=("MES2", "観光振興"),
        basic_project=("BP3", "観光プロモーション"),
        department="商工観光部",
        category="政策事業",
        future_direction="拡充",
        overview="観光客誘致のためのプロモーション活動",
        target="国内外の観光客",
        intent="交流人口を増やし地域経済を活性化する",
        grand_total=30000000,
    )


@pytest.fixture
def projects(road, bridge, tourism) -> list[Project]:
    return [road, bridge, tourism]
