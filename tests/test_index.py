import json
import re
from datetime import datetime, timezone

import pytest

from project_similarity.errors import ReferencedEntityNotFound
from project_similarity.index import (
    SimilarityIndex,
    SimilarityIndexReader,
    SimilarProject,
    utc_timestamp,
)
from project_similarity.pipeline import build_similarity_index
from project_similarity.records import ProjectRepository


@pytest.fixture
def index(projects):
    return build_similarity_index(projects, generated_at="2025-04-01T09:30:00.000Z")


@pytest.fixture
def reader(index, projects):
    return SimilarityIndexReader(index, ProjectRepository(projects))


class TestSimilarityIndex:
    def test_file_round_trip(self, tmp_path, index):
        path = index.save(tmp_path / "similarities.json")
        loaded = SimilarityIndex.load(path)

        assert loaded.generated_at == index.generated_at
        for project_id, entries in index.similarities.items():
            assert loaded.similarities[project_id] == entries

    def test_reserialization_is_idempotent(self, index):
        text = index.dumps()
        assert SimilarityIndex.loads(text).dumps() == text

    def test_file_layout(self, index, road):
        data = json.loads(index.dumps())

        assert set(data) == {"generatedAt", "similarities"}
        first = data["similarities"][road.id][0]
        assert set(first) == {"id", "score"}
        assert isinstance(first["score"], float)

    def test_is_read_only(self, index, road):
        with pytest.raises(TypeError):
            index.similarities[road.id] = ()  # type: ignore[index]

    @pytest.mark.parametrize(
        "entries",
        [
            [{"id": "A", "score": 0.5}],
            [{"id": "B", "score": 1.5}],
            [{"id": "B", "score": -0.1}],
            [{"id": "B", "score": 0.2}, {"id": "C", "score": 0.4}],
        ],
    )
    def test_rejects_invalid_entries(self, entries):
        with pytest.raises(ValueError):
            SimilarityIndex.from_dict({"generatedAt": "x", "similarities": {"A": entries}})

    def test_rejects_missing_fields(self):
        with pytest.raises(ValueError):
            SimilarityIndex.from_dict({"similarities": {}})

    def test_accepts_ties(self):
        index = SimilarityIndex.from_dict(
            {"generatedAt": "x", "similarities": {"A": [{"id": "B", "score": 0.4}, {"id": "C", "score": 0.4}]}}
        )
        assert index.get("A") == (SimilarProject("B", 0.4), SimilarProject("C", 0.4))
        assert index.get("Z") is None


def test_utc_timestamp_format():
    moment = datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    assert utc_timestamp(moment) == "2025-01-02T03:04:05.678Z"
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_timestamp())


class TestSimilarityIndexReader:
    def test_joins_display_fields(self, reader, road, bridge):
        results = reader.get_similar(road.id, 5)

        assert [r.id for r in results] == [bridge.id, "P003"]
        first = results[0]
        assert first.name == bridge.name
        assert first.policy_name == bridge.policy.name
        assert first.measure_name == bridge.measure.name
        assert first.department == bridge.department
        assert first.total_cost == 50000
        assert first.score == reader.index.get(road.id)[0].score

    def test_takes_first_n(self, reader, road):
        assert len(reader.get_similar(road.id, 1)) == 1
        assert reader.get_similar(road.id, 0) == []

    def test_missing_cost_displays_zero(self, make_project):
        a = make_project("A")
        b = make_project("B")
        index = build_similarity_index([a, b])
        reader = SimilarityIndexReader(index, ProjectRepository([a, b]))

        assert reader.get_similar("A")[0].total_cost == 0.0

    def test_unknown_id(self, reader):
        with pytest.raises(ReferencedEntityNotFound) as excinfo:
            reader.get_similar("NOPE")
        assert excinfo.value.missing_ids == ["NOPE"]
        assert isinstance(excinfo.value, LookupError)

    def test_stale_index_detected_at_construction(self, index, road, bridge):
        with pytest.raises(ReferencedEntityNotFound) as excinfo:
            SimilarityIndexReader(index, ProjectRepository([road, bridge]))
        assert excinfo.value.missing_ids == ["P003"]

    def test_unindexed_project_detected_at_construction(self, index, projects, make_project):
        repository = ProjectRepository([*projects, make_project("P004")])
        with pytest.raises(ReferencedEntityNotFound) as excinfo:
            SimilarityIndexReader(index, repository)
        assert excinfo.value.missing_ids == ["P004"]

    def test_missing_target_raises_on_lookup(self, index, road, bridge):
        reader = SimilarityIndexReader(index, ProjectRepository([road, bridge]), verify=False)

        assert [r.id for r in reader.get_similar(road.id, 1)] == [bridge.id]
        with pytest.raises(ReferencedEntityNotFound):
            reader.get_similar(road.id, 2)
