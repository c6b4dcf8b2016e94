"""
Tests for the error taxonomy and its FastAPI rendering in a host app.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sitescheduler.exceptions import (
    ConflictError,
    CycleDetectedError,
    DuplicateDependencyError,
    InvalidArgumentError,
    InvalidSnapshotError,
    NotFoundError,
    SchedulingException,
    SelfDependencyError,
    register_exception_handlers,
)
from sitescheduler.services.graph import DependencyGraph


class TestTaxonomy:

    @pytest.mark.parametrize(
        "error, parent, code, status_code, kind",
        [
            (NotFoundError("Task", "A"), SchedulingException, "not_found", 404, "not_found"),
            (SelfDependencyError("A"), InvalidArgumentError, "self_dependency", 400, "invalid_argument"),
            (InvalidSnapshotError("bad"), InvalidArgumentError, "invalid_snapshot", 400, "invalid_argument"),
            (DuplicateDependencyError("A", "B"), ConflictError, "duplicate_dependency", 409, "duplicate"),
            (CycleDetectedError("B", "A", ["A", "B", "A"]), ConflictError, "cycle_detected", 409, "circular"),
        ],
    )
    def test_codes(self, error, parent, code, status_code, kind):
        assert isinstance(error, parent)
        assert error.error_code == code
        assert error.status_code == status_code
        assert error.kind == kind

    def test_cycle_detail_names_the_path(self):
        error = CycleDetectedError("C", "A", ["A", "B", "C", "A"])
        assert error.details[0]["msg"].endswith("A -> B -> C -> A")
        assert error.details[0]["type"] == "cycle_error"


class TestExceptionHandlers:
    """A host app that mutates a graph inside its own route."""

    @pytest.fixture
    def client(self):
        app = FastAPI()
        register_exception_handlers(app)
        graph = DependencyGraph(task_ids=["A", "B", "C"])

        @app.post("/dependencies/{predecessor_id}/{successor_id}")
        def create_dependency(predecessor_id: str, successor_id: str):
            edge = graph.add_edge(predecessor_id, successor_id)
            return edge.model_dump(by_alias=True, mode="json")

        @app.delete("/dependencies/{predecessor_id}/{successor_id}")
        def delete_dependency(predecessor_id: str, successor_id: str):
            graph.remove_edge(predecessor_id, successor_id)
            return {}

        return TestClient(app)

    def test_created(self, client):
        response = client.post("/dependencies/A/B")
        assert response.status_code == 200
        assert response.json() == {
            "predecessorId": "A",
            "successorId": "B",
            "dependencyType": "finish_to_start",
            "leadLagDays": 0,
        }

    def test_cycle_is_409_with_path(self, client):
        client.post("/dependencies/A/B")
        client.post("/dependencies/B/C")

        response = client.post("/dependencies/C/A")

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "cycle_detected"
        assert body["details"][0]["loc"] == ["cycle", "A", "B", "C", "A"]

    def test_duplicate_is_409(self, client):
        client.post("/dependencies/A/B")
        response = client.post("/dependencies/A/B")
        assert response.status_code == 409
        assert response.json()["error"] == "duplicate_dependency"
        assert response.json()["details"] is None

    def test_self_dependency_is_400(self, client):
        response = client.post("/dependencies/A/A")
        assert response.status_code == 400
        assert response.json()["error"] == "self_dependency"

    def test_missing_edge_is_404(self, client):
        response = client.delete("/dependencies/A/C")
        assert response.status_code == 404
        assert response.json()["message"] == "Dependency with ID A/C not found"
