"""HTTP tests: envelopes, status codes and error mapping, with stores mocked out."""

import base64
import copy
from dataclasses import replace
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.errors import INTERNAL_ERROR_MESSAGE
from config.settings import config
from core.exceptions import (
    BoardNotFoundError,
    DatabaseQueryError,
    HoldInUseError,
    ImmutableStateError,
    ProblemNotFoundError,
    ValidationFailedError,
)
from core.models import Board, Hold, HoldRole, Problem, ProblemHold, ProblemStatus

from conftest import square, ts


@pytest.fixture
def boards():
    return MagicMock(name="boards")


@pytest.fixture
def holds():
    return MagicMock(name="holds")


@pytest.fixture
def problems():
    return MagicMock(name="problems")


@pytest.fixture
def container(boards, holds, problems):
    c = MagicMock(name="container")
    c.get_board_repository.return_value = boards
    c.get_hold_repository.return_value = holds
    c.get_problem_repository.return_value = problems
    return c


@pytest.fixture
def client(container):
    return TestClient(create_app(app_config=config, container=container))


def _problem_body(*roles):
    return {
        "name": "Crimp City",
        "status": "DRAFT",
        "holds": [{"holdID": str(uuid4()), "roleTag": role} for role in roles],
    }


class TestBoards:
    def test_create_board(self, client, boards):
        board_id = uuid4()

        def _create(board):
            board.id, board.created_at, board.updated_at = board_id, ts(), ts()
            return board

        boards.create.side_effect = _create
        image = base64.b64encode(b"\x89PNG").decode()

        resp = client.post("/v1/board", json={"name": "Moon", "image": image})

        assert resp.status_code == 201
        assert resp.headers["Location"] == f"/v1/board/{board_id}"
        body = resp.json()["board"]
        assert body["id"] == str(board_id)
        assert body["image"] == image
        assert boards.create.call_args.args[0].image == b"\x89PNG"

    def test_invalid_base64_image(self, client, boards):
        resp = client.post("/v1/board", json={"name": "Moon", "image": "not base64!"})

        assert resp.status_code == 400
        assert resp.json() == {"error": {"image": "invalid base64 image data"}}
        boards.create.assert_not_called()

    def test_board_not_found(self, client, boards):
        boards.get.side_effect = BoardNotFoundError()
        resp = client.get(f"/v1/board/{uuid4()}")
        assert resp.status_code == 404
        assert resp.json() == {"error": "board not found"}

    def test_malformed_board_id(self, client, boards):
        resp = client.get("/v1/board/not-a-uuid")
        assert resp.status_code == 400
        assert "board_id" in resp.json()["error"]
        boards.get.assert_not_called()

    def test_list_boards(self, client, boards):
        boards.list.return_value = [Board(name="A", image=b"", id=uuid4())]
        resp = client.get("/v1/boards")
        assert resp.status_code == 200
        assert [b["name"] for b in resp.json()["boards"]] == ["A"]

    def test_storage_error_is_opaque(self, client, boards):
        boards.list.side_effect = DatabaseQueryError("relation boards does not exist")
        resp = client.get("/v1/boards")
        assert resp.status_code == 500
        assert resp.json() == {"error": INTERNAL_ERROR_MESSAGE}


class TestHolds:
    def test_create_holds(self, client, holds):
        board_id = uuid4()

        def _create(bid, batch):
            for h in batch:
                h.id, h.board_id, h.created_at, h.updated_at = uuid4(), bid, ts(), ts()
            return batch

        holds.create_holds.side_effect = _create
        vertices = [p.to_dict() for p in square()]

        resp = client.post(f"/v1/board/{board_id}/holds", json={"holds": [{"vertices": vertices}]})

        assert resp.status_code == 201
        created = resp.json()["holds"]
        assert created[0]["boardID"] == str(board_id)
        assert created[0]["vertices"] == vertices

    def test_geometry_errors_are_returned_per_field(self, client, holds):
        errors = {"holds[0].vertices[1].x": "vertex x must be between 0 and 1"}
        holds.create_holds.side_effect = ValidationFailedError(errors)

        resp = client.post(f"/v1/board/{uuid4()}/holds", json={"holds": [{"vertices": []}]})

        assert resp.status_code == 400
        assert resp.json() == {"error": errors}

    def test_get_holds_envelope(self, client, holds):
        board_id = uuid4()
        holds.get_holds.return_value = [Hold(vertices=square(), id=uuid4(), board_id=board_id)]

        resp = client.get(f"/v1/board/{board_id}/holds")

        assert resp.status_code == 200
        assert resp.json()["boardID"] == str(board_id)
        assert len(resp.json()["holds"]) == 1

    def test_patch_holds_passes_ids(self, client, holds):
        hold_id = uuid4()
        holds.update_holds.side_effect = lambda bid, batch: batch
        body = {"holds": [{"id": str(hold_id), "vertices": [p.to_dict() for p in square()]}]}

        resp = client.patch(f"/v1/board/{uuid4()}/holds", json=body)

        assert resp.status_code == 200
        assert holds.update_holds.call_args.args[1][0].id == hold_id

    def test_delete_hold(self, client, holds):
        hold_id = uuid4()
        resp = client.delete(f"/v1/hold/{hold_id}")
        assert resp.status_code == 204
        assert resp.content == b""
        holds.delete_hold.assert_called_once_with(hold_id)

    def test_delete_hold_in_use(self, client, holds):
        holds.delete_hold.side_effect = HoldInUseError()
        resp = client.delete(f"/v1/hold/{uuid4()}")
        assert resp.status_code == 409
        assert resp.json() == {"error": "hold is referenced by a problem"}


class TestProblems:
    def test_create_problem_accepts_hold_id_and_role_tag(self, client, problems):
        board_id = uuid4()

        def _create(bid, problem, memberships):
            problem.status = ProblemStatus(problem.status)
            problem.created_at = ts()
            return problem

        problems.create_problem.side_effect = _create
        body = _problem_body("start", "start", "finish")

        resp = client.post(f"/v1/board/{board_id}/problem", json=body)

        assert resp.status_code == 201
        problem = resp.json()["problem"]
        assert resp.headers["Location"] == f"/v1/board/{board_id}/problem/{problem['id']}"
        assert problem["status"] == "DRAFT"
        memberships = problems.create_problem.call_args.args[2]
        assert [str(m.hold_id) for m in memberships] == [h["holdID"] for h in body["holds"]]
        assert [m.type for m in memberships] == ["start", "start", "finish"]

    def test_get_problem_includes_holds(self, client, problems):
        board_id, problem_id = uuid4(), uuid4()
        problems.get_problem.return_value = Problem(
            name="Crimp City", status=ProblemStatus.PUBLISHED, id=problem_id, board_id=board_id, created_at=ts()
        )
        problems.get_problem_holds.return_value = [
            ProblemHold(hold_id=uuid4(), type=HoldRole.START, id=uuid4(), problem_id=problem_id, vertices=square())
        ]

        resp = client.get(f"/v1/board/{board_id}/problem/{problem_id}")

        assert resp.status_code == 200
        problem = resp.json()["problem"]
        assert problem["status"] == "PUBLISHED"
        assert problem["holds"][0]["type"] == "start"
        assert len(problem["holds"][0]["vertices"]) == 4

    def test_problem_not_found(self, client, problems):
        problems.get_problem.side_effect = ProblemNotFoundError()
        resp = client.get(f"/v1/board/{uuid4()}/problem/{uuid4()}")
        assert resp.status_code == 404
        assert resp.json() == {"error": "problem not found"}

    def test_update_published_problem_conflicts(self, client, problems):
        problems.update_problem.side_effect = ImmutableStateError()
        resp = client.patch(
            f"/v1/board/{uuid4()}/problem/{uuid4()}",
            json=_problem_body("start", "start", "finish"),
        )
        assert resp.status_code == 409
        assert resp.json() == {"error": "cannot edit published problem"}

    def test_update_uses_path_problem_id(self, client, problems):
        problem_id = uuid4()
        problems.update_problem.side_effect = lambda bid, problem, memberships: problem

        client.patch(f"/v1/board/{uuid4()}/problem/{problem_id}", json=_problem_body("start", "start", "hand"))

        assert problems.update_problem.call_args.args[1].id == problem_id


class TestMiddlewareAndHealth:
    def test_unknown_route(self, client):
        resp = client.get("/v1/nowhere")
        assert resp.status_code == 404
        assert resp.json() == {"error": "the requested resource could not be found"}

    def test_body_limit(self, container):
        small = copy.copy(config)
        small.server = replace(config.server, max_body_bytes=64)
        client = TestClient(create_app(app_config=small, container=container))

        resp = client.post("/v1/board", json={"name": "x" * 100, "image": ""})

        assert resp.status_code == 413
        container.get_board_repository.return_value.create.assert_not_called()

    def test_health_ok(self, client, container):
        container.get_database_manager.return_value.check_connection.return_value = True
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "database": "ok"}

    def test_health_degraded(self, client, container):
        container.get_database_manager.return_value.check_connection.return_value = False
        resp = client.get("/health")
        assert resp.status_code == 503
        assert resp.json()["database"] == "unreachable"


class TestMissingBoardAcrossRouters:
    def test_hold_routes(self, client, holds):
        holds.get_holds.side_effect = BoardNotFoundError()
        holds.update_holds.side_effect = BoardNotFoundError()
        board_id = uuid4()

        listed = client.get(f"/v1/board/{board_id}/holds")
        patched = client.patch(f"/v1/board/{board_id}/holds", json={"holds": []})

        for resp in (listed, patched):
            assert resp.status_code == 404
            assert resp.json() == {"error": "board not found"}

    def test_problem_routes(self, client, problems):
        problems.get_problems.side_effect = BoardNotFoundError()
        problems.create_problem.side_effect = BoardNotFoundError()
        board_id = uuid4()

        listed = client.get(f"/v1/board/{board_id}/problems")
        created = client.post(f"/v1/board/{board_id}/problem", json=_problem_body("start", "start", "finish"))

        for resp in (listed, created):
            assert resp.status_code == 404
            assert resp.json() == {"error": "board not found"}
        assert "Location" not in created.headers
