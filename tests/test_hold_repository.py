"""Tests for HoldRepository: batch atomicity, upsert semantics and deletion."""

from uuid import uuid4

import psycopg2
import psycopg2.errors
import pytest

from core.exceptions import (
    BoardNotFoundError,
    DatabaseQueryError,
    HoldInUseError,
    HoldNotFoundError,
    ValidationFailedError,
)
from core.models import Point
from services.board_repositories.hold_repository import (
    HoldRepository,
    vertices_from_json,
    vertices_to_json,
)

from conftest import ts


@pytest.fixture
def repo(db_manager, board_repository):
    return HoldRepository(db_manager, board_repository)


def _row(seconds=0, hold_id=None):
    return {"id": hold_id or uuid4(), "created_at": ts(seconds), "updated_at": ts(seconds)}


class TestCreateHolds:
    def test_batch_is_inserted_in_one_transaction(self, repo, connection, cursor, make_hold):
        board_id = uuid4()
        rows = [_row(0), _row(1)]
        cursor.fetchone.side_effect = rows

        holds = repo.create_holds(board_id, [make_hold(), make_hold(0.3)])

        assert [h.id for h in holds] == [r["id"] for r in rows]
        assert all(h.board_id == board_id for h in holds)
        assert holds[1].created_at == ts(1)
        assert cursor.execute.call_count == 2
        assert "INSERT INTO holds" in cursor.execute.call_args_list[0].args[0]
        connection.commit.assert_called_once()

    def test_failure_mid_batch_rolls_back_everything(self, repo, connection, cursor, make_hold):
        cursor.fetchone.side_effect = [_row(0)]
        cursor.execute.side_effect = [None, psycopg2.DatabaseError("disk full")]
        holds = [make_hold(), make_hold(0.3)]

        with pytest.raises(DatabaseQueryError):
            repo.create_holds(uuid4(), holds)

        connection.rollback.assert_called_once()
        connection.commit.assert_not_called()
        assert all(h.id is None for h in holds)

    def test_missing_board_checked_before_any_write(self, repo, board_repository, pool, make_hold):
        board_id = uuid4()
        board_repository.require.side_effect = BoardNotFoundError(board_id)

        with pytest.raises(BoardNotFoundError):
            repo.create_holds(board_id, [make_hold()])

        pool.getconn.assert_not_called()

    def test_invalid_geometry_rejected_before_any_write(self, repo, pool, make_hold):
        bad = make_hold()
        bad.vertices = [Point(0.1, 0.1), Point(1.2, 0.1)]

        with pytest.raises(ValidationFailedError) as exc_info:
            repo.create_holds(uuid4(), [make_hold(), bad])

        assert exc_info.value.errors == {
            "holds[1].vertices": "hold must have at least 3 vertices",
            "holds[1].vertices[1].x": "vertex x must be between 0 and 1",
        }
        pool.getconn.assert_not_called()


class TestGetHolds:
    def test_returns_holds_in_creation_order(self, repo, db_manager, cursor):
        board_id = uuid4()
        cursor.fetchall.return_value = [
            {
                "id": uuid4(),
                "board_id": board_id,
                "vertices": [{"x": 0.1, "y": 0.1}, {"x": 0.2, "y": 0.1}, {"x": 0.2, "y": 0.2}],
                "created_at": ts(0),
                "updated_at": ts(0),
            }
        ]

        holds = repo.get_holds(board_id)

        assert holds[0].vertices[2] == Point(0.2, 0.2)
        query = cursor.execute.call_args.args[0]
        assert "ORDER BY created_at ASC, id ASC" in query

    def test_missing_board(self, repo, board_repository):
        board_repository.require.side_effect = BoardNotFoundError()
        with pytest.raises(BoardNotFoundError):
            repo.get_holds(uuid4())


class TestUpdateHolds:
    def test_upsert_updates_known_and_inserts_new(self, repo, cursor, make_hold):
        board_id = uuid4()
        existing = make_hold(hold_id=uuid4())
        new = make_hold(0.4)
        cursor.fetchone.side_effect = [_row(0, existing.id), _row(5)]

        holds = repo.update_holds(board_id, [existing, new])

        update_sql, update_params = cursor.execute.call_args_list[0].args
        insert_sql, _ = cursor.execute.call_args_list[1].args
        assert update_sql.strip().startswith("UPDATE holds")
        assert update_params[1:] == (existing.id, board_id)
        assert insert_sql.strip().startswith("INSERT INTO holds")
        assert holds[1].id is not None

    def test_unknown_id_rolls_back(self, repo, connection, cursor, make_hold):
        cursor.fetchone.side_effect = [_row(0), None]
        holds = [make_hold(), make_hold(hold_id=uuid4())]

        with pytest.raises(HoldNotFoundError):
            repo.update_holds(uuid4(), holds)

        connection.rollback.assert_called_once()
        connection.commit.assert_not_called()


class TestDeleteHold:
    def test_delete_existing(self, repo, cursor, connection):
        cursor.rowcount = 1
        assert repo.delete_hold(uuid4()) is True
        connection.commit.assert_called_once()

    def test_delete_missing_is_not_an_error(self, repo, cursor):
        cursor.rowcount = 0
        assert repo.delete_hold(uuid4()) is False

    def test_referenced_hold_is_in_use(self, repo, cursor):
        cursor.execute.side_effect = psycopg2.errors.ForeignKeyViolation("still referenced")
        with pytest.raises(HoldInUseError):
            repo.delete_hold(uuid4())

    def test_other_storage_errors_propagate(self, repo, cursor):
        cursor.execute.side_effect = psycopg2.OperationalError("gone")
        with pytest.raises(DatabaseQueryError):
            repo.delete_hold(uuid4())


class TestVertexJson:
    def test_adapter_payload(self):
        assert vertices_to_json([Point(0.5, 1)]).adapted == [{"x": 0.5, "y": 1.0}]

    def test_parses_text(self):
        assert vertices_from_json('[{"x": 0.1, "y": 0.9}]') == [Point(0.1, 0.9)]


class TestUpdateHoldsRejected:
    def test_invalid_geometry_rejected_before_any_write(self, repo, pool, make_hold):
        bad = make_hold(hold_id=uuid4())
        bad.vertices = [Point(0.1, 0.1), Point(0.2, -0.5)]

        with pytest.raises(ValidationFailedError) as exc_info:
            repo.update_holds(uuid4(), [make_hold(), bad])

        assert exc_info.value.errors == {
            "holds[1].vertices": "hold must have at least 3 vertices",
            "holds[1].vertices[1].y": "vertex y must be between 0 and 1",
        }
        pool.getconn.assert_not_called()

    def test_missing_board_checked_before_any_write(self, repo, board_repository, pool, make_hold):
        board_repository.require.side_effect = BoardNotFoundError()

        with pytest.raises(BoardNotFoundError):
            repo.update_holds(uuid4(), [make_hold(hold_id=uuid4())])

        pool.getconn.assert_not_called()
