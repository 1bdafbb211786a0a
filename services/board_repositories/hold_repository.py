"""
MODULE: services.board_repositories.hold_repository
RESPONSIBILITY: Transactional persistence of holds on a board.
ALLOWED: typing, loguru, core.database, core.validators, psycopg2.
FORBIDDEN: HTTP concerns, problem membership writes.
ERRORS: BoardNotFoundError, HoldNotFoundError, HoldInUseError, ValidationFailedError, StorageError.

Repository for holds.

Updates are an additive upsert: holds missing from the submitted list stay
untouched. Problem membership updates replace the whole set instead.
"""

import json
from typing import List, Dict, Any, Optional, Sequence
from uuid import UUID

import psycopg2.errors
from psycopg2.extras import Json
from loguru import logger

from core.database import DatabaseManager
from core.exceptions import (
    DatabaseQueryError,
    HoldInUseError,
    HoldNotFoundError,
    ValidationFailedError,
)
from core.models import Hold, Point
from core.validators import validate_holds
from services.board_repositories.board_repository import BoardRepository


_INSERT_HOLD = """
    INSERT INTO holds (board_id, vertices, created_at, updated_at)
    VALUES (%s, %s, clock_timestamp(), clock_timestamp())
    RETURNING id, created_at, updated_at
"""

_UPDATE_HOLD = """
    UPDATE holds
    SET vertices = %s, updated_at = clock_timestamp()
    WHERE id = %s AND board_id = %s
    RETURNING id, created_at, updated_at
"""


def vertices_to_json(vertices: Sequence[Point]) -> Json:
    """Adapt a vertex list for a jsonb column"""
    return Json([{"x": float(p.x), "y": float(p.y)} for p in vertices])


def vertices_from_json(value: Any) -> List[Point]:
    """Parse a jsonb vertex list (already decoded by psycopg2, or raw text)"""
    if isinstance(value, (str, bytes, bytearray, memoryview)):
        value = json.loads(bytes(value) if not isinstance(value, str) else value)
    return [Point(x=v["x"], y=v["y"]) for v in value or []]


def _row_to_hold(row: Dict[str, Any]) -> Hold:
    return Hold(
        id=row["id"],
        board_id=row["board_id"],
        vertices=vertices_from_json(row["vertices"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class HoldRepository:
    """Repository for holds"""

    def __init__(self, db_manager: DatabaseManager, board_repository: BoardRepository):
        self.db_manager = db_manager
        self.boards = board_repository

    def _check_preconditions(self, board_id: UUID, holds: Sequence[Hold], timeout: Optional[float]) -> None:
        self.boards.require(board_id, timeout)
        errors = validate_holds(holds)
        if errors:
            logger.debug(f"Hold batch for board {board_id} rejected: {errors}")
            raise ValidationFailedError(errors)

    @staticmethod
    def _apply_row(hold: Hold, board_id: UUID, row: Dict[str, Any]) -> None:
        hold.id = row["id"]
        hold.board_id = board_id
        hold.created_at = row["created_at"]
        hold.updated_at = row["updated_at"]

    def create_holds(self, board_id: UUID, holds: List[Hold], timeout: Optional[float] = None) -> List[Hold]:
        """
        Insert a batch of holds in one transaction

        Args:
            board_id: Owning board
            holds: Holds to insert; ids are assigned by the database
            timeout: Statement deadline in seconds

        Returns:
            The holds with id, board_id and timestamps populated

        Raises:
            BoardNotFoundError: If the board does not exist
            ValidationFailedError: If any hold has invalid geometry
            StorageError: If the insert fails (nothing is persisted)
        """
        self._check_preconditions(board_id, holds, timeout)

        rows = []
        with self.db_manager.transaction(timeout) as cursor:
            for hold in holds:
                cursor.execute(_INSERT_HOLD, (board_id, vertices_to_json(hold.vertices)))
                rows.append(cursor.fetchone())

        for hold, row in zip(holds, rows):
            self._apply_row(hold, board_id, row)

        logger.info(f"Created {len(holds)} holds on board {board_id}")
        return holds

    def get_holds(self, board_id: UUID, timeout: Optional[float] = None) -> List[Hold]:
        """
        All holds of a board, oldest first

        Raises:
            BoardNotFoundError: If the board does not exist
        """
        self.boards.require(board_id, timeout)
        rows = self.db_manager.fetch_all(
            """
                SELECT id, board_id, vertices, created_at, updated_at
                FROM holds
                WHERE board_id = %s
                ORDER BY created_at ASC, id ASC
            """,
            (board_id,),
            timeout,
        )
        return [_row_to_hold(row) for row in rows]

    def update_holds(self, board_id: UUID, holds: List[Hold], timeout: Optional[float] = None) -> List[Hold]:
        """
        Upsert holds in one transaction

        Holds with an id are updated in place, holds without one are inserted.
        Holds of the board that are not in the list are kept.

        Raises:
            BoardNotFoundError: If the board does not exist
            ValidationFailedError: If any hold has invalid geometry
            HoldNotFoundError: If a submitted id is not a hold of this board
            StorageError: If a write fails (nothing is persisted)
        """
        self._check_preconditions(board_id, holds, timeout)

        rows = []
        with self.db_manager.transaction(timeout) as cursor:
            for hold in holds:
                vertices = vertices_to_json(hold.vertices)
                if hold.id is not None:
                    cursor.execute(_UPDATE_HOLD, (vertices, hold.id, board_id))
                    row = cursor.fetchone()
                    if row is None:
                        raise HoldNotFoundError(hold.id)
                else:
                    cursor.execute(_INSERT_HOLD, (board_id, vertices))
                    row = cursor.fetchone()
                rows.append(row)

        for hold, row in zip(holds, rows):
            self._apply_row(hold, board_id, row)

        logger.info(f"Upserted {len(holds)} holds on board {board_id}")
        return holds

    def delete_hold(self, hold_id: UUID, timeout: Optional[float] = None) -> bool:
        """
        Delete one hold; a missing id is a no-op

        Returns:
            True if a row was removed

        Raises:
            HoldInUseError: If a problem still references the hold
        """
        try:
            with self.db_manager.transaction(timeout) as cursor:
                cursor.execute("DELETE FROM holds WHERE id = %s", (hold_id,))
                deleted = cursor.rowcount > 0
        except DatabaseQueryError as e:
            if isinstance(e.original_error, psycopg2.errors.ForeignKeyViolation):
                raise HoldInUseError(hold_id) from e
            raise

        logger.info(f"Deleted hold {hold_id}" if deleted else f"Hold {hold_id} did not exist")
        return deleted
