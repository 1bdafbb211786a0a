"""
MODULE: services.board_repositories.board_repository
RESPONSIBILITY: Board persistence and the board-existence precondition.
ALLOWED: typing, loguru, core.database, core.validators, psycopg2.
FORBIDDEN: HTTP concerns, hold/problem queries.
ERRORS: BoardNotFoundError, ValidationFailedError, StorageError.

Repository (gateway) for boards.
"""

from typing import List, Dict, Any, Optional
from uuid import UUID

import psycopg2
from loguru import logger

from core.database import DatabaseManager
from core.exceptions import BoardNotFoundError, ValidationFailedError
from core.models import Board
from core.validators import validate_board


def _row_to_board(row: Dict[str, Any]) -> Board:
    image = row["image"]
    return Board(
        id=row["id"],
        name=row["name"],
        image=bytes(image) if image is not None else None,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        version=row["version"],
    )


class BoardRepository:
    """Repository for boards"""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    def exists(self, board_id: UUID, timeout: Optional[float] = None) -> bool:
        """Whether a board with this id exists"""
        row = self.db_manager.fetch_one(
            "SELECT EXISTS(SELECT 1 FROM boards WHERE id = %s) AS exists",
            (board_id,),
            timeout,
        )
        return bool(row and row["exists"])

    def require(self, board_id: UUID, timeout: Optional[float] = None) -> None:
        """
        Precondition check used by the hold and problem repositories

        Raises:
            BoardNotFoundError: If the board does not exist
        """
        if not self.exists(board_id, timeout):
            logger.debug(f"Board {board_id} not found")
            raise BoardNotFoundError(board_id)

    def get(self, board_id: UUID, timeout: Optional[float] = None) -> Board:
        """
        Fetch one board

        Raises:
            BoardNotFoundError: If the board does not exist
        """
        row = self.db_manager.fetch_one(
            """
                SELECT id, name, image, created_at, updated_at, version
                FROM boards
                WHERE id = %s
            """,
            (board_id,),
            timeout,
        )
        if row is None:
            raise BoardNotFoundError(board_id)
        return _row_to_board(row)

    def list(self, timeout: Optional[float] = None) -> List[Board]:
        """All boards, oldest first"""
        rows = self.db_manager.fetch_all(
            """
                SELECT id, name, image, created_at, updated_at, version
                FROM boards
                ORDER BY created_at, id
            """,
            (),
            timeout,
        )
        return [_row_to_board(row) for row in rows]

    def create(self, board: Board, timeout: Optional[float] = None) -> Board:
        """
        Insert a board

        Args:
            board: Board with name and image; id, timestamps and version are filled in

        Returns:
            The same board with server-assigned fields populated

        Raises:
            ValidationFailedError: If name or image is missing
        """
        errors = validate_board(board.name, board.image)
        if errors:
            raise ValidationFailedError(errors)

        with self.db_manager.transaction(timeout) as cursor:
            cursor.execute(
                """
                    INSERT INTO boards (name, image)
                    VALUES (%s, %s)
                    RETURNING id, created_at, updated_at, version
                """,
                (board.name, psycopg2.Binary(board.image)),
            )
            row = cursor.fetchone()

        board.id = row["id"]
        board.created_at = row["created_at"]
        board.updated_at = row["updated_at"]
        board.version = row["version"]
        logger.info(f"Created board {board.id} ({board.name!r})")
        return board
