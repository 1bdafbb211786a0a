"""
MODULE: services.board_repositories.problem_repository
RESPONSIBILITY: Transactional persistence of problems and their hold memberships.
ALLOWED: typing, loguru, core.database, core.validators, uuid.
FORBIDDEN: HTTP concerns, hold geometry writes.
ERRORS: BoardNotFoundError, ProblemNotFoundError, ImmutableStateError, ValidationFailedError, StorageError.

Repository for problems.

A problem moves DRAFT -> PUBLISHED and never back. Once published its name,
status and memberships are frozen. An update replaces the whole membership
set (delete all, insert again).
"""

from typing import List, Dict, Any, Optional, Sequence
from uuid import UUID, uuid4

from loguru import logger

from core.database import DatabaseManager
from core.exceptions import (
    ImmutableStateError,
    ProblemNotFoundError,
    ValidationFailedError,
)
from core.models import Problem, ProblemHold, ProblemStatus, HoldRole
from core.validators import validate_problem
from services.board_repositories.board_repository import BoardRepository
from services.board_repositories.hold_repository import vertices_from_json


_INSERT_MEMBERSHIP = """
    INSERT INTO problem_holds (id, problem_id, hold_id, type, position)
    VALUES (%s, %s, %s, %s, %s)
"""


def _row_to_problem(row: Dict[str, Any]) -> Problem:
    return Problem(
        id=row["id"],
        board_id=row["board_id"],
        name=row["name"],
        setter_id=row["setter_id"],
        status=ProblemStatus(row["status"]),
        created_at=row["created_at"],
    )


class ProblemRepository:
    """Repository for problems"""

    def __init__(self, db_manager: DatabaseManager, board_repository: BoardRepository):
        self.db_manager = db_manager
        self.boards = board_repository

    def _validate(self, problem: Problem, holds: Sequence[ProblemHold]) -> None:
        errors = validate_problem(problem.name, problem.status, holds)
        if errors:
            logger.debug(f"Problem {problem.name!r} rejected: {errors}")
            raise ValidationFailedError(errors)

    def _check_holds_on_board(self, board_id: UUID, holds: Sequence[ProblemHold], timeout: Optional[float]) -> None:
        """Every referenced hold must belong to the problem's board"""
        hold_ids = list({h.hold_id for h in holds})
        rows = self.db_manager.fetch_all(
            "SELECT id FROM holds WHERE board_id = %s AND id = ANY(%s)",
            (board_id, hold_ids),
            timeout,
        )
        found = {row["id"] for row in rows}
        errors = {
            f"holds[{i}].holdID": "hold does not belong to this board"
            for i, h in enumerate(holds)
            if h.hold_id not in found
        }
        if errors:
            raise ValidationFailedError(errors)

    @staticmethod
    def _insert_memberships(cursor, problem_id: UUID, holds: Sequence[ProblemHold], fresh_ids: bool) -> List[UUID]:
        ids = []
        for position, hold in enumerate(holds):
            membership_id = uuid4() if fresh_ids or hold.id is None else hold.id
            cursor.execute(
                _INSERT_MEMBERSHIP,
                (membership_id, problem_id, hold.hold_id, HoldRole(hold.type).value, position),
            )
            ids.append(membership_id)
        return ids

    @staticmethod
    def _apply_memberships(problem_id: UUID, holds: Sequence[ProblemHold], ids: Sequence[UUID]) -> None:
        for hold, membership_id in zip(holds, ids):
            hold.id = membership_id
            hold.problem_id = problem_id
            hold.type = HoldRole(hold.type)

    def create_problem(
        self,
        board_id: UUID,
        problem: Problem,
        holds: List[ProblemHold],
        timeout: Optional[float] = None,
    ) -> Problem:
        """
        Insert a problem and its memberships in one transaction

        Args:
            board_id: Owning board
            problem: Problem with a caller-generated id (one is generated if missing)
            holds: Memberships in display order
            timeout: Statement deadline in seconds

        Returns:
            The problem with created_at populated; memberships get ids and problem_id

        Raises:
            BoardNotFoundError: If the board does not exist
            ValidationFailedError: If the structural rules are violated
            StorageError: If a write fails (nothing is persisted)
        """
        self.boards.require(board_id, timeout)
        self._validate(problem, holds)
        self._check_holds_on_board(board_id, holds, timeout)

        problem_id = problem.id or uuid4()
        status = ProblemStatus(problem.status)

        with self.db_manager.transaction(timeout) as cursor:
            cursor.execute(
                """
                    INSERT INTO problems (id, board_id, name, setter_id, status, created_at)
                    VALUES (%s, %s, %s, %s, %s, clock_timestamp())
                    RETURNING created_at
                """,
                (problem_id, board_id, problem.name, problem.setter_id, status.value),
            )
            created_at = cursor.fetchone()["created_at"]
            membership_ids = self._insert_memberships(cursor, problem_id, holds, fresh_ids=False)

        problem.id = problem_id
        problem.board_id = board_id
        problem.status = status
        problem.created_at = created_at
        self._apply_memberships(problem_id, holds, membership_ids)

        logger.info(f"Created problem {problem_id} ({status.value}) with {len(holds)} holds on board {board_id}")
        return problem

    def get_problems(self, board_id: UUID, timeout: Optional[float] = None) -> List[Problem]:
        """
        Problems of a board, newest first

        Raises:
            BoardNotFoundError: If the board does not exist
        """
        self.boards.require(board_id, timeout)
        rows = self.db_manager.fetch_all(
            """
                SELECT id, board_id, name, setter_id, status, created_at
                FROM problems
                WHERE board_id = %s
                ORDER BY created_at DESC, id DESC
            """,
            (board_id,),
            timeout,
        )
        return [_row_to_problem(row) for row in rows]

    def get_problem(self, board_id: UUID, problem_id: UUID, timeout: Optional[float] = None) -> Problem:
        """
        One problem, scoped to its board

        Raises:
            BoardNotFoundError: If the board does not exist
            ProblemNotFoundError: If the problem is absent or on another board
        """
        self.boards.require(board_id, timeout)
        row = self.db_manager.fetch_one(
            """
                SELECT id, board_id, name, setter_id, status, created_at
                FROM problems
                WHERE id = %s AND board_id = %s
            """,
            (problem_id, board_id),
            timeout,
        )
        if row is None:
            raise ProblemNotFoundError(problem_id)
        return _row_to_problem(row)

    def get_problem_holds(self, problem_id: UUID, timeout: Optional[float] = None) -> List[ProblemHold]:
        """Memberships of a problem joined with each hold's vertices"""
        rows = self.db_manager.fetch_all(
            """
                SELECT
                    ph.id,
                    ph.problem_id,
                    ph.hold_id,
                    ph.type,
                    h.vertices
                FROM problem_holds ph
                JOIN holds h ON h.id = ph.hold_id
                WHERE ph.problem_id = %s
                ORDER BY ph.position
            """,
            (problem_id,),
            timeout,
        )
        return [
            ProblemHold(
                id=row["id"],
                problem_id=row["problem_id"],
                hold_id=row["hold_id"],
                type=HoldRole(row["type"]),
                vertices=vertices_from_json(row["vertices"]),
            )
            for row in rows
        ]

    def update_problem(
        self,
        board_id: UUID,
        problem: Problem,
        holds: List[ProblemHold],
        timeout: Optional[float] = None,
    ) -> Problem:
        """
        Update a draft problem and replace its memberships in one transaction

        Raises:
            BoardNotFoundError: If the board does not exist
            ValidationFailedError: If the structural rules are violated
            ProblemNotFoundError: If the problem is not on this board
            ImmutableStateError: If the stored problem is already published
            StorageError: If a write fails (nothing is persisted)
        """
        self.boards.require(board_id, timeout)
        self._validate(problem, holds)

        row = self.db_manager.fetch_one(
            "SELECT status FROM problems WHERE id = %s AND board_id = %s",
            (problem.id, board_id),
            timeout,
        )
        if row is None:
            raise ProblemNotFoundError(problem.id)
        if row["status"] != ProblemStatus.DRAFT.value:
            raise ImmutableStateError(problem.id)

        self._check_holds_on_board(board_id, holds, timeout)
        status = ProblemStatus(problem.status)

        with self.db_manager.transaction(timeout) as cursor:
            # the status guard catches a publish that landed after the check above
            cursor.execute(
                """
                    UPDATE problems
                    SET name = %s, status = %s
                    WHERE id = %s AND board_id = %s AND status = %s
                    RETURNING setter_id, created_at
                """,
                (problem.name, status.value, problem.id, board_id, ProblemStatus.DRAFT.value),
            )
            updated = cursor.fetchone()
            if updated is None:
                raise ImmutableStateError(problem.id)

            cursor.execute("DELETE FROM problem_holds WHERE problem_id = %s", (problem.id,))
            membership_ids = self._insert_memberships(cursor, problem.id, holds, fresh_ids=True)

        problem.board_id = board_id
        problem.status = status
        problem.setter_id = updated["setter_id"]
        problem.created_at = updated["created_at"]
        self._apply_memberships(problem.id, holds, membership_ids)

        logger.info(f"Updated problem {problem.id} ({status.value}) with {len(holds)} holds on board {board_id}")
        return problem
