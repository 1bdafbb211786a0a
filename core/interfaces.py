"""
MODULE: core.interfaces
RESPONSIBILITY: Define Protocols for the stores consumed by the HTTP layer.
ALLOWED: Typing imports, Protocol.
FORBIDDEN: Implementation details, concrete classes (except data structures).
ERRORS: None.

Contracts between the request handlers and the repositories, so handlers
can be tested against stubs.
"""

from typing import Protocol, Optional, List
from uuid import UUID

from core.models import Board, Hold, Problem, ProblemHold


class IBoardGateway(Protocol):
    """Board lookup and creation"""

    def exists(self, board_id: UUID, timeout: Optional[float] = None) -> bool:
        ...

    def get(self, board_id: UUID, timeout: Optional[float] = None) -> Board:
        """Raises BoardNotFoundError when absent"""
        ...

    def list(self, timeout: Optional[float] = None) -> List[Board]:
        ...

    def create(self, board: Board, timeout: Optional[float] = None) -> Board:
        ...


class IHoldStore(Protocol):
    """Hold batch operations"""

    def create_holds(self, board_id: UUID, holds: List[Hold], timeout: Optional[float] = None) -> List[Hold]:
        ...

    def get_holds(self, board_id: UUID, timeout: Optional[float] = None) -> List[Hold]:
        ...

    def update_holds(self, board_id: UUID, holds: List[Hold], timeout: Optional[float] = None) -> List[Hold]:
        ...

    def delete_hold(self, hold_id: UUID, timeout: Optional[float] = None) -> bool:
        ...


class IProblemStore(Protocol):
    """Problem lifecycle operations"""

    def create_problem(
        self,
        board_id: UUID,
        problem: Problem,
        holds: List[ProblemHold],
        timeout: Optional[float] = None,
    ) -> Problem:
        ...

    def get_problems(self, board_id: UUID, timeout: Optional[float] = None) -> List[Problem]:
        ...

    def get_problem(self, board_id: UUID, problem_id: UUID, timeout: Optional[float] = None) -> Problem:
        ...

    def get_problem_holds(self, problem_id: UUID, timeout: Optional[float] = None) -> List[ProblemHold]:
        ...

    def update_problem(
        self,
        board_id: UUID,
        problem: Problem,
        holds: List[ProblemHold],
        timeout: Optional[float] = None,
    ) -> Problem:
        ...
