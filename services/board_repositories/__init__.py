"""
MODULE: services.board_repositories
RESPONSIBILITY: Expose repository classes.
ALLOWED: Internal modules.
FORBIDDEN: None.
ERRORS: None.

Repositories for boards, holds and problems.
"""

from services.board_repositories.board_repository import BoardRepository
from services.board_repositories.hold_repository import HoldRepository
from services.board_repositories.problem_repository import ProblemRepository

__all__ = [
    'BoardRepository',
    'HoldRepository',
    'ProblemRepository',
]
