"""
MODULE: core.dependency_injection
RESPONSIBILITY: Central dependency container.
ALLOWED: Importing the database manager and repositories.
FORBIDDEN: Business logic.
ERRORS: DatabaseConnectionError (from connect).

Dependency container: creates the database manager and the repositories
lazily and shares them between request workers.
"""

from threading import RLock
from typing import Optional

from loguru import logger

from config.settings import Config
from core.database import DatabaseManager
from services.board_repositories import BoardRepository, HoldRepository, ProblemRepository


class DependencyContainer:
    """
    Lifecycle owner of the services

    One container is created per application; the FastAPI app keeps it on
    `app.state.container`.
    """

    def __init__(self, app_config: Config, db_manager: Optional[DatabaseManager] = None):
        self.config = app_config
        self._db_manager = db_manager
        self._board_repository: Optional[BoardRepository] = None
        self._hold_repository: Optional[HoldRepository] = None
        self._problem_repository: Optional[ProblemRepository] = None
        self._lock = RLock()

    def get_database_manager(self) -> DatabaseManager:
        """Database manager, connected on first use"""
        with self._lock:
            if self._db_manager is None:
                logger.info("Creating DatabaseManager")
                self._db_manager = DatabaseManager(self.config.database)
            self._db_manager.connect()
            return self._db_manager

    def get_board_repository(self) -> BoardRepository:
        with self._lock:
            if self._board_repository is None:
                self._board_repository = BoardRepository(self.get_database_manager())
            return self._board_repository

    def get_hold_repository(self) -> HoldRepository:
        with self._lock:
            if self._hold_repository is None:
                self._hold_repository = HoldRepository(
                    self.get_database_manager(),
                    self.get_board_repository(),
                )
            return self._hold_repository

    def get_problem_repository(self) -> ProblemRepository:
        with self._lock:
            if self._problem_repository is None:
                self._problem_repository = ProblemRepository(
                    self.get_database_manager(),
                    self.get_board_repository(),
                )
            return self._problem_repository

    def shutdown(self) -> None:
        """Release the connection pool"""
        if self._db_manager is not None:
            self._db_manager.close()
            logger.info("Dependency container shut down")
