"""
MODULE: core.exceptions
RESPONSIBILITY: Define the error taxonomy of the board backend.
ALLOWED: Inheriting from BoardAppError.
FORBIDDEN: Business logic.
ERRORS: None.

Application exceptions. Callers branch on the exception type, never on the
message text.
"""

from typing import Dict, Optional, Any


class BoardAppError(Exception):
    """Base application exception"""
    pass


class ConfigurationError(BoardAppError):
    """Invalid or missing configuration"""
    pass


class NotFoundError(BoardAppError):
    """
    A referenced entity does not exist

    Attributes:
        entity: Entity kind ("board", "problem", "hold")
        entity_id: Identifier that was looked up
    """
    entity = "entity"

    def __init__(self, entity_id: Any = None, message: Optional[str] = None):
        self.entity_id = entity_id
        super().__init__(message or f"{self.entity} not found")


class BoardNotFoundError(NotFoundError):
    entity = "board"


class ProblemNotFoundError(NotFoundError):
    entity = "problem"


class HoldNotFoundError(NotFoundError):
    entity = "hold"


class ValidationFailedError(BoardAppError):
    """
    Structural or geometric rule violation

    Attributes:
        errors: field path -> reason
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__(f"validation failed: {self.errors}")


class ImmutableStateError(BoardAppError):
    """Attempt to edit a problem that is already published"""

    def __init__(self, problem_id: Any = None):
        self.problem_id = problem_id
        super().__init__("cannot edit published problem")


class ConflictError(BoardAppError):
    """The write conflicts with the current state of other rows"""
    pass


class HoldInUseError(ConflictError):
    """A hold is still referenced by at least one problem"""

    def __init__(self, hold_id: Any = None):
        self.hold_id = hold_id
        super().__init__("hold is referenced by a problem")


class StorageError(BoardAppError):
    """
    Any connection, query or transaction failure

    Attributes:
        original_error: The driver error that caused the failure
        rollback_error: Error raised while rolling back, if the rollback failed too
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[BaseException] = None,
        rollback_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.original_error = original_error
        self.rollback_error = rollback_error


class DatabaseConnectionError(StorageError):
    """Could not obtain a database connection"""
    pass


class DatabaseQueryError(StorageError):
    """A query or commit failed"""
    pass


class DatabaseTimeoutError(DatabaseQueryError):
    """A statement exceeded its deadline and was cancelled"""
    pass
