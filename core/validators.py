"""
MODULE: core.validators
RESPONSIBILITY: Pure validation of boards, hold geometry and problem structure.
ALLOWED: core.models, typing.
FORBIDDEN: Database access, logging, shared mutable state.
ERRORS: None (returns field -> message mappings).

Every validator returns a dict of field path -> message. An empty dict means
the input is valid.
"""

from typing import Dict, Sequence, Any

from core.models import (
    HoldRole,
    ProblemStatus,
    MIN_HOLD_VERTICES,
    MIN_PROBLEM_HOLDS,
    REQUIRED_START_HOLDS,
)


def _in_unit_range(value: Any) -> bool:
    try:
        return 0 <= value <= 1
    except TypeError:
        return False


def validate_vertices(vertices: Sequence[Any], prefix: str = "vertices") -> Dict[str, str]:
    """
    Check that vertices form a normalized polygon

    Args:
        vertices: Points with x and y attributes
        prefix: Field path prefix for the error keys

    Returns:
        Errors keyed like "vertices[2].x"
    """
    errors: Dict[str, str] = {}

    if vertices is None or len(vertices) < MIN_HOLD_VERTICES:
        errors[prefix] = f"hold must have at least {MIN_HOLD_VERTICES} vertices"
        if not vertices:
            return errors

    for i, vertex in enumerate(vertices):
        if not _in_unit_range(getattr(vertex, "x", None)):
            errors[f"{prefix}[{i}].x"] = "vertex x must be between 0 and 1"
        if not _in_unit_range(getattr(vertex, "y", None)):
            errors[f"{prefix}[{i}].y"] = "vertex y must be between 0 and 1"

    return errors


def validate_holds(holds: Sequence[Any]) -> Dict[str, str]:
    """Validate a batch of holds, keys are prefixed with the hold index"""
    errors: Dict[str, str] = {}
    for i, hold in enumerate(holds):
        errors.update(validate_vertices(hold.vertices, prefix=f"holds[{i}].vertices"))
    return errors


def validate_board(name: str, image: Any) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not name or not name.strip():
        errors["name"] = "must be provided"
    if image is None:
        errors["image"] = "must be provided"
    return errors


def _is_member(enum_cls, value: Any) -> bool:
    try:
        enum_cls(value)
        return True
    except ValueError:
        return False


def validate_problem(name: str, status: Any, holds: Sequence[Any]) -> Dict[str, str]:
    """
    Check the structural rules shared by problem creation and update

    Role counting is done on the whole set, independent of order.

    Args:
        name: Problem name
        status: Requested status
        holds: Memberships with hold_id and type attributes

    Returns:
        Errors keyed by field ("name", "status", "holds", "holds[i].type", ...)
    """
    errors: Dict[str, str] = {}

    if not name or not name.strip():
        errors["name"] = "name is required"

    if not _is_member(ProblemStatus, status):
        errors["status"] = "status must be either DRAFT or PUBLISHED"

    holds = holds or []
    if len(holds) < MIN_PROBLEM_HOLDS:
        errors["holds"] = f"problem must have at least {MIN_PROBLEM_HOLDS} holds"

    for i, hold in enumerate(holds):
        if getattr(hold, "hold_id", None) is None:
            errors[f"holds[{i}].holdID"] = "hold id is required"
        if not _is_member(HoldRole, getattr(hold, "type", None)):
            errors[f"holds[{i}].type"] = "type must be one of start, hand, foot, finish"

    starts = sum(1 for hold in holds if getattr(hold, "type", None) == HoldRole.START)
    if starts != REQUIRED_START_HOLDS:
        errors["holds.start"] = f"problem must have exactly {REQUIRED_START_HOLDS} start holds"

    return errors
