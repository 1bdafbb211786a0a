"""
MODULE: api.routers.router_problem
RESPONSIBILITY: Problem endpoints.
ALLOWED: fastapi, loguru, api.schemas, api.dependencies.
FORBIDDEN: SQL, structural rules (the repositories own those).
ERRORS: BoardNotFoundError, ProblemNotFoundError, ImmutableStateError, ValidationFailedError, StorageError (mapped by api.errors).
"""

from typing import Any, Dict
from uuid import UUID, uuid4

from fastapi import APIRouter, Response, status
from loguru import logger

from api.dependencies import ProblemStoreDep
from api.schemas import ProblemIn, problem_hold_out, problem_out

router = APIRouter()


@router.post(
    "/board/{board_id}/problem",
    summary="Create a problem",
    status_code=status.HTTP_201_CREATED,
)
def create_problem(
    board_id: UUID,
    body: ProblemIn,
    response: Response,
    problems: ProblemStoreDep,
) -> Dict[str, Any]:
    """
    Create a problem with its holds. The problem id is generated here so the
    membership rows can reference it inside the same transaction.
    """
    problem = problems.create_problem(
        board_id,
        body.to_problem(uuid4(), board_id),
        body.to_problem_holds(),
    )
    logger.bind(handler="createProblem").info(f"problem {problem.id} created on board {board_id}")

    response.headers["Location"] = f"/v1/board/{board_id}/problem/{problem.id}"
    return {"problem": problem_out(problem)}


@router.get("/board/{board_id}/problems", summary="List the problems of a board")
def get_problems(board_id: UUID, problems: ProblemStoreDep) -> Dict[str, Any]:
    """Newest problems first."""
    return {"problems": [problem_out(p) for p in problems.get_problems(board_id)]}


@router.get("/board/{board_id}/problem/{problem_id}", summary="Get a problem with its holds")
def get_problem(board_id: UUID, problem_id: UUID, problems: ProblemStoreDep) -> Dict[str, Any]:
    problem = problems.get_problem(board_id, problem_id)
    holds = problems.get_problem_holds(problem_id)
    return {
        "problem": {
            **problem_out(problem),
            "holds": [problem_hold_out(h) for h in holds],
        }
    }


@router.patch("/board/{board_id}/problem/{problem_id}", summary="Update a draft problem")
def update_problem(
    board_id: UUID,
    problem_id: UUID,
    body: ProblemIn,
    problems: ProblemStoreDep,
) -> Dict[str, Any]:
    """
    Replace the name, status and holds of a draft problem. Published problems
    are rejected with 409.
    """
    problem = problems.update_problem(
        board_id,
        body.to_problem(problem_id, board_id),
        body.to_problem_holds(),
    )
    logger.bind(handler="updateProblem").info(f"problem {problem_id} updated on board {board_id}")
    return {"problem": problem_out(problem)}
