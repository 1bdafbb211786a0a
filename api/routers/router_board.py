"""
MODULE: api.routers.router_board
RESPONSIBILITY: Board endpoints.
ALLOWED: fastapi, loguru, api.schemas, api.dependencies, core.exceptions.
FORBIDDEN: SQL, validation rules (the repositories own those).
ERRORS: ValidationFailedError, BoardNotFoundError, StorageError (mapped by api.errors).
"""

from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Response, status
from loguru import logger

from api.dependencies import BoardGatewayDep
from api.schemas import BoardIn, board_out
from core.exceptions import ValidationFailedError

router = APIRouter()


@router.post(
    "/board",
    summary="Create a board",
    status_code=status.HTTP_201_CREATED,
)
def create_board(body: BoardIn, response: Response, boards: BoardGatewayDep) -> Dict[str, Any]:
    """
    Create a board from a name and a base64 encoded image.
    """
    try:
        board = body.to_board()
    except ValueError as e:
        raise ValidationFailedError({"image": str(e)}) from e

    board = boards.create(board)
    logger.bind(handler="createBoard").info(f"board {board.id} created")

    response.headers["Location"] = f"/v1/board/{board.id}"
    return {"board": board_out(board)}


@router.get("/boards", summary="List boards")
def get_all_boards(boards: BoardGatewayDep) -> Dict[str, Any]:
    return {"boards": [board_out(b) for b in boards.list()]}


@router.get("/board/{board_id}", summary="Get a board")
def get_board(board_id: UUID, boards: BoardGatewayDep) -> Dict[str, Any]:
    return {"board": board_out(boards.get(board_id))}
