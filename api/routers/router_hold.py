"""
MODULE: api.routers.router_hold
RESPONSIBILITY: Hold batch endpoints and hold deletion.
ALLOWED: fastapi, loguru, api.schemas, api.dependencies.
FORBIDDEN: SQL, geometry checks (the repositories own those).
ERRORS: BoardNotFoundError, HoldNotFoundError, HoldInUseError, ValidationFailedError, StorageError (mapped by api.errors).
"""

from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Response, status
from loguru import logger

from api.dependencies import HoldStoreDep
from api.schemas import HoldBatchIn, hold_out

router = APIRouter()


@router.post(
    "/board/{board_id}/holds",
    summary="Create holds on a board",
    status_code=status.HTTP_201_CREATED,
)
def create_holds(board_id: UUID, body: HoldBatchIn, holds: HoldStoreDep) -> Dict[str, Any]:
    """
    Insert a batch of holds. Either every hold is stored or none is.
    """
    created = holds.create_holds(board_id, body.to_holds())
    logger.bind(handler="createHolds").info(f"{len(created)} holds created on board {board_id}")
    return {"holds": [hold_out(h) for h in created]}


@router.get("/board/{board_id}/holds", summary="List the holds of a board")
def get_holds(board_id: UUID, holds: HoldStoreDep) -> Dict[str, Any]:
    return {
        "holds": [hold_out(h) for h in holds.get_holds(board_id)],
        "boardID": board_id,
    }


@router.patch("/board/{board_id}/holds", summary="Update or add holds on a board")
def update_holds(board_id: UUID, body: HoldBatchIn, holds: HoldStoreDep) -> Dict[str, Any]:
    """
    Holds with an id are updated, holds without one are added. Holds missing
    from the body are left as they are.
    """
    updated = holds.update_holds(board_id, body.to_holds())
    logger.bind(handler="updateHolds").info(f"{len(updated)} holds upserted on board {board_id}")
    return {"holds": [hold_out(h) for h in updated]}


@router.delete(
    "/hold/{hold_id}",
    summary="Delete a hold",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_hold(hold_id: UUID, holds: HoldStoreDep) -> Response:
    holds.delete_hold(hold_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
