"""
MODULE: api.schemas
RESPONSIBILITY: Request bodies and response envelopes of the HTTP API.
ALLOWED: pydantic, core.models.
FORBIDDEN: Database access, business rules (the repositories own those).
ERRORS: pydantic.ValidationError (surfaced as 400 by api.app).

Request models only check the shape of the JSON. Domain rules such as vertex
ranges or start-hold counts are enforced by the repositories so their field
errors come back unchanged.
"""

import base64
import binascii
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from core.models import Board, Hold, Point, Problem, ProblemHold


class PointIn(BaseModel):
    x: float
    y: float


class BoardIn(BaseModel):
    """Board creation body; image is base64 encoded"""

    name: str = ""
    image: Optional[str] = None

    def to_board(self) -> Board:
        """
        Decode into a Board

        Raises:
            ValueError: If the image is not valid base64
        """
        image = None
        if self.image is not None:
            try:
                image = base64.b64decode(self.image, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValueError("invalid base64 image data") from e
        return Board(name=self.name, image=image)


class HoldIn(BaseModel):
    id: Optional[UUID] = None
    vertices: List[PointIn] = Field(default_factory=list)

    def to_hold(self) -> Hold:
        return Hold(
            id=self.id,
            vertices=[Point(x=p.x, y=p.y) for p in self.vertices],
        )


class HoldBatchIn(BaseModel):
    holds: List[HoldIn] = Field(default_factory=list)

    def to_holds(self) -> List[Hold]:
        return [h.to_hold() for h in self.holds]


class ProblemHoldIn(BaseModel):
    """Membership reference; accepts {id, type} as well as {holdID, roleTag}"""

    model_config = ConfigDict(populate_by_name=True)

    hold_id: Optional[UUID] = Field(default=None, validation_alias=AliasChoices("id", "holdID"))
    type: Optional[str] = Field(default=None, validation_alias=AliasChoices("type", "roleTag"))

    def to_problem_hold(self) -> ProblemHold:
        return ProblemHold(hold_id=self.hold_id, type=self.type)


class ProblemIn(BaseModel):
    name: str = ""
    status: str = ""
    holds: List[ProblemHoldIn] = Field(default_factory=list)

    def to_problem(self, problem_id: UUID, board_id: UUID) -> Problem:
        return Problem(id=problem_id, board_id=board_id, name=self.name, status=self.status)

    def to_problem_holds(self) -> List[ProblemHold]:
        return [h.to_problem_hold() for h in self.holds]


def point_out(point: Point) -> Dict[str, float]:
    return {"x": point.x, "y": point.y}


def board_out(board: Board) -> Dict[str, Any]:
    return {
        "id": board.id,
        "name": board.name,
        "image": base64.b64encode(board.image or b"").decode("ascii"),
        "createdAt": board.created_at,
        "updatedAt": board.updated_at,
        "version": board.version,
    }


def hold_out(hold: Hold) -> Dict[str, Any]:
    return {
        "id": hold.id,
        "boardID": hold.board_id,
        "vertices": [point_out(p) for p in hold.vertices],
        "createdAt": hold.created_at,
        "updatedAt": hold.updated_at,
    }


def problem_out(problem: Problem) -> Dict[str, Any]:
    return {
        "id": problem.id,
        "board_id": problem.board_id,
        "name": problem.name,
        "setter_id": problem.setter_id,
        "status": getattr(problem.status, "value", problem.status),
        "created_at": problem.created_at,
    }


def problem_hold_out(hold: ProblemHold) -> Dict[str, Any]:
    return {
        "id": hold.id,
        "problemID": hold.problem_id,
        "holdID": hold.hold_id,
        "type": getattr(hold.type, "value", hold.type),
        "vertices": [point_out(p) for p in hold.vertices],
    }
