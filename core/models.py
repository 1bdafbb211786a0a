"""
MODULE: core.models
RESPONSIBILITY: Define domain data structures (dataclasses, enums).
ALLOWED: Dataclasses, Enums, Typing.
FORBIDDEN: Business logic, database operations.
ERRORS: None.

Domain models of the board backend:
- Boards with their image
- Holds (polygons in normalized image coordinates)
- Problems and their hold memberships
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any
from enum import Enum
from uuid import UUID


# Stands in for a user system until one exists
PLACEHOLDER_SETTER_ID = UUID("10000000-0000-0000-0000-000000000001")

MIN_HOLD_VERTICES = 3
MIN_PROBLEM_HOLDS = 3
REQUIRED_START_HOLDS = 2


class ProblemStatus(str, Enum):
    """Problem lifecycle. DRAFT -> PUBLISHED only."""
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class HoldRole(str, Enum):
    """Role of a hold inside a problem"""
    START = "start"
    HAND = "hand"
    FOOT = "foot"
    FINISH = "finish"


@dataclass
class Point:
    """
    Vertex in normalized image coordinates

    Attributes:
        x: Horizontal position, 0..1
        y: Vertical position, 0..1
    """
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass
class Board:
    """
    Climbing wall

    Attributes:
        id: Board identifier
        name: Display name
        image: Raw image bytes, never interpreted
        created_at: Creation time
        updated_at: Last update time
        version: Optimistic concurrency counter
    """
    name: str
    image: Optional[bytes]
    id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 0


@dataclass
class Hold:
    """
    Polygonal region on a board image

    Attributes:
        id: Hold identifier (None until persisted)
        board_id: Owning board
        vertices: Polygon outline
        created_at: Creation time
        updated_at: Last update time
    """
    vertices: List[Point]
    id: Optional[UUID] = None
    board_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Problem:
    """
    Route on a board

    Attributes:
        id: Problem identifier, generated by the caller
        board_id: Owning board
        name: Display name
        status: DRAFT or PUBLISHED (raw strings are accepted until validated)
        setter_id: Author
        created_at: Creation time
    """
    name: str
    status: Any
    id: Optional[UUID] = None
    board_id: Optional[UUID] = None
    setter_id: UUID = PLACEHOLDER_SETTER_ID
    created_at: Optional[datetime] = None


@dataclass
class ProblemHold:
    """
    Membership of a hold in a problem

    Attributes:
        hold_id: Referenced hold
        type: Role tag (raw strings are accepted until validated)
        id: Membership identifier
        problem_id: Owning problem
        vertices: Geometry of the referenced hold, filled on reads
    """
    hold_id: Optional[UUID]
    type: Any
    id: Optional[UUID] = None
    problem_id: Optional[UUID] = None
    vertices: List[Point] = field(default_factory=list)
