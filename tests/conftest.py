"""
Pytest configuration and shared fixtures.

Fixtures available to all tests:
  • cursor / connection / pool: MagicMock stand-ins for psycopg2 objects
  • db_manager                : DatabaseManager running on the mock pool
  • board_repository          : BoardRepository whose board always exists
  • make_hold / make_membership: domain object factories
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from typing import List
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

# Ensure the project root is on the path so all imports resolve.
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config.settings import DatabaseConfig  # noqa: E402
from core.database import DatabaseManager  # noqa: E402
from core.models import Hold, Point, ProblemHold  # noqa: E402

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def ts(seconds: int = 0) -> datetime:
    return T0 + timedelta(seconds=seconds)


def square(offset: float = 0.0) -> List[Point]:
    return [
        Point(0.1 + offset, 0.1),
        Point(0.2 + offset, 0.1),
        Point(0.2 + offset, 0.2),
        Point(0.1 + offset, 0.2),
    ]


@pytest.fixture
def cursor():
    cur = MagicMock(name="cursor")
    cur.rowcount = 0
    return cur


@pytest.fixture
def connection(cursor):
    conn = MagicMock(name="connection")
    conn.closed = 0
    conn.cursor.return_value.__enter__.return_value = cursor
    return conn


@pytest.fixture
def pool(connection):
    p = MagicMock(name="pool")
    p.closed = False
    p.getconn.return_value = connection
    return p


@pytest.fixture
def db_config():
    return DatabaseConfig(
        host="localhost",
        database="bloc_test",
        user="user",
        password="password",
        port=5432,
        statement_timeout=0,
    )


@pytest.fixture
def db_manager(db_config, pool):
    return DatabaseManager(db_config, pool=pool)


@pytest.fixture
def board_repository():
    boards = MagicMock(name="board_repository")
    boards.require.return_value = None
    return boards


@pytest.fixture
def make_hold():
    def _make(offset: float = 0.0, hold_id=None) -> Hold:
        return Hold(vertices=square(offset), id=hold_id)

    return _make


@pytest.fixture
def make_membership():
    def _make(role: str, hold_id=None) -> ProblemHold:
        return ProblemHold(hold_id=hold_id or uuid4(), type=role)

    return _make
