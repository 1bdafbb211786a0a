"""
MODULE: api.dependencies
RESPONSIBILITY: Resolve stores for request handlers.
ALLOWED: fastapi, core.dependency_injection, core.interfaces.
FORBIDDEN: Business logic, SQL.
ERRORS: DatabaseConnectionError (when the pool cannot be created).

FastAPI dependencies that hand the routers the store interfaces, taken
from the container on app.state.
"""

from typing import Annotated

from fastapi import Depends, Request

from core.dependency_injection import DependencyContainer
from core.interfaces import IBoardGateway, IHoldStore, IProblemStore


def get_container(request: Request) -> DependencyContainer:
    """Dependency container attached to the running app"""
    return request.app.state.container


def get_board_gateway(container: Annotated[DependencyContainer, Depends(get_container)]) -> IBoardGateway:
    return container.get_board_repository()


def get_hold_store(container: Annotated[DependencyContainer, Depends(get_container)]) -> IHoldStore:
    return container.get_hold_repository()


def get_problem_store(container: Annotated[DependencyContainer, Depends(get_container)]) -> IProblemStore:
    return container.get_problem_repository()


BoardGatewayDep = Annotated[IBoardGateway, Depends(get_board_gateway)]
HoldStoreDep = Annotated[IHoldStore, Depends(get_hold_store)]
ProblemStoreDep = Annotated[IProblemStore, Depends(get_problem_store)]
