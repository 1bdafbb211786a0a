"""
MODULE: api.routers.router_health
RESPONSIBILITY: Liveness and database reachability.
ALLOWED: fastapi, api.dependencies, core.exceptions.
FORBIDDEN: Business logic.
ERRORS: None (an unreachable database answers 503).
"""

from typing import Annotated, Dict

from fastapi import APIRouter, Depends, Response, status

from api.dependencies import get_container
from core.dependency_injection import DependencyContainer
from core.exceptions import StorageError

router = APIRouter()


@router.get("/health", summary="Health check")
def health(
    response: Response,
    container: Annotated[DependencyContainer, Depends(get_container)],
) -> Dict[str, str]:
    """
    Liveness plus a database round trip.
    """
    try:
        reachable = container.get_database_manager().check_connection()
    except StorageError:
        reachable = False

    if not reachable:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "degraded", "database": "unreachable"}
    return {"status": "ok", "database": "ok"}
