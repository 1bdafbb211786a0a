"""
MODULE: api.app
RESPONSIBILITY: Build the FastAPI application.
ALLOWED: fastapi, loguru, api.*, core.dependency_injection, config.
FORBIDDEN: Business logic, SQL.
ERRORS: None.

Application factory: middleware, error handlers, routers and the dependency
container.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from api.errors import register_exception_handlers
from api.middleware import MaxBodySizeMiddleware
from api.routers.router_board import router as router_board
from api.routers.router_health import router as router_health
from api.routers.router_hold import router as router_hold
from api.routers.router_problem import router as router_problem
from config.settings import Config, config as default_config
from core.dependency_injection import DependencyContainer


def create_app(app_config: Optional[Config] = None, container: Optional[DependencyContainer] = None) -> FastAPI:
    """
    Create the HTTP application

    Args:
        app_config: Configuration; the global one when None
        container: Dependency container; built from the configuration when None

    Returns:
        Configured FastAPI application
    """
    app_config = app_config or default_config
    container = container or DependencyContainer(app_config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{app_config.app.app_name} {app_config.app.app_version} starting")
        yield
        container.shutdown()
        logger.info("server stopped")

    app = FastAPI(
        title=app_config.app.app_name,
        version=app_config.app.app_version,
        description="Boards, holds and problems of a climbing board.",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(MaxBodySizeMiddleware, max_bytes=app_config.server.max_body_bytes)
    # CORS outermost so error responses carry the headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(app_config.server.cors_allow_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=[
            "Accept",
            "Content-Type",
            "Content-Length",
            "Accept-Encoding",
            "Authorization",
            "X-Requested-With",
        ],
        max_age=3600,
    )

    register_exception_handlers(app)

    app.include_router(router_health, tags=["health"])
    app.include_router(router_board, prefix="/v1", tags=["boards"])
    app.include_router(router_hold, prefix="/v1", tags=["holds"])
    app.include_router(router_problem, prefix="/v1", tags=["problems"])

    return app
