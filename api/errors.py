"""
MODULE: api.errors
RESPONSIBILITY: Map domain exceptions to HTTP error responses.
ALLOWED: fastapi, starlette, loguru, core.exceptions.
FORBIDDEN: Business logic.
ERRORS: None.

Every error body has the shape {"error": <message or field map>}. Storage
failures are logged with their cause and answered with a generic message.
"""

from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.exceptions import (
    BoardAppError,
    ConflictError,
    ImmutableStateError,
    NotFoundError,
    StorageError,
    ValidationFailedError,
)

INTERNAL_ERROR_MESSAGE = "the server encountered an error while processing your request"


def error_response(status_code: int, message: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _log_context(request: Request) -> Dict[str, str]:
    return {"requestMethod": request.method, "url": str(request.url)}


def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.bind(**_log_context(request)).info(f"{exc.entity} {exc.entity_id} not found")
    return error_response(status.HTTP_404_NOT_FOUND, f"{exc.entity} not found")


def _validation_failed_handler(request: Request, exc: ValidationFailedError) -> JSONResponse:
    logger.bind(**_log_context(request), validationErrors=exc.errors).info("validation failed")
    return error_response(status.HTTP_400_BAD_REQUEST, exc.errors)


def _immutable_state_handler(request: Request, exc: ImmutableStateError) -> JSONResponse:
    logger.bind(**_log_context(request)).info(f"rejected edit of published problem {exc.problem_id}")
    return error_response(status.HTTP_409_CONFLICT, str(exc))


def _conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    logger.bind(**_log_context(request)).info(f"conflict: {exc}")
    return error_response(status.HTTP_409_CONFLICT, str(exc))


def _storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.bind(**_log_context(request)).opt(exception=exc).error(
        f"storage failure: {exc} (rollback error: {exc.rollback_error})"
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def _app_error_handler(request: Request, exc: BoardAppError) -> JSONResponse:
    logger.bind(**_log_context(request)).opt(exception=exc).error(f"unhandled application error: {exc}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return error_response(exc.status_code, "the requested resource could not be found")
    return error_response(exc.status_code, exc.detail)


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # body/path decoding errors; field path without the "body"/"path" prefix
    errors: Dict[str, str] = {}
    for e in exc.errors():
        loc = e.get("loc") or ()
        path = ".".join(str(x) for x in loc if x not in ("body", "path", "query"))
        errors[path or "body"] = e.get("msg", "invalid value")
    logger.bind(**_log_context(request), validationErrors=errors).info("malformed request")
    return error_response(status.HTTP_400_BAD_REQUEST, errors)


def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.bind(**_log_context(request)).opt(exception=exc).error("unhandled exception")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all handlers; the most specific exception class wins"""
    app.add_exception_handler(NotFoundError, _not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ValidationFailedError, _validation_failed_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ImmutableStateError, _immutable_state_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ConflictError, _conflict_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StorageError, _storage_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(BoardAppError, _app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_exception_handler)
