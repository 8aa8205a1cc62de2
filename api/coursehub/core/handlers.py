"""Exception handlers producing the shared error envelope.

Every failure response has the same body::

    {"error": true, "message": ..., "code": ..., "status_code": ...,
     "request_id": ...}

Validation failures add ``details``: one ``{field, message}`` per problem.
Server-side errors never leak their text to the client.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from coursehub.core.context import get_request_id
from coursehub.core.errors import ERROR_STATUS_MAP, AppError


logger = structlog.get_logger(__name__)

GENERIC_SERVER_ERROR = "An unexpected error occurred. Please try again later."

_CODE_BY_STATUS = {status_code: kind.value for kind, status_code in ERROR_STATUS_MAP.items()}


def error_response(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> ORJSONResponse:
    request_id = getattr(request.state, "request_id", None) or get_request_id()
    body = {
        "error": True,
        "message": message,
        "code": code,
        "status_code": status_code,
        "request_id": request_id,
        **extra,
    }
    return ORJSONResponse(status_code=status_code, content=body, headers=headers)


async def handle_app_error(request: Request, exc: AppError) -> ORJSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "app_error",
        code=exc.code,
        detail=exc.message,
        method=request.method,
        path=request.url.path,
    )
    message = exc.message if exc.status_code < 500 else GENERIC_SERVER_ERROR
    return error_response(request, exc.status_code, message, exc.code)


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> ORJSONResponse:
    logger.warning(
        "http_error",
        status_code=exc.status_code,
        detail=str(exc.detail),
        path=request.url.path,
    )
    server_side = exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
    return error_response(
        request,
        exc.status_code,
        GENERIC_SERVER_ERROR if server_side else str(exc.detail),
        _CODE_BY_STATUS.get(exc.status_code, "http_error"),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> ORJSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    logger.warning("request_invalid", path=request.url.path, details=details)
    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        "validation",
        details=details,
    )


async def handle_unexpected(request: Request, exc: Exception) -> ORJSONResponse:
    logger.exception(
        "unhandled_exception",
        error_type=type(exc).__name__,
        method=request.method,
        path=request.url.path,
    )
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        GENERIC_SERVER_ERROR,
        "internal",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected)
