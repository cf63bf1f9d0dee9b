"""Exception handlers that turn failures into the `{"error": {...}}` envelope.

Invariants:
    - DoConnectError answers with its own http_status and to_response() body
    - Request validation failures answer 400 with one detail per bad field
    - Anything else answers 500 with a fixed message; the traceback is logged only
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from doconnect.core.errors import DoConnectError, ErrorSeverity

logger = logging.getLogger(__name__)


def _envelope(code: str, message: str, category: str, severity: ErrorSeverity, **more) -> dict:
    body = {
        "code": code,
        "message": message,
        "category": category,
        "severity": severity.value,
    }
    body.update(more)
    return {"error": body}


def _field_details(exc: RequestValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]


async def handle_domain_error(request: Request, exc: DoConnectError) -> JSONResponse:
    context = {"error_code": exc.code, "path": request.url.path, "method": request.method}
    if exc.http_status >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}", extra=context)
    else:
        logger.warning(f"{type(exc).__name__}: {exc.message}", extra=context)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def handle_validation_error(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = _field_details(exc)
    logger.warning(
        f"Rejected request body: {[d['field'] for d in details]}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data", "validation",
            ErrorSeverity.WARNING, details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred", "internal",
            ErrorSeverity.CRITICAL,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DoConnectError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
