"""Exception handlers that render every failure as the response envelope."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from doclens.exceptions import DocLensError, ExternalServiceError

logger = logging.getLogger(__name__)


def envelope(success: bool, message: str, data=None, **extra) -> dict:
    body = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


async def doclens_error_handler(request: Request, exc: DocLensError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}",
            extra={"path": request.url.path, "method": request.method},
        )
    else:
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc.message}")

    extra = {}
    if isinstance(exc, ExternalServiceError):
        extra["errorType"] = exc.category.value
    return JSONResponse(status_code=exc.status_code, content=envelope(False, exc.message, **extra))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "form"))
    message = f"Invalid request field {field}: {first.get('msg', 'invalid value')}" if field else "Invalid request"
    logger.warning(f"Request validation failed on {request.url.path}: {message}")
    return JSONResponse(status_code=400, content=envelope(False, message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=envelope(False, "Internal server error", error=str(exc)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DocLensError, doclens_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
