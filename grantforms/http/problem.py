"""Problem+JSON utilities and global exception handlers.

Defines the RFC 7807 media type and handler callables that turn HTTP,
request-validation, lookup and unexpected errors into
application/problem+json responses.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from grantforms.errors import ApplicationNotFoundError, UnknownPositionError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem(status: int, title: str, detail: str | None = None, **extra: Any) -> dict:
    body: dict[str, Any] = {"title": title, "status": status}
    if detail is not None:
        body["detail"] = detail
    body.update(extra)
    return body


def raise_problem(status: int, title: str, detail: str | None = None, **extra: Any) -> None:
    raise HTTPException(status_code=status, detail=problem(status, title, detail, **extra))


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status_code = int(exc.status_code or 500)
    if isinstance(exc.detail, dict):
        body = exc.detail
    else:
        body = problem(status_code, "Error", str(exc.detail or ""))
    headers = {str(k): str(v) for k, v in (exc.headers or {}).items()}
    return JSONResponse(body, status_code=status_code, media_type=PROBLEM_MEDIA_TYPE, headers=headers or None)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    body = problem(422, "Invalid Request", "Request validation failed", errors=jsonable_errors(exc))
    return JSONResponse(body, status_code=422, media_type=PROBLEM_MEDIA_TYPE)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in exc.errors()]


async def handle_not_found(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    if isinstance(exc, ApplicationNotFoundError):
        body = problem(404, "Application Not Found", f"No application with id {exc}")
    elif isinstance(exc, UnknownPositionError):
        body = problem(404, "Page Not Found", str(exc))
    else:
        body = problem(404, "Not Found")
    logger.info("not_found path=%s reason=%s", request.url.path, type(exc).__name__)
    return JSONResponse(body, status_code=404, media_type=PROBLEM_MEDIA_TYPE)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(problem(500, "Internal Server Error"), status_code=500, media_type=PROBLEM_MEDIA_TYPE)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem",
    "raise_problem",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_not_found",
    "handle_unexpected_error",
]
