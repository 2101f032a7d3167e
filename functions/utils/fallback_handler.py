"""
functions/utils/fallback_handler.py

WHAT THIS FILE IS FOR
---------------------
The single last-resort error boundary of each service.

`install_fallback_handler()` registers one HTTP middleware that turns any
exception escaping a route into:

    500 Internal Server Error
    Content-Type: text/plain; charset=utf-8
    <body produced by the service-specific renderer>

Framework errors that FastAPI already answers itself (404, 405, request
validation) never reach this middleware.

Each service supplies its own body renderer:
- edge:  "internal error: <message>"
- inner: "internal error in inner service: <message>\\n<traceback>"
"""

from __future__ import annotations

import traceback
from typing import Callable

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from functions.utils.errors import ServiceError, as_service_error

logger = structlog.get_logger(__name__)

BodyRenderer = Callable[[ServiceError, BaseException], str]


def render_edge_body(error: ServiceError, cause: BaseException) -> str:
    return f"internal error: {error.message}"


def render_inner_body(error: ServiceError, cause: BaseException) -> str:
    trace = "".join(traceback.format_exception(type(cause), cause, cause.__traceback__))
    return f"internal error in inner service: {error.message}\n{trace}"


def install_fallback_handler(app: FastAPI, render_body: BodyRenderer) -> None:
    """Register the catch-all error middleware on `app`."""

    @app.middleware("http")
    async def fallback_error_middleware(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            error = as_service_error(exc)

            logger.error(
                "internal_error",
                message=error.message,
                kind=error.kind,
                path=request.url.path,
                exc_info=exc,
            )

            return PlainTextResponse(
                render_body(error, exc),
                status_code=error.status_code,
            )
