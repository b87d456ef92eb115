from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DeskError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    body_key = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(DeskError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str, body_key: str = "error") -> None:
        super().__init__(message)
        self.body_key = body_key


class InvalidRequest(DeskError):
    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamFailure(DeskError):
    """A store, network or third-party call failed.

    ``message`` is what the caller sees; the underlying exception is chained
    and only logged.
    """


async def _handle_desk_error(request: Request, exc: DeskError) -> JSONResponse:
    if isinstance(exc, UpstreamFailure):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    return JSONResponse(status_code=exc.status_code, content={exc.body_key: exc.message})


async def _catch_unhandled(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled error in %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal Server Error"},
        )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DeskError, _handle_desk_error)
    app.middleware("http")(_catch_unhandled)
