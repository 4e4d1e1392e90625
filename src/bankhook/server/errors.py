"""Centralized exception handling for the HTTP API.

Every route funnels uncaught failures through these handlers, so the browser
always gets a JSON body:

- Plaid failures relay Plaid's own error object verbatim.
- Everything else gets a generic ``OTHER_ERROR`` body.

Both use HTTP 500.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..errors import BankhookError, NotConnectedError, RemoteCallError

logger = logging.getLogger(__name__)

GENERIC_ERROR_CODE = "OTHER_ERROR"
GENERIC_ERROR_MESSAGE = "I got some other message on the server."
FAILURE_STATUS = status.HTTP_500_INTERNAL_SERVER_ERROR


def generic_error_body(message: str = GENERIC_ERROR_MESSAGE) -> dict[str, Any]:
    return {"error_code": GENERIC_ERROR_CODE, "error_message": message}


async def remote_call_error_handler(
    request: Request, exc: RemoteCallError
) -> JSONResponse:
    """Relay Plaid's error object, or a generic body when there is none."""
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    body = exc.detail if exc.detail is not None else generic_error_body()
    return JSONResponse(status_code=FAILURE_STATUS, content=body)


async def bankhook_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    if isinstance(exc, NotConnectedError):
        return JSONResponse(
            status_code=FAILURE_STATUS, content=generic_error_body(str(exc))
        )
    return JSONResponse(status_code=FAILURE_STATUS, content=generic_error_body())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Starlette re-raises after this response is sent; the server logs the traceback
    logger.error(
        f"{request.method} {request.url.path} raised {type(exc).__name__}: {exc}"
    )
    return JSONResponse(status_code=FAILURE_STATUS, content=generic_error_body())


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(RemoteCallError, remote_call_error_handler)
    app.add_exception_handler(BankhookError, bankhook_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
