from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.errors import (
    AccountNotFoundError,
    DuplicateIdempotencyKeyError,
    InsufficientFundsError,
)


logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[Exception], int] = {
    AccountNotFoundError: 404,
    InsufficientFundsError: 409,
    DuplicateIdempotencyKeyError: 409,
    ValueError: 400,
}


def _handler_for(
    status_code: int,
) -> Callable[[Request, Exception], Coroutine[Any, Any, JSONResponse]]:
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.info(
            "request.rejected",
            extra={
                "path": request.url.path,
                "status_code": status_code,
                "error": type(exc).__name__,
            },
        )
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


def register_exception_handlers(app: FastAPI) -> None:
    for error_type, status_code in ERROR_STATUS.items():
        app.add_exception_handler(error_type, _handler_for(status_code))
