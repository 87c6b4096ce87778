"""HTTP error helpers and application exception handlers."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from wallet_monitor.infrastructure.wallet import WalletApiError, WalletApiStatusError
from wallet_monitor.schemas import ErrorResponse

logger = logging.getLogger(__name__)

ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"
NETWORK_NOT_FOUND = "NETWORK_NOT_FOUND"
UNAUTHORIZED = "UNAUTHORIZED"
VALIDATION_ERROR = "VALIDATION_ERROR"


def api_error(status_code: int, code: str, message: str, **extra: Any) -> HTTPException:
    detail: dict[str, Any] = {"code": code, "message": message}
    detail.update(extra)
    return HTTPException(status_code=status_code, detail=detail)


def wallet_error(exc: WalletApiError) -> HTTPException:
    """Every wallet failure is a bad gateway; the code tells the caller which kind."""
    extra: dict[str, Optional[int]] = {}
    if isinstance(exc, WalletApiStatusError):
        extra["upstreamStatus"] = exc.status_code
    return api_error(status.HTTP_502_BAD_GATEWAY, exc.code, str(exc), **extra)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    logger.warning("Validation error on %s %s: %s", request.method, request.url.path, fields)
    body = ErrorResponse(error=VALIDATION_ERROR, message="Request validation failed", fields=fields)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(exclude_none=True))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


__all__ = [
    "ACCOUNT_NOT_FOUND",
    "NETWORK_NOT_FOUND",
    "UNAUTHORIZED",
    "VALIDATION_ERROR",
    "api_error",
    "register_exception_handlers",
    "wallet_error",
]
