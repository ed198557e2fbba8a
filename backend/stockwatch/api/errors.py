"""
Maps the provider error taxonomy onto HTTP responses.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from stockwatch.core.exceptions import (
    InvalidSymbolError,
    NoDataAvailableError,
    ParseFailure,
    PremiumFeatureError,
    RateLimitExceededError,
    RefreshInProgressError,
    StockWatchError,
    UpstreamHttpError,
)

logger = logging.getLogger(__name__)

# Checked in order, first match wins
ERROR_STATUS_CODES = [
    (InvalidSymbolError, 404),
    (NoDataAvailableError, 404),
    (RateLimitExceededError, 429),
    (PremiumFeatureError, 403),
    (RefreshInProgressError, 409),
    (UpstreamHttpError, 502),
    (ParseFailure, 502),
]


def status_code_for(exc: StockWatchError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def stockwatch_error_handler(request: Request, exc: StockWatchError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StockWatchError, stockwatch_error_handler)
