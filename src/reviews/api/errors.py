"""Translate service and store errors into HTTP responses.

Every error body has the shape ``{"error": "message"}``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from reviews.review.errors import ReviewConflictError
from reviews.store.port import DuplicateKeyError, InvalidContinuationTokenError, StoreUnavailableError

logger = structlog.get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _on_conflict(request: Request, exc: ReviewConflictError) -> JSONResponse:
    return _error(409, exc.message)


async def _on_duplicate_key(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    logger.info("Duplicate review request id", partition_key=exc.partition_key, row_key=exc.row_key)
    return _error(409, str(exc))


async def _on_invalid_token(request: Request, exc: InvalidContinuationTokenError) -> JSONResponse:
    return _error(400, str(exc))


async def _on_store_unavailable(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    logger.error("Entity store unavailable", path=request.url.path, error=str(exc))
    return _error(503, "Review store is unavailable")


def register_review_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ReviewConflictError, _on_conflict)
    app.add_exception_handler(DuplicateKeyError, _on_duplicate_key)
    app.add_exception_handler(InvalidContinuationTokenError, _on_invalid_token)
    app.add_exception_handler(StoreUnavailableError, _on_store_unavailable)
