"""Product Reviews FastAPI application.

Serves the Reviews API over the entity store selected by REVIEWS_STORE.
The reviews domain is initialized in the lifespan so the Protean-backed store
has its StoredReview projection registered before the first request.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reviews.api import register_review_exception_handlers, review_router
from reviews.config import get_settings
from reviews.domain import reviews
from reviews.store import get_store, reset_store
from reviews.utils.logging import add_context, clear_context, configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    settings = get_settings()
    if settings.store_backend == "protean":
        reviews.init()
    reset_store()
    logger.info("Reviews API started", store=type(get_store()).__name__)
    yield
    reset_store()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Product Reviews API",
    description="API for submitting and querying product reviews.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_log_context(request: Request, call_next):
    """Bind method and path to every log line emitted while serving a request."""
    clear_context()
    add_context(method=request.method, path=request.url.path)
    try:
        return await call_next(request)
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(review_router)
register_review_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "store": type(get_store()).__name__,
        }
    )
