"""FastAPI routes for the Reviews API.

Each route translates between Pydantic schemas (external contract) and the
ReviewService running over the active entity store.
"""

from fastapi import APIRouter, Query
from fastapi.responses import Response

from reviews.api.schemas import (
    ArchiveResponse,
    ErrorResponse,
    PagedReviewResponse,
    ReviewResponse,
    SubmitReviewRequest,
)
from reviews.config import get_settings
from reviews.review.export import export_filename, reviews_to_csv
from reviews.review.service import ReviewService
from reviews.store import get_store

review_router = APIRouter(prefix="/reviews", tags=["reviews"])


def _service() -> ReviewService:
    return ReviewService(get_store())


@review_router.get("/{product_name}", response_model=PagedReviewResponse)
async def get_reviews(
    product_name: str,
    page_size: int | None = Query(default=None, alias="pageSize"),
    continuation_token: str | None = Query(default=None, alias="continuationToken"),
) -> PagedReviewResponse:
    """Return one page of reviews for a product, newest first within the page."""
    if page_size is None:
        page_size = get_settings().default_page_size
    result = await _service().list_paged(product_name, page_size, continuation_token)
    return PagedReviewResponse.from_result(result)


@review_router.post(
    "/{product_name}",
    response_model=ReviewResponse,
    responses={409: {"model": ErrorResponse}},
)
async def add_review(product_name: str, body: SubmitReviewRequest) -> ReviewResponse:
    """Add a review if the client has seen the latest existing one."""
    review = await _service().submit(product_name, body.to_request())
    return ReviewResponse.from_review(review)


@review_router.get("/admin/export/{product_name}", response_class=Response)
async def export_reviews(product_name: str) -> Response:
    """Export every review of a product as CSV."""
    reviews = await _service().list_all(product_name)
    return Response(
        content=reviews_to_csv(reviews).encode("utf-8"),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(product_name)}"'},
    )


@review_router.post("/admin/archive/{product_name}", response_model=ArchiveResponse)
async def archive_old_reviews(product_name: str) -> ArchiveResponse:
    """Move reviews older than the retention window into the archive partition."""
    archived = await _service().archive_old(product_name)
    return ArchiveResponse(archived=archived)
