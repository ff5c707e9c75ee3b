"""ReviewService: retrieval, conflict-checked submission, and archival.

Sits between the HTTP surface and the entity store. Holds no state of its own
and takes no locks: concurrent writers are only as safe as the store's
per-entity primitives (row-key uniqueness on insert, version tag on delete).

Known limits:
- submit() scans the whole partition to find the newest review, so each
  submission costs O(partition size), and two submitters can both pass the
  check against the same snapshot and both succeed.
- archive_old() moves each review with an upsert followed by a delete. A crash
  between the two leaves the review in both partitions; re-running archival
  converges because the upsert is idempotent.
"""

from contextlib import aclosing
from datetime import datetime
from uuid import uuid4

import structlog

from reviews.config import ReviewSettings, get_settings
from reviews.review.errors import ReviewConflictError
from reviews.review.model import PagedReviewResult, Review, ReviewRequest, as_utc, utc_now, years_before
from reviews.store.port import EntityStore, EntityStoreError, UpdateMode

logger = structlog.get_logger(__name__)


def new_row_key() -> str:
    return uuid4().hex


class ReviewService:
    def __init__(self, store: EntityStore, settings: ReviewSettings | None = None) -> None:
        self.store = store
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------
    async def list_all(self, product_name: str) -> list[Review]:
        """Every review in the product's partition, in store order."""
        results: list[Review] = []
        async for page in self.store.query(product_name, page_size=self.settings.scan_page_size):
            results.extend(page.items)
        return results

    async def list_paged(
        self,
        product_name: str,
        page_size: int,
        continuation_token: str | None = None,
    ) -> PagedReviewResult:
        """Fetch exactly one page and sort it newest first.

        Sorting is local to the page; the store decides which reviews land on
        which page. Invalid input yields an empty result rather than an error.
        """
        if not product_name or not product_name.strip() or page_size <= 0:
            return PagedReviewResult()

        pages = self.store.query(product_name, page_size=page_size, continuation_token=continuation_token)
        async with aclosing(pages):
            async for page in pages:
                return PagedReviewResult(
                    items=sorted(page.items, key=lambda review: review.created_at, reverse=True),
                    continuation_token=page.continuation_token,
                )

        return PagedReviewResult()

    async def find_latest(self, product_name: str) -> Review | None:
        latest: Review | None = None
        async for page in self.store.query(product_name, page_size=self.settings.scan_page_size):
            for review in page.items:
                if latest is None or review.created_at > latest.created_at:
                    latest = review
        return latest

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------
    async def submit(self, product_name: str, request: ReviewRequest) -> Review:
        """Add a review if the client has seen the newest existing one.

        Raises ReviewConflictError without writing when a review newer than
        ``request.last_seen_review_timestamp`` exists. A reused request id
        surfaces the store's DuplicateKeyError unchanged.
        """
        latest = await self.find_latest(product_name)

        if latest is not None and latest.created_at > request.last_seen_review_timestamp:
            logger.info(
                "Rejected stale review submission",
                product_name=product_name,
                latest_created_at=latest.created_at.isoformat(),
                last_seen=request.last_seen_review_timestamp.isoformat(),
            )
            raise ReviewConflictError(latest=latest)

        review = Review(
            partition_key=product_name,
            row_key=request.request_id if request.has_request_id else new_row_key(),
            text=request.text,
            created_at=utc_now(),
        )
        stored = await self.store.insert(review)

        logger.info("Review submitted", product_name=product_name, row_key=stored.row_key)
        return stored

    # ------------------------------------------------------------------
    # Archival
    # ------------------------------------------------------------------
    async def archive_old(self, product_name: str, as_of: datetime | None = None) -> int:
        """Move reviews older than the retention window to the archive partition.

        Returns how many reviews were moved. A review whose upsert or delete
        fails is logged, left uncounted, and the rest are still processed.
        """
        now = as_utc(as_of) if as_of else utc_now()
        threshold = years_before(now, self.settings.archive_after_years)
        archive_partition = self.settings.archive_partition_for(product_name)

        logger.info(
            "Archiving old reviews",
            product_name=product_name,
            threshold=threshold.isoformat(),
            archive_partition=archive_partition,
        )

        moved = 0
        async for page in self.store.query(product_name, page_size=self.settings.scan_page_size):
            for review in page.items:
                if review.created_at >= threshold:
                    continue

                try:
                    await self.store.upsert(review.relocated_to(archive_partition), mode=UpdateMode.MERGE)
                    await self.store.delete(review.partition_key, review.row_key, version_tag=review.version_tag)
                except EntityStoreError as exc:
                    logger.warning(
                        "Failed to archive review",
                        product_name=product_name,
                        row_key=review.row_key,
                        error=str(exc),
                    )
                    continue

                moved += 1

        logger.info("Archival complete", product_name=product_name, archived_count=moved)
        return moved
