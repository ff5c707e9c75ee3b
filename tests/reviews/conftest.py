import pytest
from reviews.config import ReviewSettings
from reviews.review.model import Review
from reviews.review.service import ReviewService
from reviews.store.memory_adapter import InMemoryEntityStore


@pytest.fixture()
def settings():
    return ReviewSettings(
        store_backend="memory",
        default_page_size=20,
        scan_page_size=1000,
        archive_after_years=1,
        archive_suffix="_archive",
    )


@pytest.fixture()
def store():
    return InMemoryEntityStore()


@pytest.fixture()
def service(store, settings):
    return ReviewService(store, settings)


@pytest.fixture()
def seed(store):
    """Insert reviews into a partition and clear the call log afterwards.

    Row keys are assigned in argument order (r000, r001, ...), independent of
    created_at, so store order and age order can be made to differ.
    """

    async def _seed(product_name, *created_ats):
        stored = []
        for index, created_at in enumerate(created_ats):
            review = Review(
                partition_key=product_name,
                row_key=f"r{index:03d}",
                text=f"Review {index}",
                created_at=created_at,
            )
            stored.append(await store.insert(review))
        store.calls.clear()
        return stored

    return _seed
