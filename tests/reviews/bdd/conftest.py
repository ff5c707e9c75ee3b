"""Shared BDD fixtures and step definitions for the Reviews domain."""

import asyncio
from datetime import datetime

import pytest
from pytest_bdd import given, parsers, then
from reviews.review.model import Review
from reviews.store.port import StoreUnavailableError


@pytest.fixture()
def outcome():
    """Container for the results and errors of When steps."""
    return {"results": [], "errors": []}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{product_name}" has no reviews'))
def product_has_no_reviews(store, product_name):
    assert store.partition(product_name) == []


@given(parsers.cfparse('product "{product_name}" has a review created at "{created_at}"'))
def product_has_review(store, product_name, created_at):
    row_key = f"r{len(store.partition(product_name)):03d}"
    review = Review(
        partition_key=product_name,
        row_key=row_key,
        text=f"Seeded {row_key}",
        created_at=datetime.fromisoformat(created_at),
    )
    asyncio.run(store.insert(review))


@given(parsers.cfparse("the store fails the next {operation}"))
def store_fails_next(store, operation):
    store.fail_next(operation, StoreUnavailableError(f"{operation} timed out"))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(
    parsers.re(r'product "(?P<product_name>[^"]+)" has (?P<count>\d+) reviews?'),
    converters={"count": int},
)
def product_has_n_reviews(store, product_name, count):
    assert len(store.partition(product_name)) == count
