"""Integration tests for the Protean-backed entity store.

Runs the same store contract as the in-memory adapter against the reviews
domain's configured provider, plus the service flows on top of it.
"""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest
from reviews.review.errors import ReviewConflictError
from reviews.review.model import Review, ReviewRequest
from reviews.review.service import ReviewService
from reviews.store.port import (
    DuplicateKeyError,
    EntityNotFoundError,
    InvalidContinuationTokenError,
    UpdateMode,
    VersionMismatchError,
)
from reviews.store.protean_adapter import entity_key_for

pytestmark = pytest.mark.asyncio

CREATED = datetime(2025, 5, 1, tzinfo=UTC)


def _review(row_key, partition_key="Widget", text="Nice", created_at=CREATED):
    return Review(partition_key=partition_key, row_key=row_key, text=text, created_at=created_at)


async def _collect(pages):
    return [page async for page in pages]


async def test_entity_key_is_deterministic_and_unambiguous():
    assert entity_key_for("Widget", "a") == entity_key_for("Widget", "a")
    assert entity_key_for("Widget", "a") != entity_key_for("Widget_archive", "a")
    assert entity_key_for("a_b", "c") != entity_key_for("a", "b_c")


class TestProteanStoreContract:
    async def test_insert_round_trips(self, protean_store):
        stored = await protean_store.insert(_review("a"))

        pages = await _collect(protean_store.query("Widget"))

        assert pages[0].items == [stored]
        assert stored.version_tag is not None
        assert stored.created_at == CREATED

    async def test_duplicate_key_rejected(self, protean_store):
        await protean_store.insert(_review("a"))

        with pytest.raises(DuplicateKeyError):
            await protean_store.insert(_review("a", text="Again"))

    async def test_paging_by_row_key(self, protean_store):
        for row_key in ["c", "a", "e", "b", "d"]:
            await protean_store.insert(_review(row_key))
        await protean_store.insert(_review("a", partition_key="Gadget"))

        pages = await _collect(protean_store.query("Widget", page_size=2))

        assert [[r.row_key for r in page.items] for page in pages] == [["a", "b"], ["c", "d"], ["e"]]
        assert pages[-1].continuation_token is None

    async def test_resume_from_token(self, protean_store):
        for row_key in ["a", "b", "c"]:
            await protean_store.insert(_review(row_key))
        first = await anext(protean_store.query("Widget", page_size=2))

        pages = await _collect(protean_store.query("Widget", page_size=2, continuation_token=first.continuation_token))

        assert [r.row_key for r in pages[0].items] == ["c"]

    async def test_empty_partition_yields_one_empty_page(self, protean_store):
        pages = await _collect(protean_store.query("Nothing"))
        assert len(pages) == 1
        assert pages[0].items == []

    async def test_malformed_token(self, protean_store):
        with pytest.raises(InvalidContinuationTokenError):
            await _collect(protean_store.query("Widget", continuation_token="%%%"))

    async def test_merge_upsert_restamps(self, protean_store):
        original = await protean_store.insert(_review("a"))

        updated = await protean_store.upsert(_review("a", text="Changed"), mode=UpdateMode.MERGE)

        assert updated.text == "Changed"
        assert updated.version_tag != original.version_tag

    async def test_delete_checks_version(self, protean_store):
        stored = await protean_store.insert(_review("a"))

        with pytest.raises(VersionMismatchError):
            await protean_store.delete("Widget", "a", version_tag="stale")
        await protean_store.delete("Widget", "a", version_tag=stored.version_tag)

        with pytest.raises(EntityNotFoundError):
            await protean_store.delete("Widget", "a")


class TestEventLoop:
    async def test_other_tasks_run_while_a_write_is_in_flight(self, protean_store):
        ticks = []

        async def tick():
            ticks.append("tick")

        pending = asyncio.create_task(tick())
        await protean_store.insert(_review("a"))

        assert ticks == ["tick"]
        await pending

    async def test_other_tasks_run_while_a_page_is_fetched(self, protean_store):
        ticks = []

        async def tick():
            ticks.append("tick")

        pending = asyncio.create_task(tick())
        await anext(protean_store.query("Widget"))

        assert ticks == ["tick"]
        await pending


class TestServiceOverProtean:
    async def test_submit_then_conflict(self, protean_store, settings):
        service = ReviewService(protean_store, settings)
        first = await service.submit("Widget", ReviewRequest("First", datetime(2000, 1, 1, tzinfo=UTC)))

        with pytest.raises(ReviewConflictError):
            await service.submit("Widget", ReviewRequest("Second", first.created_at - timedelta(seconds=1)))

    async def test_archive_moves_old_reviews(self, protean_store, settings):
        as_of = datetime(2026, 6, 15, tzinfo=UTC)
        await protean_store.insert(_review("old", created_at=as_of - timedelta(days=3 * 365)))
        await protean_store.insert(_review("recent", created_at=as_of - timedelta(days=60)))
        service = ReviewService(protean_store, settings)

        assert await service.archive_old("Widget", as_of=as_of) == 1

        assert [r.row_key for r in await service.list_all("Widget")] == ["recent"]
        assert [r.row_key for r in await service.list_all("Widget_archive")] == ["old"]
