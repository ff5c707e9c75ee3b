"""In-memory entity store for development and testing.

Simulates a partitioned table store without any external calls:
- Pages are ordered by row key and computed lazily against current state,
  so concurrent writers are visible between pages, as with a real store.
- Every operation is recorded in ``calls``.
- Failures can be injected per operation with ``fail_next()``, which is how
  tests exercise unavailability and partial archival failures.
"""

import asyncio
from dataclasses import replace
from uuid import uuid4

from reviews.review.model import Review, utc_now
from reviews.store.port import (
    ANY_VERSION,
    DuplicateKeyError,
    EntityNotFoundError,
    EntityStore,
    Page,
    UpdateMode,
    VersionMismatchError,
    decode_continuation_token,
    encode_continuation_token,
)

DEFAULT_MAX_PAGE_SIZE = 1000


class InMemoryEntityStore(EntityStore):
    """Dict-backed entity store keyed by (partition_key, row_key)."""

    def __init__(self, max_page_size: int = DEFAULT_MAX_PAGE_SIZE) -> None:
        self.max_page_size = max_page_size
        self.calls: list[dict] = []
        self._entities: dict[tuple[str, str], Review] = {}
        self._failures: dict[str, list[Exception]] = {}

    def fail_next(self, operation: str, error: Exception, times: int = 1) -> None:
        """Make the next ``times`` calls to ``operation`` raise ``error``."""
        self._failures.setdefault(operation, []).extend([error] * times)

    def reset(self) -> None:
        self.calls.clear()
        self._entities.clear()
        self._failures.clear()

    def partition(self, partition_key: str) -> list[Review]:
        """Snapshot of a partition in row-key order (test helper)."""
        return [self._entities[key] for key in sorted(self._entities) if key[0] == partition_key]

    def _check_failure(self, operation: str) -> None:
        pending = self._failures.get(operation)
        if pending:
            raise pending.pop(0)

    def _stamp(self, review: Review) -> Review:
        return replace(review, version_tag=uuid4().hex, updated_at=utc_now())

    async def query(
        self,
        partition_key: str,
        page_size: int | None = None,
        continuation_token: str | None = None,
    ):
        self.calls.append(
            {
                "method": "query",
                "partition_key": partition_key,
                "page_size": page_size,
                "continuation_token": continuation_token,
            }
        )
        limit = min(page_size or self.max_page_size, self.max_page_size)
        after = decode_continuation_token(continuation_token) if continuation_token else None

        while True:
            self._check_failure("query")
            # Simulated round-trip: let other tasks run between pages
            await asyncio.sleep(0)
            row_keys = sorted(
                row_key for (pk, row_key) in self._entities if pk == partition_key and (after is None or row_key > after)
            )
            chunk = row_keys[:limit]
            token = encode_continuation_token(chunk[-1]) if len(row_keys) > limit else None
            yield Page(items=[self._entities[(partition_key, row_key)] for row_key in chunk], continuation_token=token)
            if token is None:
                return
            after = chunk[-1]

    async def insert(self, review: Review) -> Review:
        self.calls.append({"method": "insert", "partition_key": review.partition_key, "row_key": review.row_key})
        await asyncio.sleep(0)
        self._check_failure("insert")
        if review.key in self._entities:
            raise DuplicateKeyError(review.partition_key, review.row_key)
        stored = self._stamp(review)
        self._entities[review.key] = stored
        return stored

    async def upsert(self, review: Review, mode: UpdateMode = UpdateMode.MERGE) -> Review:
        self.calls.append(
            {"method": "upsert", "partition_key": review.partition_key, "row_key": review.row_key, "mode": mode}
        )
        await asyncio.sleep(0)
        self._check_failure("upsert")
        existing = self._entities.get(review.key)
        if existing is not None and mode == UpdateMode.MERGE:
            merged = replace(
                existing,
                text=review.text if review.text is not None else existing.text,
                created_at=review.created_at if review.created_at is not None else existing.created_at,
            )
        else:
            merged = review
        stored = self._stamp(merged)
        self._entities[review.key] = stored
        return stored

    async def delete(self, partition_key: str, row_key: str, version_tag: str | None = None) -> None:
        self.calls.append(
            {"method": "delete", "partition_key": partition_key, "row_key": row_key, "version_tag": version_tag}
        )
        await asyncio.sleep(0)
        self._check_failure("delete")
        existing = self._entities.get((partition_key, row_key))
        if existing is None:
            raise EntityNotFoundError(partition_key, row_key)
        if version_tag not in (None, ANY_VERSION) and version_tag != existing.version_tag:
            raise VersionMismatchError(partition_key, row_key, version_tag, existing.version_tag)
        del self._entities[(partition_key, row_key)]
