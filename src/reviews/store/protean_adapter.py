"""Protean-backed entity store.

Stores reviews as the StoredReview projection in the reviews domain, so the
backing database is whatever Protean provider the domain is configured with
(the in-process memory provider unless PROTEAN_ENV selects another overlay).

Projections carry a single identifier, so the (partition_key, row_key) pair
is folded into a deterministic uuid5 ``entity_key``. Queries filter on the
partition and page by row key, which keeps continuation tokens stable while
entities are deleted mid-iteration (archival does exactly that).

Repository calls block, so each operation runs in a worker thread
(``asyncio.to_thread``) that pushes the domain context itself.
"""

import asyncio
import json
from uuid import NAMESPACE_URL, uuid4, uuid5

import structlog
from protean.domain import Domain
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String, Text

from reviews.domain import reviews
from reviews.review.model import Review, utc_now
from reviews.store.port import (
    ANY_VERSION,
    DuplicateKeyError,
    EntityNotFoundError,
    EntityStore,
    Page,
    StoreUnavailableError,
    UpdateMode,
    VersionMismatchError,
    decode_continuation_token,
    encode_continuation_token,
)

logger = structlog.get_logger(__name__)

DEFAULT_MAX_PAGE_SIZE = 1000


@reviews.projection
class StoredReview:
    entity_key = Identifier(identifier=True, required=True)
    partition_key = String(required=True, max_length=255)
    row_key = String(required=True, max_length=255)
    text = Text(required=True)
    created_at = DateTime(required=True)
    version_tag = String(max_length=32)
    updated_at = DateTime()


def entity_key_for(partition_key: str, row_key: str) -> str:
    return str(uuid5(NAMESPACE_URL, json.dumps([partition_key, row_key])))


def _to_review(record: StoredReview) -> Review:
    return Review(
        partition_key=record.partition_key,
        row_key=record.row_key,
        text=record.text,
        created_at=record.created_at,
        version_tag=record.version_tag,
        updated_at=record.updated_at,
    )


class ProteanEntityStore(EntityStore):
    """EntityStore over a Protean projection repository."""

    def __init__(self, domain: Domain = reviews, max_page_size: int = DEFAULT_MAX_PAGE_SIZE) -> None:
        self.domain = domain
        self.max_page_size = max_page_size

    def _repo(self):
        return self.domain.repository_for(StoredReview)

    def _find(self, repo, partition_key: str, row_key: str) -> StoredReview | None:
        try:
            return repo.get(entity_key_for(partition_key, row_key))
        except ObjectNotFoundError:
            return None

    def _fetch(self, partition_key: str, after: str | None, limit: int) -> list[StoredReview]:
        try:
            with self.domain.domain_context():
                queryset = self._repo()._dao.query.filter(partition_key=partition_key)
                if after is not None:
                    queryset = queryset.filter(row_key__gt=after)
                # One extra row tells us whether another page follows
                return list(queryset.order_by("row_key").limit(limit + 1).all().items)
        except (ConnectionError, TimeoutError) as exc:
            raise StoreUnavailableError(str(exc)) from exc

    async def query(
        self,
        partition_key: str,
        page_size: int | None = None,
        continuation_token: str | None = None,
    ):
        limit = min(page_size or self.max_page_size, self.max_page_size)
        after = decode_continuation_token(continuation_token) if continuation_token else None

        while True:
            records = await asyncio.to_thread(self._fetch, partition_key, after, limit)
            chunk = records[:limit]
            token = encode_continuation_token(chunk[-1].row_key) if len(records) > limit else None
            yield Page(items=[_to_review(record) for record in chunk], continuation_token=token)
            if token is None:
                return
            after = chunk[-1].row_key

    def _do_insert(self, review: Review) -> Review:
        try:
            with self.domain.domain_context():
                repo = self._repo()
                if self._find(repo, review.partition_key, review.row_key) is not None:
                    raise DuplicateKeyError(review.partition_key, review.row_key)
                record = StoredReview(
                    entity_key=entity_key_for(review.partition_key, review.row_key),
                    partition_key=review.partition_key,
                    row_key=review.row_key,
                    text=review.text,
                    created_at=review.created_at,
                    version_tag=uuid4().hex,
                    updated_at=utc_now(),
                )
                repo.add(record)
        except (ConnectionError, TimeoutError) as exc:
            raise StoreUnavailableError(str(exc)) from exc

        logger.debug("Inserted entity", partition_key=review.partition_key, row_key=review.row_key)
        return _to_review(record)

    def _do_upsert(self, review: Review, mode: UpdateMode) -> Review:
        try:
            with self.domain.domain_context():
                repo = self._repo()
                record = self._find(repo, review.partition_key, review.row_key)
                if record is None:
                    record = StoredReview(
                        entity_key=entity_key_for(review.partition_key, review.row_key),
                        partition_key=review.partition_key,
                        row_key=review.row_key,
                        text=review.text,
                        created_at=review.created_at,
                    )
                elif mode == UpdateMode.MERGE:
                    if review.text is not None:
                        record.text = review.text
                    if review.created_at is not None:
                        record.created_at = review.created_at
                else:
                    record.text = review.text
                    record.created_at = review.created_at
                record.version_tag = uuid4().hex
                record.updated_at = utc_now()
                repo.add(record)
        except (ConnectionError, TimeoutError) as exc:
            raise StoreUnavailableError(str(exc)) from exc

        return _to_review(record)

    def _do_delete(self, partition_key: str, row_key: str, version_tag: str | None) -> None:
        try:
            with self.domain.domain_context():
                repo = self._repo()
                record = self._find(repo, partition_key, row_key)
                if record is None:
                    raise EntityNotFoundError(partition_key, row_key)
                if version_tag not in (None, ANY_VERSION) and version_tag != record.version_tag:
                    raise VersionMismatchError(partition_key, row_key, version_tag, record.version_tag)
                repo._dao.delete(record)
        except (ConnectionError, TimeoutError) as exc:
            raise StoreUnavailableError(str(exc)) from exc

    async def insert(self, review: Review) -> Review:
        return await asyncio.to_thread(self._do_insert, review)

    async def upsert(self, review: Review, mode: UpdateMode = UpdateMode.MERGE) -> Review:
        return await asyncio.to_thread(self._do_upsert, review, mode)

    async def delete(self, partition_key: str, row_key: str, version_tag: str | None = None) -> None:
        await asyncio.to_thread(self._do_delete, partition_key, row_key, version_tag)
