"""Entity store port (abstract interface).

Defines the contract every partitioned table store adapter must implement.
The review service only talks to this interface, so it runs unchanged against
the in-memory store (dev/test) or the Protean-backed store.

Each call is atomic for a single entity only. Nothing spans calls.
"""

import base64
import binascii
import json
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from enum import Enum

from reviews.review.model import Review

# Any-version marker accepted by delete()
ANY_VERSION = "*"


class UpdateMode(Enum):
    MERGE = "Merge"
    REPLACE = "Replace"


@dataclass(frozen=True)
class Page:
    """One bounded slice of a partition query."""

    items: list[Review] = field(default_factory=list)
    continuation_token: str | None = None


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
class EntityStoreError(Exception):
    """Base class for all store failures."""


class DuplicateKeyError(EntityStoreError):
    def __init__(self, partition_key: str, row_key: str) -> None:
        super().__init__(f"Entity {row_key!r} already exists in partition {partition_key!r}")
        self.partition_key = partition_key
        self.row_key = row_key


class EntityNotFoundError(EntityStoreError):
    def __init__(self, partition_key: str, row_key: str) -> None:
        super().__init__(f"Entity {row_key!r} not found in partition {partition_key!r}")
        self.partition_key = partition_key
        self.row_key = row_key


class VersionMismatchError(EntityStoreError):
    def __init__(self, partition_key: str, row_key: str, expected: str, actual: str | None) -> None:
        super().__init__(
            f"Entity {row_key!r} in partition {partition_key!r} has version {actual!r}, expected {expected!r}"
        )
        self.partition_key = partition_key
        self.row_key = row_key
        self.expected = expected
        self.actual = actual


class StoreUnavailableError(EntityStoreError):
    """Transient I/O failure talking to the backing store."""


class InvalidContinuationTokenError(EntityStoreError):
    pass


# ---------------------------------------------------------------------------
# Continuation tokens
# ---------------------------------------------------------------------------
def encode_continuation_token(last_row_key: str) -> str:
    """Opaque token resuming iteration after ``last_row_key``."""
    payload = json.dumps({"after": last_row_key}).encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii")


def decode_continuation_token(token: str) -> str:
    try:
        payload = json.loads(base64.urlsafe_b64decode(token.encode("ascii")))
        after = payload["after"]
    except (ValueError, TypeError, KeyError, UnicodeError, binascii.Error) as exc:
        raise InvalidContinuationTokenError(f"Malformed continuation token: {token!r}") from exc
    if not isinstance(after, str):
        raise InvalidContinuationTokenError(f"Malformed continuation token: {token!r}")
    return after


class EntityStore(ABC):
    """Abstract partitioned entity store."""

    @abstractmethod
    def query(
        self,
        partition_key: str,
        page_size: int | None = None,
        continuation_token: str | None = None,
    ) -> AsyncGenerator[Page, None]:
        """Lazily yield pages of the partition, in store order.

        The first page is always yielded, possibly empty. A page carries a
        continuation token only when more entities follow it.
        """
        ...

    @abstractmethod
    async def insert(self, review: Review) -> Review:
        """Insert a new entity; raise DuplicateKeyError if the key exists."""
        ...

    @abstractmethod
    async def upsert(self, review: Review, mode: UpdateMode = UpdateMode.MERGE) -> Review:
        """Create or update the entity at the review's key."""
        ...

    @abstractmethod
    async def delete(self, partition_key: str, row_key: str, version_tag: str | None = None) -> None:
        """Delete an entity, conditionally on its version tag when one is given."""
        ...
