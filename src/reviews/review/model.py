"""Review data model.

Reviews are write-once: created by a successful submission, never updated in
place, only relocated (copy + delete) into the archive partition.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def years_before(value: datetime, years: int) -> datetime:
    """Calendar subtraction; Feb 29 falls back to Feb 28 in non-leap years."""
    try:
        return value.replace(year=value.year - years)
    except ValueError:
        return value.replace(year=value.year - years, day=28)


@dataclass(frozen=True)
class Review:
    """A single review stored in one product's partition.

    ``version_tag`` and ``updated_at`` belong to the store: every write stamps
    new values. The service only copies them around.
    """

    partition_key: str  # Product name, or "<product>_archive"
    row_key: str  # Unique within the partition
    text: str
    created_at: datetime  # Assigned by the service, UTC
    version_tag: str | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        # Stores hand back whatever their backend kept; normalize once here
        object.__setattr__(self, "created_at", as_utc(self.created_at))
        if self.updated_at is not None:
            object.__setattr__(self, "updated_at", as_utc(self.updated_at))

    @property
    def key(self) -> tuple[str, str]:
        return (self.partition_key, self.row_key)

    def relocated_to(self, partition_key: str) -> "Review":
        """Copy of this review under another partition, markers untouched."""
        return replace(self, partition_key=partition_key)


@dataclass(frozen=True)
class ReviewRequest:
    """Input for a submission."""

    text: str
    last_seen_review_timestamp: datetime  # Newest created_at the client had seen
    request_id: str | None = None  # Idempotency key, becomes the row key

    def __post_init__(self):
        object.__setattr__(self, "last_seen_review_timestamp", as_utc(self.last_seen_review_timestamp))

    @property
    def has_request_id(self) -> bool:
        return bool(self.request_id and self.request_id.strip())


@dataclass(frozen=True)
class PagedReviewResult:
    """One page of reviews, newest first within the page."""

    items: list[Review] = field(default_factory=list)
    continuation_token: str | None = None
