"""Pydantic request/response schemas for the Reviews API.

These are separate from the service dataclasses (anti-corruption pattern).
The API layer is the external contract: camelCase on the wire, snake_case
accepted on input.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from reviews.review.model import PagedReviewResult, Review, ReviewRequest


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class SubmitReviewRequest(_CamelModel):
    text: str = Field(min_length=1, max_length=500)
    last_seen_review_timestamp: datetime
    request_id: str | None = Field(default=None, max_length=255)

    def to_request(self) -> ReviewRequest:
        return ReviewRequest(
            text=self.text,
            last_seen_review_timestamp=self.last_seen_review_timestamp,
            request_id=self.request_id,
        )


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ReviewResponse(_CamelModel):
    partition_key: str
    row_key: str
    text: str
    created_at: datetime
    version_tag: str | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_review(cls, review: Review) -> ReviewResponse:
        return cls(
            partition_key=review.partition_key,
            row_key=review.row_key,
            text=review.text,
            created_at=review.created_at,
            version_tag=review.version_tag,
            updated_at=review.updated_at,
        )


class PagedReviewResponse(_CamelModel):
    items: list[ReviewResponse] = Field(default_factory=list)
    continuation_token: str | None = None

    @classmethod
    def from_result(cls, result: PagedReviewResult) -> PagedReviewResponse:
        return cls(
            items=[ReviewResponse.from_review(review) for review in result.items],
            continuation_token=result.continuation_token,
        )


class ArchiveResponse(BaseModel):
    archived: int


class ErrorResponse(BaseModel):
    error: str
