"""Review service errors."""

from reviews.review.model import Review

NEWER_REVIEW_MESSAGE = "There is a newer review you haven't seen."


class ReviewConflictError(Exception):
    """A newer review exists than the one the client last saw.

    Recoverable: the client should refetch and resubmit. No write happened.
    """

    def __init__(self, message: str = NEWER_REVIEW_MESSAGE, latest: Review | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.latest = latest
