"""Reviews bounded context: product reviews backed by a partitioned table store.

Handles paginated retrieval, last-seen-timestamp conflict detection on
submission, and time-based archival of old reviews into a shadow partition.
Persistence goes through the EntityStore port; the Protean domain hosts the
StoredReview projection used by the Protean-backed store adapter.
"""

import structlog
from protean.domain import Domain

reviews = Domain(name="reviews")

logger = structlog.get_logger(__name__)
