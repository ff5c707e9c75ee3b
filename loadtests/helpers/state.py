"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state; nothing is shared across users.
"""

from dataclasses import dataclass, field


@dataclass
class ReviewerState:
    """Tracks what a simulated reviewer has read and written."""

    product_name: str | None = None
    last_seen: str | None = None
    submitted_row_keys: list[str] = field(default_factory=list)
    conflicts: int = 0


@dataclass
class BrowserState:
    """Tracks the continuation token of a paging reader."""

    product_name: str | None = None
    continuation_token: str | None = None
    pages_read: int = 0
