"""Settings for the Reviews service.

All values come from environment variables so the same build runs in
development, test, and production. PROTEAN_ENV still selects Protean's own
config overlay; these settings only cover the review service itself.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache

STORE_BACKENDS = ("memory", "protean")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class ReviewSettings:
    """Review service settings.

    Usage:
        from reviews.config import get_settings
        settings = get_settings()
        print(settings.default_page_size)
    """

    store_backend: str = field(default_factory=lambda: os.getenv("REVIEWS_STORE", "memory").lower())

    # Page size used by GET /reviews/{product} when the client sends none
    default_page_size: int = field(default_factory=lambda: _env_int("REVIEWS_DEFAULT_PAGE_SIZE", 20))

    # Page size for full-partition scans (submission check, archival, export)
    scan_page_size: int = field(default_factory=lambda: _env_int("REVIEWS_SCAN_PAGE_SIZE", 1000))

    archive_after_years: int = field(default_factory=lambda: _env_int("REVIEWS_ARCHIVE_AFTER_YEARS", 1))
    archive_suffix: str = field(default_factory=lambda: os.getenv("REVIEWS_ARCHIVE_SUFFIX", "_archive"))

    def __post_init__(self):
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(f"REVIEWS_STORE must be one of {STORE_BACKENDS}, got {self.store_backend!r}")
        if self.scan_page_size <= 0:
            raise ValueError("REVIEWS_SCAN_PAGE_SIZE must be positive")
        if self.archive_after_years <= 0:
            raise ValueError("REVIEWS_ARCHIVE_AFTER_YEARS must be positive")

    def archive_partition_for(self, product_name: str) -> str:
        return f"{product_name}{self.archive_suffix}"


@lru_cache(maxsize=1)
def get_settings() -> ReviewSettings:
    """Return the process-wide settings instance."""
    return ReviewSettings()
