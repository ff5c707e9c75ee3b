"""Entity store factory.

Provides get_store() / set_store() to swap implementations:
- InMemoryEntityStore for development and testing (default)
- ProteanEntityStore when REVIEWS_STORE=protean
"""

from reviews.config import ReviewSettings, get_settings
from reviews.store.memory_adapter import InMemoryEntityStore
from reviews.store.port import EntityStore

_current_store: EntityStore | None = None


def build_store(settings: ReviewSettings) -> EntityStore:
    """Construct the store selected by settings."""
    if settings.store_backend == "protean":
        from reviews.store.protean_adapter import ProteanEntityStore

        return ProteanEntityStore()
    return InMemoryEntityStore()


def get_store() -> EntityStore:
    """Return the current entity store, building it from settings on first use."""
    global _current_store
    if _current_store is None:
        _current_store = build_store(get_settings())
    return _current_store


def set_store(store: EntityStore) -> None:
    """Override the active entity store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_store() -> None:
    """Reset to the settings-selected store."""
    global _current_store
    _current_store = None
