from __future__ import annotations

from collections.abc import AsyncIterator

from restbind.api.store import InMemoryResourceStore

_store: InMemoryResourceStore | None = None


async def get_store() -> AsyncIterator[InMemoryResourceStore]:
    """Yield the process-wide store, creating it lazily on first call."""
    global _store  # noqa: PLW0603
    if _store is None:
        _store = InMemoryResourceStore()
    yield _store


def set_store(store: InMemoryResourceStore | None) -> None:
    global _store  # noqa: PLW0603
    _store = store
