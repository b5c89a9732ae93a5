from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio

from restbind import HttpxTransport
from restbind.api.app import create_app
from restbind.api.dependencies import get_store
from restbind.api.store import InMemoryResourceStore


@pytest.fixture
def store() -> InMemoryResourceStore:
    store = InMemoryResourceStore()
    store.seed(
        {
            "bikes": [
                {"model": "Slash", "brand": "trek"},
                {"model": "Remedy", "brand": "trek"},
                {"model": "Reign", "brand": "giant"},
            ]
        }
    )
    return store


@pytest_asyncio.fixture
async def http_transport(store: InMemoryResourceStore) -> AsyncIterator[HttpxTransport]:
    """An ``HttpxTransport`` talking to the demo API in-process."""
    app = create_app()

    async def _override() -> AsyncIterator[InMemoryResourceStore]:
        yield store

    app.dependency_overrides[get_store] = _override
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://restbind.test")
    async with HttpxTransport(client) as transport:
        yield transport
