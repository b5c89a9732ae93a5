"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest

from restbind import InMemoryTransport, ResourceType, define_resource

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def transport() -> InMemoryTransport:
    """Return a transport answering the bike listings used across tests."""
    backend = InMemoryTransport()
    backend.when("GET", "/api/bikes?brand=trek", [{"model": "Slash"}, {"model": "Remedy"}])
    backend.when("GET", "/api/bikes?brand=giant", [{"model": "Reign"}])
    return backend


@pytest.fixture
def bike(transport: InMemoryTransport) -> ResourceType:
    return define_resource("/api/bikes", transport)
