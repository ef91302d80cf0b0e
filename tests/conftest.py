"""Test configuration and fixtures."""

import os

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer

from tests.helpers import FakeRegistry


async def _serve(registry: FakeRegistry):
    server = TestServer(registry.make_app())
    await server.start_server()
    registry.server = server
    return server


@pytest_asyncio.fixture
async def fake_registry():
    """Serve an unauthenticated fake registry."""
    registry = FakeRegistry()
    server = await _serve(registry)
    yield registry
    await server.close()


@pytest_asyncio.fixture
async def token_registry():
    """Serve a fake registry that demands a bearer token and paginates tags."""
    registry = FakeRegistry(page_size=2, require_token=True)
    server = await _serve(registry)
    yield registry
    await server.close()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest markers and settings."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test requiring registry"
    )
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless a real registry is reachable."""
    skip_integration = pytest.mark.skip(reason="Registry not available")

    for item in items:
        if (
            "integration" in item.keywords
            and os.getenv("REGISTRY_AVAILABLE", "false").lower() != "true"
        ):
            item.add_marker(skip_integration)
