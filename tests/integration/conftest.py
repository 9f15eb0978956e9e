"""Fixtures for integration tests against a mocked service."""

from collections.abc import AsyncGenerator

import aiohttp
import pytest

from deploy_probe.client import open_session
from deploy_probe.models.target import Target

BASE_URL = "http://service.test"


@pytest.fixture
def target() -> Target:
    """Create test target."""
    return Target(base_url=BASE_URL, timeout=2.0, burst_concurrency=5)


@pytest.fixture
async def session(target: Target) -> AsyncGenerator[aiohttp.ClientSession, None]:
    """Create HTTP session with managed lifecycle."""
    async with open_session(target) as client_session:
        yield client_session
