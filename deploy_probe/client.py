"""HTTP session management for probing a target."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import aiohttp

from deploy_probe.models.target import Target


@asynccontextmanager
async def open_session(target: Target) -> AsyncGenerator[aiohttp.ClientSession, None]:
    """Create a client session with managed lifecycle for the target."""
    headers = {
        "Accept": "application/json",
        "User-Agent": target.user_agent,
    }
    async with aiohttp.ClientSession(headers=headers) as session:
        yield session
