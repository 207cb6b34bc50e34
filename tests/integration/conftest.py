"""Shared fixtures for integration tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from dotenv import load_dotenv

from pyenlighten import EnlightenClient, System
from pyenlighten.config import CloudConfig, GatewayConfig
from pyenlighten.gateway import GatewayClient

# Load .env file before running tests
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


@pytest.fixture(scope="function")
async def client() -> AsyncGenerator[EnlightenClient, None]:
    """Create a client from saved tokens.

    Only the token pair is used here: a one-time authorization code would be
    burnt by the first test that exchanged it.
    """
    config = CloudConfig.from_env()
    config.code = None
    try:
        config.validate()
    except ValueError as err:
        pytest.skip(f"Enlighten credentials not configured: {err}")

    async with await config.create_client() as client:
        yield client


@pytest.fixture(scope="function")
async def system(client: EnlightenClient) -> System:
    """Load first system for testing."""
    systems = await client.list_systems()
    if not systems:
        pytest.skip("No systems found")
    return systems[0]


@pytest.fixture(scope="function")
async def gateway() -> AsyncGenerator[GatewayClient, None]:
    config = GatewayConfig.from_env()
    try:
        config.validate()
    except ValueError as err:
        pytest.skip(f"Gateway not configured: {err}")

    async with config.create_client() as gateway:
        yield gateway
