"""Pytest configuration and fixtures for pyenlighten tests."""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any

import pytest
from aioresponses import aioresponses

from pyenlighten import EnlightenClient
from pyenlighten.models import SystemResponse

BASE_URL = "https://api.enphaseenergy.com"
API_KEY = "test-api-key"
CLIENT_ID = "test-client-id"
CLIENT_SECRET = "test-client-secret"


# Load sample API responses
SAMPLES_DIR = Path(__file__).parent / "samples"


def load_sample(filename: str) -> Any:
    """Load a sample JSON response file."""
    file_path = SAMPLES_DIR / filename
    with open(file_path) as f:
        return json.load(f)


def load_text_sample(filename: str) -> str:
    """Load a sample response file as text (XML payloads)."""
    return (SAMPLES_DIR / filename).read_text()


@pytest.fixture
def token_response() -> dict[str, Any]:
    """Sample token endpoint response."""
    result: dict[str, Any] = load_sample("token.json")
    return result


@pytest.fixture
def systems_response() -> dict[str, Any]:
    """Sample systems listing."""
    result: dict[str, Any] = load_sample("systems.json")
    return result


@pytest.fixture
def summary_response() -> dict[str, Any]:
    """Sample system summary."""
    result: dict[str, Any] = load_sample("summary.json")
    return result


@pytest.fixture
def energy_lifetime_response() -> dict[str, Any]:
    """Sample lifetime production response."""
    result: dict[str, Any] = load_sample("energy_lifetime.json")
    return result


@pytest.fixture
def production_micro_response() -> dict[str, Any]:
    """Sample microinverter telemetry response."""
    result: dict[str, Any] = load_sample("production_micro.json")
    return result


@pytest.fixture
def home_response() -> dict[str, Any]:
    """Sample gateway home.json."""
    result: dict[str, Any] = load_sample("home.json")
    return result


@pytest.fixture
def info_xml() -> str:
    """Sample gateway info.xml."""
    return load_text_sample("info.xml")


@pytest.fixture
def inventory_response() -> list[dict[str, Any]]:
    """Sample gateway inventory.json (tagged sections)."""
    result: list[dict[str, Any]] = load_sample("inventory.json")
    return result


@pytest.fixture
def inverters_response() -> list[dict[str, Any]]:
    """Sample gateway per-inverter readings."""
    result: list[dict[str, Any]] = load_sample("inverters.json")
    return result


@pytest.fixture
def production_response() -> dict[str, Any]:
    """Sample gateway production.json?details=1."""
    result: dict[str, Any] = load_sample("production.json")
    return result


@pytest.fixture
def system_response(systems_response: dict[str, Any]) -> SystemResponse:
    """First system of the sample listing, decoded."""
    return SystemResponse.model_validate(systems_response["systems"][0])


@pytest.fixture
def mocked_api() -> Generator[aioresponses, None, None]:
    """Create aioresponses mock for HTTP requests.

    This fixture provides a context manager for mocking aiohttp requests
    using the aioresponses library.
    """
    with aioresponses() as m:
        yield m


@pytest.fixture
async def client() -> AsyncGenerator[EnlightenClient, None]:
    """Client holding the token pair ("access-0", "refresh-0")."""
    async with EnlightenClient.preauthenticated(
        API_KEY, CLIENT_ID, CLIENT_SECRET, "access-0", "refresh-0", base_url=BASE_URL
    ) as client:
        yield client
