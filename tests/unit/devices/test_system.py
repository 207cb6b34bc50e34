"""Unit tests for System queries."""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime
from typing import Any

import pytest
from aioresponses import CallbackResult, aioresponses

from pyenlighten import EnlightenClient, System
from pyenlighten.exceptions import EnlightenAPIError, InvalidGranularityError
from pyenlighten.models import Granularity, SystemResponse

BASE_URL = "https://api.enphaseenergy.com"
API_KEY = "test-api-key"
SYSTEM_ID = 698905626

SUMMARY_URL = f"{BASE_URL}/api/v4/systems/{SYSTEM_ID}/summary?key={API_KEY}&size=100"
LIFETIME_URL = f"{BASE_URL}/api/v4/systems/{SYSTEM_ID}/energy_lifetime?key={API_KEY}"
MICRO_URL = f"{BASE_URL}/api/v4/systems/{SYSTEM_ID}/telemetry/production_micro?key={API_KEY}"
REFRESH_URL = f"{BASE_URL}/oauth/token?grant_type=refresh_token&refresh_token=refresh-0"


@pytest.fixture
def system(client: EnlightenClient, system_response: SystemResponse) -> System:
    return System.from_response(client, system_response)


class TestSystemAttributes:
    def test_from_response(self, system: System) -> None:
        assert system.system_id == SYSTEM_ID
        assert system.public_name == "Residential System"
        assert system.timezone == "America/Los_Angeles"
        assert system.interconnect_date == date(2020, 8, 6)
        assert system.other_references == ["Installer-4521"]
        assert system.system_size == 7.6
        assert system.operational_at == datetime(2020, 8, 6, tzinfo=UTC)

    def test_repr(self, system: System) -> None:
        assert repr(system) == "System(system_id=698905626, name='Main House', status='normal')"


class TestSummary:
    @pytest.mark.asyncio
    async def test_get_summary(
        self,
        system: System,
        mocked_api: aioresponses,
        summary_response: dict[str, Any],
    ) -> None:
        mocked_api.get(SUMMARY_URL, payload=summary_response)

        summary = await system.get_summary()

        assert summary.current_power == 3846
        assert summary.modules == 20
        assert summary.summary_date == date(2023, 9, 1)
        assert summary.last_report_at == datetime.fromtimestamp(1693545600, tz=UTC)

    @pytest.mark.asyncio
    async def test_get_summary_error(self, system: System, mocked_api: aioresponses) -> None:
        mocked_api.get(SUMMARY_URL, status=404)

        with pytest.raises(EnlightenAPIError) as exc_info:
            await system.get_summary()

        assert exc_info.value.status == 404


class TestLifetimeProduction:
    @pytest.mark.asyncio
    async def test_dates_follow_list_position(
        self,
        system: System,
        mocked_api: aioresponses,
        energy_lifetime_response: dict[str, Any],
    ) -> None:
        """Entry i is dated start_date + i days at midnight UTC."""
        mocked_api.get(LIFETIME_URL, payload=energy_lifetime_response)

        production = await system.get_lifetime_production()

        assert production == [
            (datetime(2022, 1, 1, tzinfo=UTC), 10),
            (datetime(2022, 1, 2, tzinfo=UTC), 20),
            (datetime(2022, 1, 3, tzinfo=UTC), 30),
        ]

    @pytest.mark.asyncio
    async def test_query_parameters(
        self,
        system: System,
        mocked_api: aioresponses,
        energy_lifetime_response: dict[str, Any],
    ) -> None:
        mocked_api.get(
            f"{LIFETIME_URL}&start_date=2022-01-01&end_date=2022-01-03&production=all",
            payload=energy_lifetime_response,
        )

        production = await system.get_lifetime_production(
            date(2022, 1, 1), date(2022, 1, 3), include_detail=True
        )

        assert len(production) == 3

    @pytest.mark.asyncio
    async def test_empty_production(
        self,
        system: System,
        mocked_api: aioresponses,
    ) -> None:
        mocked_api.get(LIFETIME_URL, payload={"start_date": "2022-01-01", "production": []})

        assert await system.get_lifetime_production() == []


class TestMicroinverterProduction:
    @pytest.mark.asyncio
    async def test_intervals(
        self,
        system: System,
        mocked_api: aioresponses,
        production_micro_response: dict[str, Any],
    ) -> None:
        mocked_api.get(
            f"{MICRO_URL}&start_date=2023-09-01&granularity=15mins",
            payload=production_micro_response,
        )

        intervals = await system.get_microinverter_production(
            date(2023, 9, 1), Granularity.FIFTEEN_MINUTES
        )

        assert len(intervals) == 2
        assert intervals[0].instantaneous_power_watts == 1320
        assert intervals[0].energy_this_interval_wh == 330
        assert intervals[1].devices_reporting == 19
        assert intervals[1].end_at == datetime.fromtimestamp(1693528200, tz=UTC)

    @pytest.mark.asyncio
    async def test_granularity_omitted(
        self,
        system: System,
        mocked_api: aioresponses,
        production_micro_response: dict[str, Any],
    ) -> None:
        mocked_api.get(f"{MICRO_URL}&start_date=2023-09-01", payload=production_micro_response)

        intervals = await system.get_microinverter_production(date(2023, 9, 1))

        assert len(intervals) == 2

    @pytest.mark.asyncio
    async def test_invalid_granularity(self, system: System, mocked_api: aioresponses) -> None:
        """An invalid token is rejected before any request is sent."""
        with pytest.raises(InvalidGranularityError):
            await system.get_microinverter_production(
                date(2023, 9, 1), "hourly"  # type: ignore[arg-type]
            )

        assert not mocked_api.requests


class TestSharedCredentials:
    """A refresh on the client reaches every System it handed out."""

    @pytest.mark.asyncio
    async def test_refresh_rotates_header(
        self,
        client: EnlightenClient,
        system_response: SystemResponse,
        mocked_api: aioresponses,
        summary_response: dict[str, Any],
        token_response: dict[str, Any],
    ) -> None:
        headers: list[str] = []

        def callback(url: Any, **kwargs: Any) -> CallbackResult:
            headers.append(kwargs["headers"]["Authorization"])
            return CallbackResult(payload=summary_response)

        mocked_api.get(SUMMARY_URL, callback=callback, repeat=True)
        mocked_api.post(REFRESH_URL, payload=token_response)

        first = System.from_response(client, system_response)
        second = System.from_response(client, system_response)

        await first.get_summary()
        await client.refresh()
        await first.get_summary()
        await second.get_summary()

        assert headers == ["Bearer access-0", "Bearer access-1", "Bearer access-1"]

    @pytest.mark.asyncio
    async def test_concurrent_queries_during_refresh(
        self,
        client: EnlightenClient,
        system: System,
        mocked_api: aioresponses,
        summary_response: dict[str, Any],
        token_response: dict[str, Any],
    ) -> None:
        """Every request carries either the old or the new header, whole."""
        headers: list[str] = []

        def callback(url: Any, **kwargs: Any) -> CallbackResult:
            headers.append(kwargs["headers"]["Authorization"])
            return CallbackResult(payload=summary_response)

        mocked_api.get(SUMMARY_URL, callback=callback, repeat=True)
        mocked_api.post(REFRESH_URL, payload=token_response)

        await asyncio.gather(
            *(system.get_summary() for _ in range(10)),
            client.refresh(),
            *(system.get_summary() for _ in range(10)),
        )

        assert len(headers) == 20
        assert set(headers) <= {"Bearer access-0", "Bearer access-1"}

        await system.get_summary()
        assert headers[-1] == "Bearer access-1"
