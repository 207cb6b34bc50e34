"""System class for monitored solar installations.

This module provides the System class, a handle to one installation
returned by :meth:`pyenlighten.EnlightenClient.list_systems`.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING

from pyenlighten.constants import (
    SYSTEM_ENERGY_LIFETIME_PATH,
    SYSTEM_PRODUCTION_MICRO_PATH,
    SYSTEM_SUMMARY_PATH,
    SYSTEM_SUMMARY_SIZE,
)
from pyenlighten.decoding import format_date, validate
from pyenlighten.models import (
    Address,
    ConnectionType,
    Granularity,
    LifetimeProductionResponse,
    MicroinverterProduction,
    MicroinverterProductionResponse,
    SystemResponse,
    SystemSummary,
)

_LOGGER = logging.getLogger(__name__)

if TYPE_CHECKING:
    from pyenlighten import EnlightenClient


class System:
    """Represents one monitored solar installation.

    A single account can see several systems (e.g., home, cabin, rental).
    The descriptive attributes are a snapshot taken when the systems were
    listed and are never updated in place; list the systems again to get
    fresh values. Authentication, on the other hand, stays live: every
    query reads the client's current bearer token when it is sent, so a
    :meth:`~pyenlighten.EnlightenClient.refresh` on the client applies to
    every System it handed out.

    Example:
        ```python
        systems = await client.list_systems()
        system = systems[0]

        summary = await system.get_summary()
        print(f"{system.name}: {summary.current_power} W")

        for day, watt_hours in await system.get_lifetime_production():
            print(day.date(), watt_hours)
        ```
    """

    def __init__(
        self,
        client: EnlightenClient,
        system_id: int,
        name: str,
        public_name: str,
        timezone: str,
        address: Address,
        connection_type: ConnectionType,
        status: str,
        last_report_at: datetime,
        last_energy_at: datetime,
        operational_at: datetime,
        energy_lifetime: int,
        energy_today: int,
        attachment_type: str | None = None,
        interconnect_date: date | None = None,
        other_references: list[str] | None = None,
        system_size: float | None = None,
    ) -> None:
        """Initialize system.

        Args:
            client: EnlightenClient whose credentials this system shares
            system_id: Unique system identifier
            name: Human-readable system name
            public_name: Name shown on public pages
            timezone: IANA timezone of the installation
            address: Coarse location
            connection_type: How the gateway reaches the cloud
            status: Status string reported by the service
            last_report_at: Last time the gateway reported
            last_energy_at: Last time energy data was received
            operational_at: When the system started operating
            energy_lifetime: Lifetime production in Wh
            energy_today: Production today in Wh
            attachment_type: Mounting type, if known
            interconnect_date: Grid interconnection date, if known
            other_references: Installer references
            system_size: Array size in kW, if known
        """
        self._client = client
        self.system_id = system_id
        self.name = name
        self.public_name = public_name
        self.timezone = timezone
        self.address = address
        self.connection_type = connection_type
        self.status = status
        self.last_report_at = last_report_at
        self.last_energy_at = last_energy_at
        self.operational_at = operational_at
        self.energy_lifetime = energy_lifetime
        self.energy_today = energy_today
        self.attachment_type = attachment_type
        self.interconnect_date = interconnect_date
        self.other_references = list(other_references or [])
        self.system_size = system_size

    @classmethod
    def from_response(cls, client: EnlightenClient, data: SystemResponse) -> System:
        """Build a System from one entry of the systems listing."""
        return cls(
            client=client,
            system_id=data.system_id,
            name=data.name,
            public_name=data.public_name,
            timezone=data.timezone,
            address=data.address,
            connection_type=data.connection_type,
            status=data.status,
            last_report_at=data.last_report_at,
            last_energy_at=data.last_energy_at,
            operational_at=data.operational_at,
            energy_lifetime=data.energy_lifetime,
            energy_today=data.energy_today,
            attachment_type=data.attachment_type,
            interconnect_date=data.interconnect_date,
            other_references=data.other_references,
            system_size=data.system_size,
        )

    def __repr__(self) -> str:
        return f"System(system_id={self.system_id}, name={self.name!r}, status={self.status!r})"

    async def get_summary(self) -> SystemSummary:
        """Get the current summary of this system.

        Returns:
            SystemSummary with current power and energy counters

        Raises:
            EnlightenAPIError: If the API answers with a non-success status
            EnlightenConnectionError: If the API cannot be reached
            EnlightenDecodeError: If the response does not match the schema
        """
        response = await self._client._request(
            "GET",
            SYSTEM_SUMMARY_PATH.format(system_id=self.system_id),
            params={"size": SYSTEM_SUMMARY_SIZE},
        )
        return validate(SystemSummary, response)

    async def get_lifetime_production(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        include_detail: bool = False,
    ) -> list[tuple[datetime, int]]:
        """Get daily production totals.

        Args:
            start_date: First day to include (default: the service's start)
            end_date: Last day to include (default: yesterday, per the service)
            include_detail: Ask for the split between meter and
                microinverter production (``production=all``)

        Returns:
            ``(day, watt_hours)`` pairs, each day at midnight UTC

        Example:
            ```python
            series = await system.get_lifetime_production(date(2022, 1, 1))
            total_wh = sum(wh for _, wh in series)
            ```
        """
        params: dict[str, str] = {}
        if start_date is not None:
            params["start_date"] = format_date(start_date)
        if end_date is not None:
            params["end_date"] = format_date(end_date)
        if include_detail:
            params["production"] = "all"

        response = await self._client._request(
            "GET",
            SYSTEM_ENERGY_LIFETIME_PATH.format(system_id=self.system_id),
            params=params,
        )
        production = validate(LifetimeProductionResponse, response).daily_production()
        _LOGGER.debug(
            "System %s: %d days of lifetime production", self.system_id, len(production)
        )
        return production

    async def get_microinverter_production(
        self,
        start_date: date,
        granularity: Granularity | None = None,
    ) -> list[MicroinverterProduction]:
        """Get microinverter production telemetry.

        Args:
            start_date: Day to start the telemetry from
            granularity: Interval size; the service picks its default
                (``day``) when omitted

        Returns:
            One record per reported interval
        """
        params = {"start_date": format_date(start_date)}
        if granularity is not None:
            params["granularity"] = str(Granularity.parse(granularity))

        response = await self._client._request(
            "GET",
            SYSTEM_PRODUCTION_MICRO_PATH.format(system_id=self.system_id),
            params=params,
        )
        return validate(MicroinverterProductionResponse, response).intervals
