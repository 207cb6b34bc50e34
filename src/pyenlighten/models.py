"""Pydantic models for Enlighten cloud API responses.

Field names follow the wire names of the v4 API (snake_case) except where a
cryptic wire name is aliased to a descriptive one (``powr``, ``enwh``).
Timestamp fields use the encoding types from :mod:`pyenlighten.decoding`.
"""

from __future__ import annotations

from datetime import UTC, datetime, time, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from .decoding import IsoDate, UnixSeconds
from .exceptions import InvalidConnectionTypeError, InvalidGranularityError

if TYPE_CHECKING:
    from .gateway.models import Inverter


class Granularity(StrEnum):
    """Interval size for microinverter telemetry."""

    WEEK = "week"
    DAY = "day"
    FIFTEEN_MINUTES = "15mins"

    @classmethod
    def parse(cls, value: str) -> Granularity:
        """Parse a wire token.

        Raises:
            InvalidGranularityError: If the token is not one of
                ``week``, ``day`` or ``15mins``
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidGranularityError(str(value)) from None


class ConnectionType(StrEnum):
    """How a system's gateway reaches the cloud."""

    ETHERNET = "ethernet"
    WIFI = "wifi"
    CELLULAR = "cellular"

    @classmethod
    def parse(cls, value: str) -> ConnectionType:
        """Parse a wire token.

        Raises:
            InvalidConnectionTypeError: If the token is unknown
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidConnectionTypeError(str(value)) from None


GranularityField = Annotated[Granularity, BeforeValidator(Granularity.parse)]
ConnectionTypeField = Annotated[ConnectionType, BeforeValidator(ConnectionType.parse)]


class Tokens(BaseModel):
    """An OAuth2 access/refresh token pair.

    Frozen so a pair is always replaced as a whole. Serialise with
    ``model_dump_json()`` to persist it between runs and restore it with
    ``Tokens.model_validate_json()``.
    """

    model_config = ConfigDict(frozen=True)

    access: str = Field(repr=False)
    refresh: str = Field(repr=False)


class AuthResponse(BaseModel):
    """Token endpoint response. Fields other than the tokens are ignored."""

    access_token: str
    refresh_token: str

    def to_tokens(self) -> Tokens:
        return Tokens(access=self.access_token, refresh=self.refresh_token)


class Address(BaseModel):
    """Coarse location of a system."""

    country: str
    state: str
    postal_code: str


class Metadata(BaseModel):
    """Reporting metadata attached to telemetry responses."""

    status: str
    last_report_at: UnixSeconds
    last_energy_at: UnixSeconds
    operational_at: UnixSeconds | None = None


class SystemResponse(BaseModel):
    """One entry of the ``systems`` list."""

    system_id: int
    name: str
    public_name: str
    timezone: str
    address: Address
    connection_type: ConnectionTypeField
    status: str
    last_report_at: UnixSeconds
    last_energy_at: UnixSeconds
    operational_at: UnixSeconds
    attachment_type: str | None = None
    interconnect_date: IsoDate | None = None
    other_references: list[str] = Field(default_factory=list)
    energy_lifetime: int
    energy_today: int
    system_size: float | None = None


class ListSystemsResponse(BaseModel):
    """Envelope of ``GET /api/v4/systems``.

    The pagination fields are decoded so the client can tell when systems
    were left on later pages, but only the first page is ever requested.
    """

    total: int | None = None
    current_page: int | None = None
    size: int | None = None
    count: int | None = None
    items: str | None = None
    systems: list[SystemResponse]


class SystemSummary(BaseModel):
    """Response of ``GET /api/v4/systems/{id}/summary``."""

    system_id: int
    current_power: int
    energy_lifetime: int
    energy_today: int
    last_interval_end_at: UnixSeconds | None = None
    last_report_at: UnixSeconds
    modules: int
    operational_at: UnixSeconds
    size_w: int
    source: str
    status: str
    summary_date: IsoDate


class LifetimeProductionResponse(BaseModel):
    """Response of ``GET /api/v4/systems/{id}/energy_lifetime``.

    The API sends one start date and a list of daily totals; the date of each
    total is implied by its position.
    """

    system_id: int | None = None
    start_date: IsoDate
    production: list[int]
    meta: Metadata | None = None

    def daily_production(self) -> list[tuple[datetime, int]]:
        """Pair every daily total with its date at midnight UTC.

        Entry ``i`` belongs to ``start_date + i`` days.

        Example:
            >>> response = LifetimeProductionResponse.model_validate(
            ...     {"start_date": "2022-01-01", "production": [10, 20]}
            ... )
            >>> response.daily_production()[1]
            (datetime.datetime(2022, 1, 2, 0, 0, tzinfo=datetime.timezone.utc), 20)
        """
        start = datetime.combine(self.start_date, time.min, tzinfo=UTC)
        return [
            (start + timedelta(days=index), watt_hours)
            for index, watt_hours in enumerate(self.production)
        ]


class MicroinverterProduction(BaseModel):
    """One interval of microinverter production telemetry."""

    model_config = ConfigDict(populate_by_name=True)

    end_at: UnixSeconds
    devices_reporting: int
    instantaneous_power_watts: int = Field(alias="powr")
    energy_this_interval_wh: int = Field(alias="enwh")


class MicroinverterProductionResponse(BaseModel):
    """Response of ``GET /api/v4/systems/{id}/telemetry/production_micro``."""

    system_id: int | None = None
    granularity: GranularityField | None = None
    total_devices: int | None = None
    start_at: UnixSeconds | None = None
    end_at: UnixSeconds | None = None
    items: str | None = None
    intervals: list[MicroinverterProduction]
    meta: Metadata | None = None


class AggregateProduction(BaseModel):
    """Instantaneous production of a whole system, whatever the source.

    Built either from the gateway's per-inverter readings or from one cloud
    telemetry interval, so callers can treat both the same way.
    """

    timestamp: datetime = datetime.min.replace(tzinfo=UTC)
    inverters_reporting: int = 0
    instantaneous_power_watts: int = 0

    @classmethod
    def from_inverters(cls, inverters: list[Inverter]) -> AggregateProduction:
        """Sum gateway inverter readings.

        The timestamp is the most recent report among the inverters.
        """
        aggregate = cls(inverters_reporting=len(inverters))
        for inverter in inverters:
            aggregate.timestamp = max(aggregate.timestamp, inverter.last_report_date)
            aggregate.instantaneous_power_watts += inverter.last_report_watts
        return aggregate

    @classmethod
    def from_microinverter_production(
        cls, interval: MicroinverterProduction
    ) -> AggregateProduction:
        return cls(
            timestamp=interval.end_at,
            inverters_reporting=interval.devices_reporting,
            instantaneous_power_watts=interval.instantaneous_power_watts,
        )


__all__ = [
    "Address",
    "AggregateProduction",
    "AuthResponse",
    "ConnectionType",
    "Granularity",
    "LifetimeProductionResponse",
    "ListSystemsResponse",
    "Metadata",
    "MicroinverterProduction",
    "MicroinverterProductionResponse",
    "SystemResponse",
    "SystemSummary",
    "Tokens",
]
