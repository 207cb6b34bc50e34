"""Pydantic models for local gateway (Envoy) responses.

The gateway mixes camelCase and snake_case field names and three timestamp
encodings; each field declares its own. Several payloads are arrays of
tagged sections and are folded into fixed attributes by a ``before`` model
validator (see :mod:`pyenlighten.decoding`).
"""

from __future__ import annotations

from enum import StrEnum
from ipaddress import IPv4Address, IPv6Address
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from pyenlighten.decoding import (
    UnixSeconds,
    UnixSecondsStr,
    fold_sections,
    split_sections,
)
from pyenlighten.exceptions import InvalidDeviceStatusError, UnknownSectionError

# ============================================================================
# home.json
# ============================================================================


class WiredInterface(BaseModel):
    """Ethernet interface of the gateway."""

    type: Literal["ethernet"] = "ethernet"
    interface: str
    mac: str
    dhcp: bool
    ip: IPv4Address | IPv6Address
    carrier: bool


class WiFiInterface(BaseModel):
    """WiFi interface of the gateway."""

    type: Literal["wifi"] = "wifi"
    interface: str
    signal_strength: int
    signal_strength_max: int
    mac: str
    dhcp: bool
    ip: IPv4Address | IPv6Address
    carrier: bool
    supported: bool
    present: bool
    configured: bool
    status: str


Interface = Annotated[WiredInterface | WiFiInterface, Field(discriminator="type")]


class Network(BaseModel):
    web_comm: bool
    ever_reported_to_enlighten: bool
    last_enlighten_report_time: UnixSeconds
    primary_interface: str
    interfaces: list[Interface]


class Home(BaseModel):
    """Response of ``GET /home.json``."""

    software_build_epoch: UnixSeconds
    is_nonvoy: bool
    db_size: str
    # Sent as a string, e.g. "11"
    db_percent_full: Annotated[int, BeforeValidator(lambda value: int(str(value)))]
    timezone: str
    current_date: str
    current_time: str
    network: Network
    tariff: str
    update_status: str


# ============================================================================
# info.xml
# ============================================================================


class DeviceMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    serial_number: str = Field(alias="sn")
    package_number: str = Field(alias="pn")
    software: str
    euaid: str
    seqnum: int
    apiver: int
    imeter: bool


class Package(BaseModel):
    """One firmware package installed on the gateway."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    package_number: str = Field(alias="pn")
    version: str
    build: str


class BuildInfo(BaseModel):
    build_id: str
    build_time_gmt: UnixSecondsStr


class Info(BaseModel):
    """Response of ``GET /info.xml``.

    Every XML value arrives as text, hence the string-encoded timestamps.
    """

    model_config = ConfigDict(populate_by_name=True)

    time: UnixSecondsStr
    device: DeviceMetadata
    packages: list[Package] = Field(alias="package")
    build_info: BuildInfo


# ============================================================================
# inventory.json
# ============================================================================


class DeviceStatus(StrEnum):
    """Condition flags reported per inventory device."""

    OK = "envoy.global.ok"
    DC_VOLTAGE_TOO_LOW = "envoy.cond_flags.pcu_chan.dcvoltagetoolow"
    DC_POWER_LOW = "envoy.cond_flags.pcu_ctrl.dc-pwr-low"
    FAILURE = "envoy.cond_flags.obs_strs.failure"

    @classmethod
    def parse(cls, value: str) -> DeviceStatus:
        """Parse a wire token.

        Raises:
            InvalidDeviceStatusError: If the token is unknown
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidDeviceStatusError(str(value)) from None


class DeviceControl(BaseModel):
    gficlearset: bool


class Device(BaseModel):
    """One device of the gateway inventory."""

    part_num: str
    installed: UnixSecondsStr
    serial_num: str
    device_status: list[Annotated[DeviceStatus, BeforeValidator(DeviceStatus.parse)]]
    last_rpt_date: UnixSecondsStr
    admin_state: int
    dev_type: int
    created_date: UnixSecondsStr
    img_load_date: UnixSecondsStr
    img_pnum_running: str
    ptpn: str
    chaneid: UnixSeconds
    device_control: list[DeviceControl]
    producing: bool
    communicating: bool
    provisioned: bool
    operating: bool


INVENTORY_SECTIONS = ("PCU", "ACB", "NSRB")


class Inventory(BaseModel):
    """Response of ``GET /inventory.json``.

    The wire payload is an array of ``{"type": ..., "devices": [...]}``
    sections; all three of ``PCU`` (microinverters), ``ACB`` (AC batteries)
    and ``NSRB`` (relays) must be present and no other type may appear.
    """

    pcu: list[Device]
    acb: list[Device]
    nsrb: list[Device]

    @model_validator(mode="before")
    @classmethod
    def _fold_sections(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return data
        sections = fold_sections(
            split_sections(data, "inventory"), INVENTORY_SECTIONS, "inventory"
        )
        return {tag.lower(): section.get("devices") for tag, section in sections.items()}


# ============================================================================
# api/v1/production/inverters
# ============================================================================


class Inverter(BaseModel):
    """Latest reading of one microinverter, as reported by the gateway."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    serial_number: str
    last_report_date: UnixSeconds
    dev_type: int
    last_report_watts: int
    max_report_watts: int


# ============================================================================
# production.json?details=1
# ============================================================================


class MeasurementType(StrEnum):
    PRODUCTION = "production"
    TOTAL_CONSUMPTION = "total-consumption"
    NET_CONSUMPTION = "net-consumption"


class _Readings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    watts_now: float = Field(alias="wNow")
    watt_hours_today: float = Field(alias="whToday")
    watt_hours_last_seven_days: float = Field(alias="whLastSevenDays")
    watt_hours_lifetime: float = Field(alias="whLifetime")
    varh_lead_today: float = Field(alias="varhLeadToday")
    varh_lead_lifetime: float = Field(alias="varhLeadLifetime")
    varh_lag_today: float = Field(alias="varhLagToday")
    varh_lag_lifetime: float = Field(alias="varhLagLifetime")
    vah_today: float = Field(alias="vahToday")
    vah_lifetime: float = Field(alias="vahLifetime")
    rms_current: float = Field(alias="rmsCurrent")
    rms_voltage: float = Field(alias="rmsVoltage")
    react_power: float = Field(alias="reactPwr")
    apparent_power: float = Field(alias="apprntPwr")
    power_factor: float = Field(alias="pwrFactor")


class Line(_Readings):
    """Readings of a single phase."""


class Detail(_Readings):
    """Meter ("eim") readings for the whole site, with per-phase lines."""

    active_count: int = Field(alias="activeCount")
    reading_time: UnixSeconds = Field(alias="readingTime")
    lines: list[Line] = Field(default_factory=list)


class Summary(BaseModel):
    """Microinverter ("inverters") production summary."""

    model_config = ConfigDict(populate_by_name=True)

    active_count: int = Field(alias="activeCount")
    reading_time: UnixSeconds = Field(alias="readingTime")
    watts_now: float = Field(alias="wNow")
    watt_hours_lifetime: int = Field(alias="whLifetime")


def _measurement_sections(raw: Any, context: str) -> list[tuple[str, dict[str, Any]]]:
    return split_sections(raw, context, key="measurementType")


class Production(BaseModel):
    """Production sections: the microinverter summary and the meter detail."""

    summary: Summary
    detail: Detail

    @model_validator(mode="before")
    @classmethod
    def _fold_sections(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return data
        sections = fold_sections(
            split_sections(data, "production"), ("inverters", "eim"), "production"
        )
        eim = sections["eim"]
        ((measurement, _),) = _measurement_sections([eim], "production")
        if measurement != MeasurementType.PRODUCTION:
            raise UnknownSectionError(measurement, "production")
        return {"summary": sections["inverters"], "detail": eim}


class Consumption(BaseModel):
    """Consumption sections, keyed by their measurement type."""

    total: Detail
    net: Detail

    @model_validator(mode="before")
    @classmethod
    def _fold_sections(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return data
        sections = fold_sections(
            _measurement_sections(data, "consumption"),
            (MeasurementType.TOTAL_CONSUMPTION.value, MeasurementType.NET_CONSUMPTION.value),
            "consumption",
        )
        return {
            "total": sections[MeasurementType.TOTAL_CONSUMPTION],
            "net": sections[MeasurementType.NET_CONSUMPTION],
        }


class StorageType(StrEnum):
    ACB = "acb"


class StorageState(StrEnum):
    IDLE = "idle"
    CHARGING = "charging"
    DISCHARGING = "discharging"
    FULL = "full"


class Storage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: StorageType = Field(alias="type")
    active_count: int = Field(alias="activeCount")
    reading_time: UnixSeconds = Field(alias="readingTime")
    watts_now: float = Field(alias="wNow")
    watt_hours_now: float = Field(alias="whNow")
    state: StorageState


class EnergyStats(BaseModel):
    """Response of ``GET /production.json?details=1``."""

    production: Production
    consumption: Consumption
    storage: list[Storage] = Field(default_factory=list)


__all__ = [
    "BuildInfo",
    "Consumption",
    "Detail",
    "Device",
    "DeviceControl",
    "DeviceMetadata",
    "DeviceStatus",
    "EnergyStats",
    "Home",
    "Info",
    "Interface",
    "Inventory",
    "Inverter",
    "Line",
    "MeasurementType",
    "Network",
    "Package",
    "Production",
    "Storage",
    "StorageState",
    "StorageType",
    "Summary",
    "WiFiInterface",
    "WiredInterface",
]
