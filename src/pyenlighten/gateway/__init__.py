"""Local gateway (Envoy) access for pyenlighten."""

from .client import GatewayClient
from .models import (
    Consumption,
    Detail,
    Device,
    DeviceStatus,
    EnergyStats,
    Home,
    Info,
    Inventory,
    Inverter,
    Production,
    Storage,
    Summary,
)

__all__ = [
    "GatewayClient",
    "Consumption",
    "Detail",
    "Device",
    "DeviceStatus",
    "EnergyStats",
    "Home",
    "Info",
    "Inventory",
    "Inverter",
    "Production",
    "Storage",
    "Summary",
]
