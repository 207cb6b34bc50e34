"""Python client library for the Enphase Enlighten cloud API and local gateway.

Usage:
    Cloud client:
        from pyenlighten import EnlightenClient

        async with EnlightenClient.preauthenticated(
            api_key, client_id, client_secret, access_token, refresh_token
        ) as client:
            for system in await client.list_systems():
                summary = await system.get_summary()

            # Rotate tokens; every System above picks them up
            tokens = await client.refresh()

    Local gateway:
        from pyenlighten.gateway import GatewayClient

        async with GatewayClient("https://envoy.local", username, password) as gateway:
            stats = await gateway.production()
"""

from __future__ import annotations

from .client import EnlightenClient
from .config import CloudConfig, GatewayConfig
from .credentials import CredentialStore
from .devices import System
from .exceptions import (
    EnlightenAPIError,
    EnlightenAuthError,
    EnlightenConnectionError,
    EnlightenDecodeError,
    EnlightenError,
    InvalidConnectionTypeError,
    InvalidDeviceStatusError,
    InvalidEnumValueError,
    InvalidGranularityError,
    MissingSectionError,
    UnknownSectionError,
)
from .models import (
    AggregateProduction,
    ConnectionType,
    Granularity,
    MicroinverterProduction,
    SystemSummary,
    Tokens,
)

__version__ = "0.1.0"
__all__ = [
    "EnlightenClient",
    "System",
    "CredentialStore",
    "CloudConfig",
    "GatewayConfig",
    # Exceptions
    "EnlightenError",
    "EnlightenAPIError",
    "EnlightenAuthError",
    "EnlightenConnectionError",
    "EnlightenDecodeError",
    "MissingSectionError",
    "UnknownSectionError",
    "InvalidEnumValueError",
    "InvalidGranularityError",
    "InvalidConnectionTypeError",
    "InvalidDeviceStatusError",
    # Models
    "AggregateProduction",
    "ConnectionType",
    "Granularity",
    "MicroinverterProduction",
    "SystemSummary",
    "Tokens",
]
