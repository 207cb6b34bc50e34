"""Local gateway (Envoy) client.

Stateless, single-shot calls to the gateway's local endpoints. Only the
per-inverter production endpoint needs credentials (HTTP digest auth); the
others are unauthenticated. Nothing is cached and nothing is retried.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from xml.parsers.expat import ExpatError

import aiohttp
import xmltodict
from aiohttp import ClientTimeout

from pyenlighten.constants import (
    DEFAULT_TIMEOUT,
    GATEWAY_HOME_PATH,
    GATEWAY_INFO_PATH,
    GATEWAY_INVENTORY_PATH,
    GATEWAY_INVERTERS_PATH,
    GATEWAY_PRODUCTION_PATH,
)
from pyenlighten.decoding import validate
from pyenlighten.exceptions import (
    EnlightenAPIError,
    EnlightenConnectionError,
    EnlightenDecodeError,
)

from .models import EnergyStats, Home, Info, Inventory, Inverter

_LOGGER = logging.getLogger(__name__)


class GatewayClient:
    """Client for the local gateway's JSON/XML endpoints.

    Example:
        ```python
        async with GatewayClient("https://envoy.local", "installer", "secret") as gateway:
            inventory = await gateway.inventory()
            print(f"{len(inventory.pcu)} microinverters")

            inverters = await gateway.inverters()
            print(AggregateProduction.from_inverters(inverters))
        ```
    """

    def __init__(
        self,
        base_url: str,
        username: str = "",
        password: str = "",
        *,
        verify_ssl: bool = False,
        timeout: int = DEFAULT_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the gateway client.

        Args:
            base_url: Gateway URL, e.g. ``https://192.168.1.80``
            username: Digest auth username for the inverters endpoint
            password: Digest auth password for the inverters endpoint
            verify_ssl: Whether to verify SSL certificates (gateways ship
                self-signed certificates, so off by default)
            timeout: Request timeout in seconds (default: 30)
            session: Optional aiohttp ClientSession for session injection
        """
        if not base_url.endswith("/"):
            base_url += "/"
        self.base_url = base_url
        self.username = username
        self.password = password
        self.verify_ssl = verify_ssl
        self.timeout = ClientTimeout(total=timeout)

        self._session: aiohttp.ClientSession | None = session
        self._owns_session: bool = session is None

    async def __aenter__(self) -> GatewayClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is not None and not self._owns_session:
            return self._session

        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(ssl=self.verify_ssl)
            self._session = aiohttp.ClientSession(connector=connector, timeout=self.timeout)
            self._owns_session = True

        return self._session

    async def close(self) -> None:
        """Close the session if we own it."""
        if self._session and not self._session.closed and self._owns_session:
            await self._session.close()

    async def _get(
        self,
        path: str,
        *,
        params: dict[str, str] | None = None,
        digest_auth: bool = False,
    ) -> str:
        """GET a gateway path and return the body text.

        Raises:
            EnlightenAPIError: If the gateway answers with a non-success status
            EnlightenConnectionError: If the gateway cannot be reached
        """
        session = await self._get_session()
        url = f"{self.base_url}{path}"
        kwargs: dict[str, Any] = {}
        if digest_auth:
            kwargs["middlewares"] = (aiohttp.DigestAuthMiddleware(self.username, self.password),)

        _LOGGER.debug("GET %s", url)
        try:
            async with session.get(url, params=params, **kwargs) as response:
                response.raise_for_status()
                return await response.text()
        except aiohttp.ClientResponseError as err:
            raise EnlightenAPIError(
                f"Gateway HTTP {err.status}: {err.message}", err.status
            ) from err
        except aiohttp.ClientError as err:
            raise EnlightenConnectionError(f"Gateway connection error: {err}") from err

    async def _get_json(self, path: str, **kwargs: Any) -> Any:
        body = await self._get(path, **kwargs)
        try:
            return json.loads(body)
        except json.JSONDecodeError as err:
            raise EnlightenDecodeError(f"Gateway {path} is not valid JSON: {err}") from err

    async def home(self) -> Home:
        """Get the gateway's status page (network, database, software build)."""
        return validate(Home, await self._get_json(GATEWAY_HOME_PATH))

    async def info(self) -> Info:
        """Get device metadata and installed firmware packages."""
        body = await self._get(GATEWAY_INFO_PATH)
        try:
            document = xmltodict.parse(body, attr_prefix="", force_list=("package",))
        except ExpatError as err:
            raise EnlightenDecodeError(f"Gateway info.xml is not valid XML: {err}") from err
        return validate(Info, document.get("envoy_info"))

    async def inventory(self) -> Inventory:
        """Get the device inventory (microinverters, AC batteries, relays).

        Raises:
            MissingSectionError: If one of the PCU/ACB/NSRB sections is absent
            UnknownSectionError: If an unrecognised section type appears
        """
        return validate(Inventory, await self._get_json(GATEWAY_INVENTORY_PATH))

    async def inverters(self) -> list[Inverter]:
        """Get the latest reading of every microinverter.

        This endpoint requires digest authentication with the username and
        password given to the constructor.
        """
        data = await self._get_json(GATEWAY_INVERTERS_PATH, digest_auth=True)
        if not isinstance(data, list):
            raise EnlightenDecodeError(
                f"Expected a list of inverters, got {type(data).__name__}"
            )
        return [validate(Inverter, item) for item in data]

    async def production(self) -> EnergyStats:
        """Get detailed production, consumption and storage readings."""
        data = await self._get_json(GATEWAY_PRODUCTION_PATH, params={"details": "1"})
        return validate(EnergyStats, data)
