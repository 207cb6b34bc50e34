"""Connection configuration for the cloud and gateway clients.

This module provides dataclasses describing how to build an
:class:`~pyenlighten.EnlightenClient` or a
:class:`~pyenlighten.gateway.GatewayClient`, with validation and
serialization to/from dictionaries and loading from environment variables.

Example:
    # First login with a one-time authorization code
    config = CloudConfig(
        api_key="...",
        client_id="...",
        client_secret="...",
        code="abc123",
    )
    client = await config.create_client()

    # Later runs: persist the rotated tokens and start from them
    config = CloudConfig.from_env()
    client = await config.create_client()
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_REDIRECT_URI,
    DEFAULT_TIMEOUT,
    ENV_ACCESS_TOKEN,
    ENV_API_KEY,
    ENV_CLIENT_ID,
    ENV_CLIENT_SECRET,
    ENV_GATEWAY_PASSWORD,
    ENV_GATEWAY_URL,
    ENV_GATEWAY_USERNAME,
    ENV_OAUTH_CODE,
    ENV_REFRESH_TOKEN,
)

if TYPE_CHECKING:
    from .client import EnlightenClient
    from .gateway.client import GatewayClient


@dataclass
class CloudConfig:
    """Configuration for the Enlighten cloud client.

    Exactly one way to authenticate must be given: either a one-time
    authorization ``code``, or both ``access_token`` and ``refresh_token``.

    Attributes:
        api_key: Application API key
        client_id: OAuth2 client id
        client_secret: OAuth2 client secret
        code: One-time authorization code (first login only)
        access_token: Saved access token
        refresh_token: Saved refresh token
        base_url: API base URL
        redirect_uri: Redirect URI registered with the application
        timeout: Request timeout in seconds
    """

    api_key: str
    client_id: str
    client_secret: str
    code: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    base_url: str = DEFAULT_BASE_URL
    redirect_uri: str = DEFAULT_REDIRECT_URI
    timeout: int = DEFAULT_TIMEOUT

    @property
    def uses_auth_code(self) -> bool:
        return self.code is not None

    def validate(self) -> None:
        """Validate configuration completeness.

        Raises:
            ValueError: If a required value is missing, or if both or neither
                of the authorization code and the token pair are set
        """
        for name in ("api_key", "client_id", "client_secret"):
            if not getattr(self, name):
                raise ValueError(f"{name} is required")

        has_code = bool(self.code)
        has_access = bool(self.access_token)
        has_refresh = bool(self.refresh_token)

        if has_code and (has_access or has_refresh):
            raise ValueError("Set either code or access_token/refresh_token, not both")
        if not has_code and not (has_access and has_refresh):
            raise ValueError("Set either code or both access_token and refresh_token")

    async def create_client(self, **kwargs: Any) -> EnlightenClient:
        """Validate and build a client.

        Exchanges the authorization code when one is configured, otherwise
        starts from the saved token pair without any request.

        Args:
            **kwargs: Forwarded to the client (e.g. ``session``)
        """
        from .client import EnlightenClient

        self.validate()
        options: dict[str, Any] = {"base_url": self.base_url, "timeout": self.timeout, **kwargs}
        if self.code:
            return await EnlightenClient.from_auth_code(
                self.api_key,
                self.client_id,
                self.client_secret,
                self.code,
                redirect_uri=self.redirect_uri,
                **options,
            )
        return EnlightenClient.preauthenticated(
            self.api_key,
            self.client_id,
            self.client_secret,
            self.access_token or "",
            self.refresh_token or "",
            **options,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return {
            "api_key": self.api_key,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": self.code,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "base_url": self.base_url,
            "redirect_uri": self.redirect_uri,
            "timeout": self.timeout,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CloudConfig:
        """Create configuration from dictionary.

        Args:
            data: Dictionary with configuration values (from to_dict())
        """
        return cls(
            api_key=data.get("api_key", ""),
            client_id=data.get("client_id", ""),
            client_secret=data.get("client_secret", ""),
            code=data.get("code"),
            access_token=data.get("access_token"),
            refresh_token=data.get("refresh_token"),
            base_url=data.get("base_url", DEFAULT_BASE_URL),
            redirect_uri=data.get("redirect_uri", DEFAULT_REDIRECT_URI),
            timeout=int(data.get("timeout", DEFAULT_TIMEOUT)),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CloudConfig:
        """Create configuration from ``ENPHASE_*`` environment variables.

        Empty variables count as unset.
        """
        env = os.environ if environ is None else environ
        return cls(
            api_key=env.get(ENV_API_KEY, ""),
            client_id=env.get(ENV_CLIENT_ID, ""),
            client_secret=env.get(ENV_CLIENT_SECRET, ""),
            code=env.get(ENV_OAUTH_CODE) or None,
            access_token=env.get(ENV_ACCESS_TOKEN) or None,
            refresh_token=env.get(ENV_REFRESH_TOKEN) or None,
        )


@dataclass
class GatewayConfig:
    """Configuration for the local gateway client.

    Attributes:
        base_url: Gateway URL
        username: Digest auth username (only needed for inverter readings)
        password: Digest auth password
        verify_ssl: Whether to verify the gateway's certificate
        timeout: Request timeout in seconds
    """

    base_url: str
    username: str = ""
    password: str = ""
    verify_ssl: bool = False
    timeout: int = DEFAULT_TIMEOUT

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    def validate(self) -> None:
        """Validate configuration completeness.

        Raises:
            ValueError: If the URL is missing or not http(s)
        """
        if not self.base_url:
            raise ValueError("base_url is required")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")

    def create_client(self, **kwargs: Any) -> GatewayClient:
        """Validate and build a gateway client."""
        from .gateway.client import GatewayClient

        self.validate()
        return GatewayClient(
            self.base_url,
            self.username,
            self.password,
            verify_ssl=self.verify_ssl,
            timeout=self.timeout,
            **kwargs,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return {
            "base_url": self.base_url,
            "username": self.username,
            "password": self.password,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GatewayConfig:
        """Create configuration from dictionary."""
        return cls(
            base_url=data.get("base_url", ""),
            username=data.get("username", ""),
            password=data.get("password", ""),
            verify_ssl=bool(data.get("verify_ssl", False)),
            timeout=int(data.get("timeout", DEFAULT_TIMEOUT)),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GatewayConfig:
        """Create configuration from ``ENVOY_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            base_url=env.get(ENV_GATEWAY_URL, ""),
            username=env.get(ENV_GATEWAY_USERNAME, ""),
            password=env.get(ENV_GATEWAY_PASSWORD, ""),
        )


__all__ = [
    "CloudConfig",
    "GatewayConfig",
]
