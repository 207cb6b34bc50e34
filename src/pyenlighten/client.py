"""Enphase Enlighten cloud API client.

This module provides the async session manager for the Enlighten v4 API.

Key Features:
- Async/await support with aiohttp
- OAuth2 authorization-code exchange and token refresh
- One shared credential store, so a token refresh reaches every System
  handle without re-authentication
- Support for injected aiohttp.ClientSession
- Typed error handling (auth, connection, API and decode errors)

The client performs no retries, no caching and no automatic refresh. Callers
decide when to call :meth:`EnlightenClient.refresh` and persist the tokens
returned by :meth:`EnlightenClient.tokens`.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from typing import TYPE_CHECKING, Any

import aiohttp
from aiohttp import ClientTimeout

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_REDIRECT_URI,
    DEFAULT_TIMEOUT,
    GRANT_AUTHORIZATION_CODE,
    GRANT_REFRESH_TOKEN,
    SYSTEMS_PATH,
    TOKEN_PATH,
)
from .credentials import CredentialStore
from .decoding import validate
from .exceptions import (
    EnlightenAPIError,
    EnlightenAuthError,
    EnlightenConnectionError,
    EnlightenDecodeError,
)
from .models import AuthResponse, ListSystemsResponse, Tokens

if TYPE_CHECKING:
    from .devices.system import System

_LOGGER = logging.getLogger(__name__)


def token_auth_header(client_id: str, client_secret: str) -> str:
    """Build the HTTP basic header used on the token endpoint."""
    encoded = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode("ascii")
    return f"Basic {encoded}"


class EnlightenClient:
    """Enphase Enlighten cloud API client.

    Build one with :meth:`from_auth_code` (first login) or
    :meth:`preauthenticated` (tokens saved from an earlier run).

    Example:
        ```python
        async with EnlightenClient.preauthenticated(
            api_key, client_id, client_secret, access_token, refresh_token
        ) as client:
            systems = await client.list_systems()
            summaries = await asyncio.gather(*(s.get_summary() for s in systems))

            tokens = await client.refresh()
            save(tokens.model_dump_json())
        ```
    """

    def __init__(
        self,
        api_key: str,
        client_id: str,
        client_secret: str,
        tokens: Tokens,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = DEFAULT_TIMEOUT,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the Enlighten API client.

        Prefer :meth:`from_auth_code` or :meth:`preauthenticated`.

        Args:
            api_key: Application API key, sent as the ``key`` query parameter
            client_id: OAuth2 client id
            client_secret: OAuth2 client secret
            tokens: Current access/refresh token pair
            base_url: Base URL for the API (default: Enphase production)
            timeout: Request timeout in seconds (default: 30)
            session: Optional aiohttp ClientSession for session injection
        """
        self.api_key = api_key
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = ClientTimeout(total=timeout)

        self._token_auth_header = token_auth_header(client_id, client_secret)
        self._credentials = CredentialStore(tokens)
        self._refresh_lock = asyncio.Lock()

        # Session management
        self._session: aiohttp.ClientSession | None = session
        self._owns_session: bool = session is None

    @classmethod
    def preauthenticated(
        cls,
        api_key: str,
        client_id: str,
        client_secret: str,
        access_token: str,
        refresh_token: str,
        **kwargs: Any,
    ) -> EnlightenClient:
        """Create a client from an existing token pair without any request."""
        return cls(
            api_key,
            client_id,
            client_secret,
            Tokens(access=access_token, refresh=refresh_token),
            **kwargs,
        )

    @classmethod
    async def from_auth_code(
        cls,
        api_key: str,
        client_id: str,
        client_secret: str,
        code: str,
        *,
        redirect_uri: str = DEFAULT_REDIRECT_URI,
        **kwargs: Any,
    ) -> EnlightenClient:
        """Exchange a one-time authorization code for a token pair.

        An authorization code can be used once. Exchanging it again fails with
        :class:`EnlightenAuthError`; the caller must obtain a new code rather
        than retry.

        Args:
            api_key: Application API key
            client_id: OAuth2 client id
            client_secret: OAuth2 client secret
            code: Authorization code from the OAuth2 redirect
            redirect_uri: Redirect URI registered with the application
            **kwargs: Forwarded to the constructor (base_url, timeout, session)

        Returns:
            EnlightenClient: Authenticated client

        Raises:
            EnlightenAuthError: If the service rejects the code
            EnlightenConnectionError: If the service cannot be reached
        """
        client = cls(api_key, client_id, client_secret, Tokens(access="", refresh=""), **kwargs)
        try:
            tokens = await client._request_tokens(
                {
                    "grant_type": GRANT_AUTHORIZATION_CODE,
                    "redirect_uri": redirect_uri,
                    "code": code,
                }
            )
        except Exception:
            await client.close()
            raise
        await client._credentials.replace(tokens)
        _LOGGER.info("Authorization code exchanged for a token pair")
        return client

    async def __aenter__(self) -> EnlightenClient:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session.

        Returns:
            aiohttp.ClientSession: The session to use for requests.
        """
        if self._session is not None and not self._owns_session:
            return self._session

        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True

        return self._session

    async def close(self) -> None:
        """Close the session if we own it.

        Only closes the session if it was created by this client,
        not if it was injected.
        """
        if self._session and not self._session.closed and self._owns_session:
            await self._session.close()

    # Credentials

    def tokens(self) -> Tokens:
        """Return the current token pair for external persistence."""
        return self._credentials.tokens.model_copy()

    async def refresh(self) -> Tokens:
        """Exchange the refresh token for a new token pair.

        On success the new pair replaces the old one in the shared credential
        store, so every System handed out by this client uses it on its next
        request. On failure nothing changes and the old access token stays in
        use until the caller decides what to do.

        Refreshes are serialised: a second call waits for the first and then
        refreshes with the token pair it produced.

        Returns:
            Tokens: The new token pair

        Raises:
            EnlightenAuthError: If the service rejects the refresh token
            EnlightenConnectionError: If the service cannot be reached
        """
        async with self._refresh_lock:
            tokens = await self._request_tokens(
                {
                    "grant_type": GRANT_REFRESH_TOKEN,
                    "refresh_token": self._credentials.tokens.refresh,
                }
            )
            await self._credentials.replace(tokens)
        _LOGGER.info("Access token refreshed")
        return tokens.model_copy()

    async def _request_tokens(self, params: dict[str, str]) -> Tokens:
        """Call the token endpoint with the basic auth header."""
        session = await self._get_session()
        url = f"{self.base_url}{TOKEN_PATH}"
        headers = {
            "Authorization": self._token_auth_header,
            "Accept": "application/json",
        }

        try:
            async with session.post(url, params=params, headers=headers) as response:
                response.raise_for_status()
                json_data = await response.json(content_type=None)
        except aiohttp.ClientResponseError as err:
            _LOGGER.warning(
                "Token request (%s) rejected: HTTP %s", params["grant_type"], err.status
            )
            raise EnlightenAuthError(
                f"Token request rejected (HTTP {err.status}): {err.message}", err.status
            ) from err
        except aiohttp.ClientError as err:
            raise EnlightenConnectionError(f"Connection error: {err}") from err
        except json.JSONDecodeError as err:
            raise EnlightenDecodeError(f"Token response is not valid JSON: {err}") from err

        return validate(AuthResponse, json_data).to_tokens()

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Make an authenticated request to the API.

        The API key is added to the query string and the bearer header is read
        from the credential store when the request is made.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API path (appended to base_url)
            params: Extra query parameters

        Returns:
            The decoded JSON body

        Raises:
            EnlightenAPIError: If the API answers with a non-success status
            EnlightenConnectionError: If connection fails
            EnlightenDecodeError: If the body is not JSON
        """
        session = await self._get_session()
        url = f"{self.base_url}{endpoint}"
        query = {"key": self.api_key, **(params or {})}
        headers = {
            "Authorization": await self._credentials.auth_header(),
            "Accept": "application/json",
        }

        _LOGGER.debug("%s %s", method, endpoint)
        try:
            async with session.request(method, url, params=query, headers=headers) as response:
                response.raise_for_status()
                return await response.json(content_type=None)

        except aiohttp.ClientResponseError as err:
            raise EnlightenAPIError(f"HTTP {err.status}: {err.message}", err.status) from err

        except aiohttp.ClientError as err:
            raise EnlightenConnectionError(f"Connection error: {err}") from err

        except json.JSONDecodeError as err:
            raise EnlightenDecodeError(
                f"Response from {endpoint} is not valid JSON: {err}"
            ) from err

    # Systems

    async def list_systems(self) -> list[System]:
        """List the systems visible to the authenticated user.

        Only the first page of the listing is fetched. When the service
        reports more systems than it returned, a warning is logged and the
        remaining systems are not included.

        Returns:
            One System handle per system, all sharing this client's
            credentials

        Example:
            ```python
            for system in await client.list_systems():
                print(system.system_id, system.name, system.energy_today)
            ```
        """
        from .devices.system import System

        response = await self._request("GET", SYSTEMS_PATH)
        listing = validate(ListSystemsResponse, response)

        if listing.total is not None and listing.total > len(listing.systems):
            _LOGGER.warning(
                "Only the first page of systems was fetched (%d of %d); "
                "pagination is not supported",
                len(listing.systems),
                listing.total,
            )

        return [System.from_response(self, system) for system in listing.systems]
