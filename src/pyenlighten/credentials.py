"""Shared credential cell for the Enlighten cloud client.

One :class:`CredentialStore` belongs to one :class:`~pyenlighten.EnlightenClient`
and is shared by reference with every :class:`~pyenlighten.devices.System`
the client hands out. It holds the current token pair together with the
bearer header derived from it, so both always change in a single step.

The lock is held only to snapshot or replace that pair, never across a
network call. Concurrent requests therefore never wait on each other for
longer than the copy of a reference.
"""

from __future__ import annotations

import asyncio
import logging

from .models import Tokens

_LOGGER = logging.getLogger(__name__)


def bearer_header(access_token: str) -> str:
    """Build the ``Authorization`` value for API calls."""
    return f"Bearer {access_token}"


class CredentialStore:
    """Single-writer, multi-reader cell for the current access credentials.

    Example:
        ```python
        store = CredentialStore(Tokens(access="A", refresh="R"))
        await store.auth_header()  # "Bearer A"
        await store.replace(Tokens(access="B", refresh="S"))
        await store.auth_header()  # "Bearer B"
        ```
    """

    def __init__(self, tokens: Tokens) -> None:
        self._lock = asyncio.Lock()
        self._tokens = tokens
        self._auth_header = bearer_header(tokens.access)

    async def auth_header(self) -> str:
        """Return the bearer header current at the time of the call."""
        async with self._lock:
            return self._auth_header

    async def replace(self, tokens: Tokens) -> None:
        """Swap in a new token pair and the header derived from it."""
        header = bearer_header(tokens.access)
        async with self._lock:
            self._tokens = tokens
            self._auth_header = header
        _LOGGER.debug("Credential store updated with a new token pair")

    @property
    def tokens(self) -> Tokens:
        """The current token pair.

        ``Tokens`` is frozen and replaced as a whole, so the returned pair is
        never half old and half new.
        """
        return self._tokens
