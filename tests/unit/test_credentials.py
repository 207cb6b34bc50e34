"""Unit tests for the shared credential store."""

from __future__ import annotations

import asyncio

import pytest

from pyenlighten.client import token_auth_header
from pyenlighten.credentials import CredentialStore, bearer_header
from pyenlighten.models import Tokens


def test_bearer_header() -> None:
    assert bearer_header("abc") == "Bearer abc"


def test_token_auth_header() -> None:
    # base64("id:secret")
    assert token_auth_header("id", "secret") == "Basic aWQ6c2VjcmV0"


class TestCredentialStore:
    @pytest.mark.asyncio
    async def test_initial_header(self) -> None:
        store = CredentialStore(Tokens(access="A", refresh="R"))

        assert await store.auth_header() == "Bearer A"
        assert store.tokens == Tokens(access="A", refresh="R")

    @pytest.mark.asyncio
    async def test_replace_swaps_pair_and_header(self) -> None:
        store = CredentialStore(Tokens(access="A", refresh="R"))

        await store.replace(Tokens(access="B", refresh="S"))

        assert await store.auth_header() == "Bearer B"
        assert store.tokens.refresh == "S"

    @pytest.mark.asyncio
    async def test_readers_never_see_mixed_state(self) -> None:
        """Concurrent readers get either the old or the new header."""
        store = CredentialStore(Tokens(access="A", refresh="R"))

        async def read() -> str:
            await asyncio.sleep(0)
            return await store.auth_header()

        results = await asyncio.gather(
            *(read() for _ in range(50)),
            store.replace(Tokens(access="B", refresh="S")),
            *(read() for _ in range(50)),
        )

        headers = {value for value in results if value is not None}
        assert headers <= {"Bearer A", "Bearer B"}
        assert await store.auth_header() == "Bearer B"

    def test_tokens_are_frozen(self) -> None:
        tokens = Tokens(access="A", refresh="R")

        with pytest.raises(ValueError):
            tokens.access = "B"  # type: ignore[misc]
