"""Exceptions raised by pyenlighten.

All exceptions inherit from :class:`EnlightenError` so callers can use a
single ``except EnlightenError`` to catch cloud API, gateway and decoding
failures alike.

Decoding errors that originate from enum parsing also inherit from
``ValueError``: pydantic turns a ``ValueError`` raised inside a validator into
a validation error, and :func:`pyenlighten.decoding.validate` unwraps it back
into the structured exception.
"""

from __future__ import annotations


class EnlightenError(Exception):
    """Base exception for all pyenlighten errors."""

    pass


class EnlightenConnectionError(EnlightenError):
    """Failed to reach the cloud service or the gateway."""

    pass


class EnlightenAPIError(EnlightenError):
    """The remote service answered with a non-success status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        """Initialize with the error message and HTTP status.

        Args:
            message: Human-readable error message
            status: HTTP status code, if a response was received
        """
        self.status = status
        super().__init__(message)


class EnlightenAuthError(EnlightenAPIError):
    """Token exchange or refresh was rejected.

    Raised instead of a plain :class:`EnlightenAPIError` so callers can
    re-authenticate rather than retry blindly. A one-time authorization code
    that has already been used fails this way too.
    """

    pass


class EnlightenDecodeError(EnlightenError):
    """A response could not be decoded into the expected records."""

    pass


class MissingSectionError(EnlightenDecodeError):
    """A tagged-section payload lacks a required discriminator."""

    def __init__(self, section: str, context: str) -> None:
        self.section = section
        self.context = context
        super().__init__(f"Missing '{section}' {context} section")


class UnknownSectionError(EnlightenDecodeError):
    """A tagged-section payload contains an unrecognised discriminator."""

    def __init__(self, section: str, context: str) -> None:
        self.section = section
        self.context = context
        super().__init__(f"Unknown {context} section '{section}'")


class InvalidEnumValueError(EnlightenDecodeError, ValueError):
    """A wire token does not map to any known enum member."""

    kind = "enum value"

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f'Invalid {self.kind} "{raw}"')


class InvalidGranularityError(InvalidEnumValueError):
    kind = "granularity"


class InvalidConnectionTypeError(InvalidEnumValueError):
    kind = "connection type"


class InvalidDeviceStatusError(InvalidEnumValueError):
    kind = "device status"


__all__ = [
    "EnlightenError",
    "EnlightenConnectionError",
    "EnlightenAPIError",
    "EnlightenAuthError",
    "EnlightenDecodeError",
    "MissingSectionError",
    "UnknownSectionError",
    "InvalidEnumValueError",
    "InvalidGranularityError",
    "InvalidConnectionTypeError",
    "InvalidDeviceStatusError",
]
