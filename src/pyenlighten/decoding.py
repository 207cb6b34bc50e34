"""Shared decoding helpers for Enlighten and gateway payloads.

Two concerns live here:

1. **Timestamp encodings.** The same logical value (a point in time) shows up
   in three wire encodings, and the encoding is fixed by the field it comes
   from, never guessed from the value:

   - :data:`UnixSeconds` - integer seconds since the epoch
   - :data:`UnixSecondsStr` - seconds since the epoch as a decimal string
   - :data:`IsoDate` - ``YYYY-MM-DD`` date without a time

2. **Tagged sections.** Several payloads are JSON arrays of heterogeneous
   objects told apart by a discriminator field. They are decoded in two steps:
   :func:`split_sections` turns the array into ``(discriminator, payload)``
   pairs and :func:`fold_sections` buckets the pairs into a closed set of
   known sections, raising on a missing or unknown discriminator.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import UTC, date, datetime
from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, BeforeValidator, ValidationError

from .constants import DATE_FORMAT
from .exceptions import EnlightenDecodeError, MissingSectionError, UnknownSectionError

ModelT = TypeVar("ModelT", bound=BaseModel)


def _from_unix_seconds(seconds: int) -> datetime:
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError) as err:
        raise ValueError(f"Unix seconds out of range: {seconds!r}") from err


def _parse_unix_seconds(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected integer Unix seconds, got {value!r}")
    return _from_unix_seconds(value)


def _parse_unix_seconds_str(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.lstrip("-").isdigit():
        raise ValueError(f"expected Unix seconds as a decimal string, got {value!r}")
    return _from_unix_seconds(int(value))


def _parse_iso_date(value: Any) -> Any:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"expected a YYYY-MM-DD date, got {value!r}")
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError as err:
        raise ValueError(f"expected a YYYY-MM-DD date, got {value!r}") from err


UnixSeconds = Annotated[datetime, BeforeValidator(_parse_unix_seconds)]
UnixSecondsStr = Annotated[datetime, BeforeValidator(_parse_unix_seconds_str)]
IsoDate = Annotated[date, BeforeValidator(_parse_iso_date)]


def format_date(value: date) -> str:
    """Format a date the way the cloud API expects it in query strings."""
    return value.strftime(DATE_FORMAT)


def split_sections(
    raw: Any, context: str, key: str = "type"
) -> list[tuple[str, dict[str, Any]]]:
    """Turn a tagged array into ``(discriminator, payload)`` pairs.

    Args:
        raw: The decoded JSON array
        context: Payload name used in error messages (e.g. ``"inventory"``)
        key: Name of the discriminator field

    Raises:
        EnlightenDecodeError: If ``raw`` is not a list of objects carrying a
            string discriminator
    """
    if not isinstance(raw, list):
        raise EnlightenDecodeError(
            f"Expected a list of {context} sections, got {type(raw).__name__}"
        )
    pairs: list[tuple[str, dict[str, Any]]] = []
    for entry in raw:
        if not isinstance(entry, dict) or not isinstance(entry.get(key), str):
            raise EnlightenDecodeError(f"{context.capitalize()} section without a '{key}' field")
        pairs.append((entry[key], entry))
    return pairs


def fold_sections(
    pairs: list[tuple[str, dict[str, Any]]],
    known: Collection[str],
    context: str,
) -> dict[str, dict[str, Any]]:
    """Bucket section pairs by discriminator.

    Every discriminator in ``known`` is required. A repeated discriminator
    replaces the earlier section.

    Raises:
        UnknownSectionError: On the first discriminator not in ``known``
        MissingSectionError: On the first ``known`` discriminator never seen
    """
    buckets: dict[str, dict[str, Any]] = {}
    for tag, payload in pairs:
        if tag not in known:
            raise UnknownSectionError(tag, context)
        buckets[tag] = payload
    for tag in known:
        if tag not in buckets:
            raise MissingSectionError(tag, context)
    return buckets


def validate(model: type[ModelT], data: Any) -> ModelT:
    """Validate ``data`` into ``model``, surfacing structured decode errors.

    Structured errors raised by field validators (invalid enum tokens) are
    re-raised as themselves; any other validation failure becomes a plain
    :class:`EnlightenDecodeError`.
    """
    try:
        return model.model_validate(data)
    except ValidationError as err:
        for error in err.errors():
            cause = error.get("ctx", {}).get("error")
            if isinstance(cause, EnlightenDecodeError):
                raise cause from err
        raise EnlightenDecodeError(f"Invalid {model.__name__} payload: {err}") from err


__all__ = [
    "IsoDate",
    "UnixSeconds",
    "UnixSecondsStr",
    "fold_sections",
    "format_date",
    "split_sections",
    "validate",
]
