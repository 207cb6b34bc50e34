"""Unit tests for timestamp encodings and tagged-section folding."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest
from pydantic import BaseModel

from pyenlighten.decoding import (
    IsoDate,
    UnixSeconds,
    UnixSecondsStr,
    fold_sections,
    format_date,
    split_sections,
    validate,
)
from pyenlighten.exceptions import (
    EnlightenDecodeError,
    MissingSectionError,
    UnknownSectionError,
)


class Stamped(BaseModel):
    seconds: UnixSeconds | None = None
    seconds_str: UnixSecondsStr | None = None
    day: IsoDate | None = None


class TestTimestampEncodings:
    def test_unix_seconds(self) -> None:
        stamped = validate(Stamped, {"seconds": 1670878465})
        assert stamped.seconds == datetime(2022, 12, 12, 20, 54, 25, tzinfo=UTC)

    def test_unix_seconds_string(self) -> None:
        stamped = validate(Stamped, {"seconds_str": "1670878465"})
        assert stamped.seconds_str == datetime(2022, 12, 12, 20, 54, 25, tzinfo=UTC)

    def test_iso_date(self) -> None:
        assert validate(Stamped, {"day": "2022-01-01"}).day == date(2022, 1, 1)

    @pytest.mark.parametrize(
        "payload",
        [
            {"seconds": "1670878465"},
            {"seconds": 1670878465.5},
            {"seconds": True},
            {"seconds": 10**20},
            {"seconds_str": 1670878465},
            {"seconds_str": "12:00"},
            {"seconds_str": "9" * 30},
            {"day": "2022-13-01"},
            {"day": "01/01/2022"},
            {"day": 20220101},
        ],
    )
    def test_wrong_encoding_rejected(self, payload: dict[str, object]) -> None:
        """Each field accepts only its own encoding."""
        with pytest.raises(EnlightenDecodeError, match="Stamped"):
            validate(Stamped, payload)

    def test_format_date(self) -> None:
        assert format_date(date(2022, 1, 5)) == "2022-01-05"


class TestSections:
    def test_split(self) -> None:
        pairs = split_sections([{"type": "A", "x": 1}, {"type": "B"}], "test")

        assert pairs == [("A", {"type": "A", "x": 1}), ("B", {"type": "B"})]

    def test_split_custom_key(self) -> None:
        pairs = split_sections([{"measurementType": "net"}], "test", key="measurementType")

        assert pairs[0][0] == "net"

    def test_split_rejects_non_list(self) -> None:
        with pytest.raises(EnlightenDecodeError, match="Expected a list"):
            split_sections({"type": "A"}, "test")

    def test_split_rejects_missing_discriminator(self) -> None:
        with pytest.raises(EnlightenDecodeError, match="without a 'type' field"):
            split_sections([{"devices": []}], "test")

    def test_fold(self) -> None:
        buckets = fold_sections([("A", {"n": 1}), ("B", {"n": 2})], ("A", "B"), "test")

        assert buckets == {"A": {"n": 1}, "B": {"n": 2}}

    def test_fold_missing(self) -> None:
        with pytest.raises(MissingSectionError) as exc_info:
            fold_sections([("A", {})], ("A", "B"), "test")

        assert exc_info.value.section == "B"
        assert str(exc_info.value) == "Missing 'B' test section"

    def test_fold_unknown(self) -> None:
        with pytest.raises(UnknownSectionError) as exc_info:
            fold_sections([("A", {}), ("Z", {}), ("B", {})], ("A", "B"), "test")

        assert exc_info.value.section == "Z"
        assert str(exc_info.value) == "Unknown test section 'Z'"

    def test_fold_unknown_reported_before_missing(self) -> None:
        with pytest.raises(UnknownSectionError):
            fold_sections([("Z", {})], ("A", "B"), "test")

    def test_fold_duplicate_keeps_last(self) -> None:
        buckets = fold_sections([("A", {"n": 1}), ("A", {"n": 2})], ("A",), "test")

        assert buckets["A"] == {"n": 2}
