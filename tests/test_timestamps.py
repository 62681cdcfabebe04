from __future__ import annotations

import pytest

from rawgraph.series.timestamps import TimestampFormatError, parse_timestamp


def test_parse_whole_seconds():
    assert parse_timestamp("2020-01-01T00:00:00Z") == 1577836800000
    assert parse_timestamp("2020-01-01T00:01:00Z") == 1577836860000


def test_parse_field_by_field():
    assert parse_timestamp("2020-02-29T12:30:45Z") == 1582979445000


def test_fractional_seconds_are_milliseconds():
    assert parse_timestamp("2020-01-01T00:00:00.123Z") == 1577836800123
    assert parse_timestamp("2020-01-01T00:00:00.5Z") == 1577836800500
    assert parse_timestamp("2020-01-01T00:00:00.123456Z") == 1577836800123


def test_parse_is_deterministic():
    value = "2013-07-04T18:45:12.250Z"
    assert parse_timestamp(value) == parse_timestamp(value)


@pytest.mark.parametrize(
    "value",
    [
        "2020-01-01 00:00:00Z",
        "2020-01-01T00:00:00+01:00",
        "2020-01-01T00:00:00Zjunk",
        "2020-13-01T00:00:00Z",
        "2020-01-01T00:00Z",
        "2020-01-01T00:00:00.abcZ",
        "",
    ],
)
def test_malformed_input_raises(value: str):
    with pytest.raises(TimestampFormatError):
        parse_timestamp(value)


def test_non_string_raises():
    with pytest.raises(TimestampFormatError):
        parse_timestamp(1577836800000)  # type: ignore[arg-type]
