"""Parser for the ``YYYY-MM-DDTHH:MM:SS[.fff]Z`` timestamps stored in hits."""

from __future__ import annotations

from datetime import datetime, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TimestampFormatError(ValueError):
    """Raised when a time field does not have the expected UTC shape."""


def parse_timestamp(value: str) -> int:
    """Return UTC epoch milliseconds for ``value``.

    The date and time halves are split on ``T``; the time must end with ``Z``.
    Fractional seconds are optional and read as a decimal fraction truncated
    to whole milliseconds, so ``.5`` is 500 ms. Dashboards that fed the digits
    straight into a millisecond setter read it as 5 ms; three-digit fractions
    agree either way.
    """

    try:
        date_part, time_part = value.split("T")
        year, month, day = (int(part) for part in date_part.split("-"))
        clock, suffix = time_part.split("Z")
        if suffix:
            raise TimestampFormatError(f"Unexpected text after zone designator: {value!r}")
        hour, minute, seconds = clock.split(":")
        whole, _, fraction = seconds.partition(".")
        if fraction and not fraction.isdigit():
            raise TimestampFormatError(f"Malformed fractional seconds: {value!r}")
        millis = int(fraction[:3].ljust(3, "0")) if fraction else 0
        moment = datetime(year, month, day, int(hour), int(minute), int(whole), millis * 1000, tzinfo=timezone.utc)
    except TimestampFormatError:
        raise
    except (AttributeError, ValueError) as exc:
        raise TimestampFormatError(f"Unparseable timestamp: {value!r}") from exc
    delta = moment - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000
