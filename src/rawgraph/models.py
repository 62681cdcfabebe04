"""Shared domain models used across the RawGraph pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence, Union

FieldValue = Union[int, float, str, bool, list, None]

Point = tuple[int, float]


def flatten_source(source: Mapping[str, Any], root: str = "") -> dict[str, FieldValue]:
    """Flatten a nested search-hit source into dotted keys.

    Lists are kept whole, so an array field never reads as a number.
    """

    flat: dict[str, FieldValue] = {}
    for key, value in source.items():
        name = f"{root}.{key}" if root else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten_source(value, name))
        elif isinstance(value, (list, tuple)):
            flat[name] = list(value)
        else:
            flat[name] = value
    return dict(sorted(flat.items()))


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class RawDocument:
    """Flattened search hit."""

    source: Mapping[str, FieldValue]
    highlight: Mapping[str, FieldValue] = field(default_factory=dict)

    @classmethod
    def from_hit(cls, hit: Mapping[str, Any]) -> "RawDocument":
        return cls(
            source=flatten_source(hit.get("_source") or {}),
            highlight=flatten_source(hit.get("highlight") or {}),
        )

    def get(self, name: str) -> FieldValue:
        """Return the value stored under ``name``, or ``None`` when absent."""

        value: Any
        if name in self.source:
            value = self.source[name]
        else:
            # a dotted name may also refer to a nested object that was kept whole
            head, _, rest = name.partition(".")
            value = self.source.get(head)
            while rest and isinstance(value, Mapping):
                head, _, rest = rest.partition(".")
                value = value.get(head)
            if rest:
                return None
        return None if isinstance(value, Mapping) else value

    def number(self, name: str) -> int | float | None:
        value = self.get(name)
        return value if _is_number(value) else None


@dataclass(frozen=True)
class PlotSeries:
    """Render-ready point sequence for one visible series."""

    points: tuple[Point, ...]
    hit_count: int
    label: str | None
    color: str | None

    def as_pairs(self) -> list[list[float]]:
        return [[ts, value] for ts, value in self.points]


@dataclass(frozen=True)
class TimeRange:
    """UTC-normalized time window."""

    from_: datetime
    to: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "from_", _as_utc(self.from_))
        object.__setattr__(self, "to", _as_utc(self.to))
        if self.from_ > self.to:
            raise ValueError(f"Time range starts after it ends: {self.from_} > {self.to}")

    @classmethod
    def from_millis(cls, from_ms: float, to_ms: float) -> "TimeRange":
        return cls(
            from_=datetime.fromtimestamp(from_ms / 1000, tz=timezone.utc),
            to=datetime.fromtimestamp(to_ms / 1000, tz=timezone.utc),
        )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeFilter:
    """Time filter entry held by the filter store."""

    from_: datetime
    to: datetime
    field: str
    type: str = "time"

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(from_=self.from_, to=self.to)


@dataclass(frozen=True)
class RenderReady:
    """Snapshot handed to the drawing boundary after a successful merge."""

    token: int
    series: Sequence[PlotSeries]
    hits: int
