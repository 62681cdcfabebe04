"""Filter store holding the active time windows."""

from __future__ import annotations

import itertools
from typing import Any, Literal, Mapping, Protocol

from rawgraph.metrics.observability import get_logger
from rawgraph.models import TimeFilter, TimeRange
from rawgraph.services.events import PanelEvents


class FilterStore(Protocol):
    """Protocol for the dashboard-wide filter/time-range store."""

    def get_time_range(self, mode: Literal["min", "max"] = "min") -> TimeRange | None:
        """Return the combined window of all time filters."""

    def set_filter(self, time_filter: TimeFilter) -> int:
        """Install a filter and return its id."""

    def remove_filters_by_type(self, filter_type: str) -> None:
        """Drop every filter of the given type."""

    def bool_filter(self) -> Mapping[str, Any]:
        """Return the compound filter applied to every search request."""

    async def refresh(self) -> None:
        """Ask every listening panel to run a new top-level query."""


class InMemoryFilterStore:
    """Filter store kept in process memory."""

    def __init__(self, events: PanelEvents | None = None) -> None:
        self._events = events or PanelEvents()
        self._ids = itertools.count(0)
        self._filters: dict[int, TimeFilter] = {}
        self._logger = get_logger("filters")

    @property
    def events(self) -> PanelEvents:
        return self._events

    @property
    def filters(self) -> Mapping[int, TimeFilter]:
        return dict(self._filters)

    def get_time_range(self, mode: Literal["min", "max"] = "min") -> TimeRange | None:
        """``min`` intersects the time filters, ``max`` spans all of them."""

        windows = [f for f in self._filters.values() if f.type == "time"]
        if not windows:
            return None
        if mode == "min":
            start = max(f.from_ for f in windows)
            end = min(f.to for f in windows)
            if start > end:
                return None
        else:
            start = min(f.from_ for f in windows)
            end = max(f.to for f in windows)
        return TimeRange(from_=start, to=end)

    def set_filter(self, time_filter: TimeFilter) -> int:
        filter_id = next(self._ids)
        self._filters[filter_id] = time_filter
        self._logger.info(
            "filter.set",
            filter_id=filter_id,
            type=time_filter.type,
            field=time_filter.field,
            from_=time_filter.from_.isoformat(),
            to=time_filter.to.isoformat(),
        )
        return filter_id

    def remove_filters_by_type(self, filter_type: str) -> None:
        doomed = [filter_id for filter_id, f in self._filters.items() if f.type == filter_type]
        for filter_id in doomed:
            del self._filters[filter_id]

    def bool_filter(self) -> Mapping[str, Any]:
        if not self._filters:
            return {}
        clauses = [
            {
                "range": {
                    f.field: {
                        "gte": f.from_.isoformat(),
                        "lte": f.to.isoformat(),
                        "format": "strict_date_optional_time",
                    }
                }
            }
            for f in self._filters.values()
        ]
        return {"bool": {"must": clauses}}

    async def refresh(self) -> None:
        await self._events.request_refresh()
