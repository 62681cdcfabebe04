"""Zoom arithmetic and the time-range controller driven by the chart."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from rawgraph.config import PanelConfig
from rawgraph.metrics.observability import get_logger
from rawgraph.models import TimeFilter, TimeRange
from rawgraph.timerange.store import FilterStore

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def zoom_range(current: TimeRange, factor: float, now: datetime) -> TimeRange:
    """Scale ``current`` around its center by ``factor``.

    ``factor < 1`` narrows, ``factor > 1`` widens. A window that did not reach
    past ``now`` is shifted back so the result ends exactly at ``now``.
    """

    if factor <= 0:
        raise ValueError(f"Zoom factor must be positive, got {factor}")
    span = current.to - current.from_
    center = current.to - span / 2
    new_to = center + span * factor / 2
    new_from = center - span * factor / 2

    if new_to > now and current.to <= now:
        offset = new_to - now
        new_from = new_from - offset
        new_to = now
    return TimeRange(from_=new_from, to=new_to)


class TimeRangeController:
    """Turns zoom clicks and range selections into time filters."""

    def __init__(self, store: FilterStore, config: PanelConfig, *, clock: Clock | None = None) -> None:
        self._store = store
        self._config = config
        self._clock = clock or _utc_now
        self._logger = get_logger("timerange")

    def apply_config(self, config: PanelConfig) -> None:
        self._config = config

    async def zoom(self, factor: float) -> TimeRange | None:
        current = self._store.get_time_range("min")
        if current is None:
            self._logger.warning("zoom.no_time_range", factor=factor)
            return None
        new_range = zoom_range(current, factor, self._clock())
        if factor > 1:
            self._store.remove_filters_by_type("time")
        self._install(new_range)
        self._logger.info(
            "zoom.applied",
            factor=factor,
            from_=new_range.from_.isoformat(),
            to=new_range.to.isoformat(),
        )
        await self._store.refresh()
        return new_range

    async def select_range(self, from_ms: float, to_ms: float) -> TimeRange:
        """Install the range dragged out on the chart."""

        selected = TimeRange.from_millis(min(from_ms, to_ms), max(from_ms, to_ms))
        self._install(selected)
        await self._store.refresh()
        return selected

    def _install(self, time_range: TimeRange) -> int:
        return self._store.set_filter(
            TimeFilter(from_=time_range.from_, to=time_range.to, field=self._config.time_field)
        )
