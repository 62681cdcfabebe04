"""Panel orchestration: segment requests, merging, render and zoom hand-off."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Sequence

from rawgraph.config import PanelConfig
from rawgraph.metrics.observability import PanelMetrics, TimedSection, get_logger
from rawgraph.models import TimeRange
from rawgraph.retrieval.engine import SearchEngine, SearchEngineError
from rawgraph.retrieval.request import Inspector, build_search_request, render_inspector
from rawgraph.services.accumulator import ResultAccumulator, SegmentOutcome, SegmentResult
from rawgraph.services.events import PanelEvents
from rawgraph.timerange.store import FilterStore
from rawgraph.timerange.zoom import TimeRangeController


class PanelController:
    """Drives one chart panel through its refresh cycles."""

    def __init__(
        self,
        engine: SearchEngine,
        store: FilterStore,
        config: PanelConfig,
        *,
        indices: Sequence[str],
        events: PanelEvents | None = None,
        base_url: str = "",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._engine = engine
        self._store = store
        self._indices = tuple(indices)
        self._events = events or PanelEvents()
        self._base_url = base_url
        self._accumulator = ResultAccumulator(config)
        self._timerange = TimeRangeController(store, config, clock=clock)
        self._inspector: Inspector | None = None
        self._logger = get_logger("panel")
        self._events.on_refresh_requested(self.refresh)

    @property
    def config(self) -> PanelConfig:
        return self._accumulator.config

    @property
    def indices(self) -> tuple[str, ...]:
        return self._indices

    @property
    def accumulator(self) -> ResultAccumulator:
        return self._accumulator

    @property
    def events(self) -> PanelEvents:
        return self._events

    @property
    def inspector(self) -> Inspector | None:
        return self._inspector

    async def get_data(self, segment: int = 0, token: int | None = None) -> SegmentResult | None:
        """Request one segment; segment 0 starts a new refresh."""

        if not self._indices or segment >= len(self._indices):
            return None
        if segment == 0:
            token = self._accumulator.begin_refresh()
        elif token is None or not self._accumulator.begin_segment(token, segment):
            return SegmentResult(outcome=SegmentOutcome.STALE, token=token or 0, segment=segment)

        config = self._accumulator.config
        request = build_search_request(config, self._indices[segment], self._store.bool_filter())
        if config.spyable:
            self._inspector = render_inspector(request, self._base_url, self._indices)

        timer = TimedSection()
        try:
            with timer:
                response = await self._engine.search(request)
        except SearchEngineError as exc:
            return self._accumulator.fail(token, segment, str(exc))
        except Exception as exc:
            self._logger.exception("segment.search_failed", token=token, segment=segment)
            return self._accumulator.fail(token, segment, str(exc) or type(exc).__name__)

        try:
            hits = (response.get("hits") or {}).get("hits") or []
            PanelMetrics.observe_segment(timer.duration, len(hits))
            result = self._accumulator.complete(token, segment, response)
        except (AttributeError, KeyError, TypeError) as exc:
            self._logger.warning("segment.malformed_response", token=token, segment=segment, detail=str(exc))
            return self._accumulator.fail(token, segment, f"Malformed search response: {exc}")
        if result.merged and result.render is not None:
            self._events.emit_render(result.render)
        return result

    async def refresh(self) -> SegmentResult | None:
        """Fetch every index segment in order under one token."""

        result: SegmentResult | None = None
        token: int | None = None
        for segment in range(len(self._indices)):
            result = await self.get_data(segment, token)
            if result is None or not result.merged:
                break
            token = result.token
        if result is not None:
            self._logger.info(
                "refresh.finished",
                token=result.token,
                outcome=result.outcome.value,
                segments=len(self._indices),
            )
        return result

    async def update_config(self, config: PanelConfig, *, refresh: bool = False) -> None:
        """Apply an edited configuration.

        Changes that affect the query need ``refresh=True``; anything else is
        re-derived from the documents already held.
        """

        render = self._accumulator.apply_config(config)
        self._timerange.apply_config(config)
        if refresh:
            await self.refresh()
        elif render is not None:
            self._events.emit_render(render)

    async def zoom(self, factor: float) -> TimeRange | None:
        return await self._timerange.zoom(factor)

    async def select_range(self, from_ms: float, to_ms: float) -> TimeRange:
        return await self._timerange.select_range(from_ms, to_ms)
