"""Segment-by-segment accumulation of raw hits under a request token."""

from __future__ import annotations

import itertools
import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from rawgraph.config import PanelConfig
from rawgraph.metrics.observability import PanelMetrics, get_logger
from rawgraph.models import PlotSeries, RawDocument, RenderReady
from rawgraph.series.demux import demultiplex

_NESTED_ERROR = re.compile(r"nested: (.*?);")


class AccumulatorState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    MERGING = "merging"


class SegmentOutcome(str, Enum):
    MERGED = "merged"
    STALE = "stale"
    ERROR = "error"


@dataclass(frozen=True)
class SegmentResult:
    """What happened to one segment response."""

    outcome: SegmentOutcome
    token: int
    segment: int
    render: RenderReady | None = None
    error: str | None = None

    @property
    def merged(self) -> bool:
        return self.outcome is SegmentOutcome.MERGED


def parse_error(error: Any) -> str:
    """Turn an engine error payload into a message fit for display."""

    if isinstance(error, str):
        match = _NESTED_ERROR.search(error)
        return match.group(1) if match else error
    if isinstance(error, Mapping):
        for cause in error.get("root_cause") or []:
            if isinstance(cause, Mapping) and cause.get("reason"):
                return str(cause["reason"])
        if error.get("reason"):
            return str(error["reason"])
        return json.dumps(error, default=str)
    return str(error)


def _hit_total(hits: Mapping[str, Any], fallback: int) -> int:
    total = hits.get("total")
    if isinstance(total, Mapping):
        total = total.get("value")
    if isinstance(total, int) and not isinstance(total, bool):
        return total
    return fallback


class ResultAccumulator:
    """Owns the accumulated documents and the series derived from them.

    Only responses carrying the active token may change state; anything else
    is a leftover from a superseded refresh and is dropped.
    """

    def __init__(self, config: PanelConfig) -> None:
        self._config = config
        self._tokens = itertools.count(1)
        self._token: int | None = None
        self._documents: list[RawDocument] = []
        self._hits = 0
        self._series: tuple[PlotSeries, ...] = ()
        self._state = AccumulatorState.IDLE
        self._error: str | None = None
        self._logger = get_logger("accumulator")

    @property
    def config(self) -> PanelConfig:
        return self._config

    @property
    def token(self) -> int | None:
        return self._token

    @property
    def state(self) -> AccumulatorState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state is AccumulatorState.REQUESTING

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def documents(self) -> tuple[RawDocument, ...]:
        return tuple(self._documents)

    @property
    def series(self) -> tuple[PlotSeries, ...]:
        return self._series

    def is_current(self, token: int | None) -> bool:
        return token is not None and token == self._token

    def begin_refresh(self) -> int:
        """Start a top-level refresh: new token, empty document set."""

        self._token = next(self._tokens)
        self._documents = []
        self._hits = 0
        self._error = None
        self._state = AccumulatorState.REQUESTING
        self._logger.debug("refresh.begin", token=self._token)
        return self._token

    def begin_segment(self, token: int, segment: int) -> bool:
        if not self.is_current(token):
            return False
        self._error = None
        self._state = AccumulatorState.REQUESTING
        self._logger.debug("segment.begin", token=token, segment=segment)
        return True

    def complete(self, token: int, segment: int, response: Mapping[str, Any]) -> SegmentResult:
        if not self.is_current(token):
            return self._stale(token, segment)
        if response.get("error") is not None:
            return self.fail(token, segment, parse_error(response["error"]))

        self._state = AccumulatorState.MERGING
        hits = response.get("hits") or {}
        rows = list(hits.get("hits") or [])
        self._documents.extend([RawDocument.from_hit(row) for row in rows])
        self._hits += _hit_total(hits, len(rows))
        self._series = demultiplex(self._documents, self._config)
        self._state = AccumulatorState.IDLE
        PanelMetrics.observe_series([series.hit_count for series in self._series])
        self._logger.info(
            "segment.merged",
            token=token,
            segment=segment,
            new_documents=len(rows),
            total_documents=len(self._documents),
            hits=self._hits,
        )
        return SegmentResult(
            outcome=SegmentOutcome.MERGED,
            token=token,
            segment=segment,
            render=self.snapshot(),
        )

    def fail(self, token: int, segment: int, message: str) -> SegmentResult:
        """Record a retrieval error; accumulated data is kept as-is."""

        if not self.is_current(token):
            return self._stale(token, segment)
        self._error = message
        self._state = AccumulatorState.IDLE
        PanelMetrics.record_error()
        self._logger.warning("segment.error", token=token, segment=segment, detail=message)
        return SegmentResult(outcome=SegmentOutcome.ERROR, token=token, segment=segment, error=message)

    def apply_config(self, config: PanelConfig) -> RenderReady | None:
        """Swap the configuration and re-derive series from what is held."""

        self._config = config
        self._series = demultiplex(self._documents, config)
        return self.snapshot()

    def snapshot(self) -> RenderReady | None:
        if self._token is None:
            return None
        return RenderReady(token=self._token, series=self._series, hits=self._hits)

    def _stale(self, token: int, segment: int) -> SegmentResult:
        PanelMetrics.record_stale()
        self._logger.debug("segment.stale", token=token, active_token=self._token, segment=segment)
        return SegmentResult(outcome=SegmentOutcome.STALE, token=token, segment=segment)
