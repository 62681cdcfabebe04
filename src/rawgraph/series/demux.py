"""Split accumulated hits into one point sequence per visible series."""

from __future__ import annotations

from typing import Sequence

from rawgraph.config import PanelConfig
from rawgraph.metrics.observability import get_logger
from rawgraph.models import PlotSeries, Point, RawDocument
from rawgraph.series.timestamps import TimestampFormatError, parse_timestamp

_logger = get_logger("series")


def demultiplex(documents: Sequence[RawDocument], config: PanelConfig) -> tuple[PlotSeries, ...]:
    """Rebuild every visible series from the full document set.

    A document contributes a point to a series when it holds a number at the
    series' value field and a timestamp string at the panel's time field.
    Points keep document arrival order; the search request already sorts them.
    """

    visible = config.visible_series
    points: list[list[Point]] = [[] for _ in visible]
    skipped = 0
    for document in documents:
        timestamp: int | None = None
        for slot, (_, spec) in enumerate(visible):
            if spec.value_field is None:
                continue
            value = document.number(spec.value_field)
            if value is None:
                continue
            if timestamp is None:
                timestamp = _document_time(document, config.time_field)
                if timestamp is None:
                    skipped += 1
                    break
            points[slot].append((timestamp, value))
    if skipped:
        _logger.debug("series.skipped_documents", count=skipped, time_field=config.time_field)
    return tuple(
        PlotSeries(
            points=tuple(series_points),
            hit_count=len(series_points),
            label=spec.value_field,
            color=config.color_for(index),
        )
        for (index, spec), series_points in zip(visible, points)
    )


def _document_time(document: RawDocument, time_field: str) -> int | None:
    raw = document.get(time_field)
    if not isinstance(raw, str):
        return None
    try:
        return parse_timestamp(raw)
    except TimestampFormatError:
        return None
