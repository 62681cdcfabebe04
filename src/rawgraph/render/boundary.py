"""Hand-off between derived series and the drawing library."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any, Sequence, Union
from zoneinfo import ZoneInfo

from rawgraph.config import PanelConfig
from rawgraph.models import PlotSeries

NO_SERIES_MESSAGE = "No series to draw for the moment"
MALFORMED_SERIES_MESSAGE = "Something is wrong about alias series or color series"
AXIS_COLOR = "#c8c8c8"


@dataclass(frozen=True)
class SeriesPrepared:
    series: list[dict[str, Any]]
    options: dict[str, Any]


@dataclass(frozen=True)
class SeriesPreparationFailed:
    """Shown inline in place of the chart."""

    message: str


SeriesPreparation = Union[SeriesPrepared, SeriesPreparationFailed]


def prepare_series(series: Sequence[PlotSeries], config: PanelConfig) -> SeriesPreparation:
    if not series:
        return SeriesPreparationFailed(NO_SERIES_MESSAGE)
    prepared: list[dict[str, Any]] = []
    for item in series:
        if item.color is None:
            return SeriesPreparationFailed(MALFORMED_SERIES_MESSAGE)
        prepared.append(
            {
                "label": item.label or "",
                "color": item.color,
                "data": item.as_pairs(),
                "hits": item.hit_count,
            }
        )
    return SeriesPrepared(series=prepared, options=build_plot_options(config))


def build_plot_options(config: PanelConfig) -> dict[str, Any]:
    stack = True if config.stack else None
    options: dict[str, Any] = {
        "legend": {"show": False},
        "series": {
            "stackpercent": config.percentage if config.stack else False,
            "stack": None if config.percentage else stack,
            "lines": {
                "show": config.lines,
                "fill": config.fill / 10,
                "lineWidth": config.line_width,
                "steps": False,
            },
            "bars": {"show": config.bars, "fill": 1, "barWidth": 1},
            "points": {"show": config.points, "fill": 1, "fillColor": False, "radius": 5},
            "shadowSize": 1,
        },
        "yaxis": {
            "show": config.show_y_axis,
            "min": 0,
            "max": 100 if config.percentage and config.stack else None,
            "color": AXIS_COLOR,
        },
        "xaxis": {
            "timezone": config.timezone,
            "show": config.show_x_axis,
            "mode": "time",
            "timeformat": "%H:%M:%S",
            "label": "Datetime",
            "color": AXIS_COLOR,
        },
        "grid": {
            "backgroundColor": None,
            "borderWidth": 0,
            "borderColor": "#eee",
            "color": "#fff",
            "hoverable": True,
        },
        "colors": list(config.colors),
    }
    if config.interactive:
        options["selection"] = {"mode": "x", "color": "#aaa"}
    return options


def resolve_timezone(name: str) -> tzinfo | None:
    """``browser`` means the host's local zone, returned as ``None``."""

    if name == "browser":
        return None
    if name == "utc":
        return timezone.utc
    return ZoneInfo(name)


def tooltip_content(color: str, value: float, epoch_ms: float, timezone_name: str = "browser") -> str:
    """Tooltip markup for a hovered data point."""

    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).astimezone(resolve_timezone(timezone_name))
    swatch = (
        "<div style='vertical-align:middle;display:inline-block;background:"
        f"{color};height:15px;width:15px;border-radius:10px;'></div>"
    )
    return f"{swatch} {value:.0f} @ {moment:%m/%d %H:%M:%S}"
