from __future__ import annotations

from rawgraph.config import merge_panel_defaults
from rawgraph.models import PlotSeries
from rawgraph.render.boundary import (
    MALFORMED_SERIES_MESSAGE,
    NO_SERIES_MESSAGE,
    SeriesPrepared,
    SeriesPreparationFailed,
    build_plot_options,
    prepare_series,
    tooltip_content,
)


def _series(color: str | None = "#86B22D") -> PlotSeries:
    return PlotSeries(points=((1577836800000, 10),), hit_count=1, label="cpu", color=color)


def test_empty_series_yields_inline_message():
    assert prepare_series([], merge_panel_defaults()) == SeriesPreparationFailed(NO_SERIES_MESSAGE)


def test_missing_color_yields_inline_message():
    assert prepare_series([_series(color=None)], merge_panel_defaults()) == SeriesPreparationFailed(MALFORMED_SERIES_MESSAGE)


def test_prepared_series_carry_label_color_and_data():
    result = prepare_series([_series()], merge_panel_defaults())
    assert isinstance(result, SeriesPrepared)
    assert result.series == [{"label": "cpu", "color": "#86B22D", "data": [[1577836800000, 10]], "hits": 1}]
    assert result.options["xaxis"]["mode"] == "time"


def test_empty_palette_is_reported_as_malformed():
    from rawgraph.models import RawDocument
    from rawgraph.series.demux import demultiplex

    config = merge_panel_defaults({"colors": [], "time_field": "ts", "series": [{"value_field": "cpu"}]})
    series = demultiplex([RawDocument.from_hit({"_source": {"ts": "2020-01-01T00:00:00Z", "cpu": 1}})], config)
    assert prepare_series(series, config) == SeriesPreparationFailed(MALFORMED_SERIES_MESSAGE)


def test_plot_options_for_stacked_percentage():
    options = build_plot_options(merge_panel_defaults({"stack": True, "percentage": True, "fill": 3, "linewidth": 2}))
    assert options["series"]["stackpercent"] is True
    assert options["series"]["stack"] is None
    assert options["series"]["lines"]["fill"] == 0.3
    assert options["series"]["lines"]["lineWidth"] == 2
    assert options["yaxis"]["max"] == 100
    assert options["selection"] == {"mode": "x", "color": "#aaa"}


def test_plot_options_plain_lines():
    options = build_plot_options(merge_panel_defaults({"interactive": False, "x-axis": False}))
    assert options["series"]["stack"] is None
    assert options["series"]["stackpercent"] is False
    assert options["yaxis"]["max"] is None
    assert options["xaxis"]["show"] is False
    assert "selection" not in options


def test_plot_options_stack_only():
    options = build_plot_options(merge_panel_defaults({"stack": True}))
    assert options["series"]["stack"] is True
    assert options["series"]["stackpercent"] is False


def test_tooltip_in_utc():
    content = tooltip_content("#BF6730", 10.4, 1577836861000, "utc")
    assert "background:#BF6730;" in content
    assert content.endswith(" 10 @ 01/01 00:01:01")


def test_tooltip_in_named_zone():
    content = tooltip_content("#BF6730", 3, 1577836800000, "Europe/Bucharest")
    assert content.endswith(" 3 @ 01/01 02:00:00")
