"""Rendering boundary helpers."""

from .boundary import (
    SeriesPreparation,
    SeriesPreparationFailed,
    SeriesPrepared,
    build_plot_options,
    prepare_series,
    tooltip_content,
)

__all__ = [
    "SeriesPreparation",
    "SeriesPreparationFailed",
    "SeriesPrepared",
    "build_plot_options",
    "prepare_series",
    "tooltip_content",
]
