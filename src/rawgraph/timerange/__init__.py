"""Time-range state and zoom arithmetic."""

from .store import FilterStore, InMemoryFilterStore
from .zoom import TimeRangeController, zoom_range

__all__ = ["FilterStore", "InMemoryFilterStore", "TimeRangeController", "zoom_range"]
