"""Service layer orchestrations for RawGraph."""

from .accumulator import AccumulatorState, ResultAccumulator, SegmentOutcome, SegmentResult, parse_error
from .events import PanelEvents

__all__ = [
    "AccumulatorState",
    "PanelEvents",
    "ResultAccumulator",
    "SegmentOutcome",
    "SegmentResult",
    "parse_error",
]
