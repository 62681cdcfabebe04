"""Observability helpers for RawGraph."""

from __future__ import annotations

import logging
import time
from typing import Sequence

import structlog
from prometheus_client import Counter, Histogram

_logger_configured = False


def configure_logging(level: int = logging.INFO) -> None:
    global _logger_configured  # noqa: PLW0603 - module-level guard
    if _logger_configured:
        return
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _logger_configured = True


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_correlation_id() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str = "rawgraph") -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


class PanelMetrics:
    """Prometheus metrics for the retrieval and series stages."""

    segment_latency = Histogram(
        "rawgraph_segment_duration_seconds",
        "Time spent waiting for one index segment.",
        buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
    )
    segment_hits = Histogram(
        "rawgraph_segment_hit_count",
        "Raw hits merged per segment.",
        buckets=(0, 10, 100, 500, 1000, 2500, 5000),
    )
    stale_results = Counter(
        "rawgraph_stale_results_total",
        "Segment results discarded because a newer refresh started.",
    )
    retrieval_errors = Counter(
        "rawgraph_retrieval_errors_total",
        "Segment requests that returned or raised an error.",
    )
    plotted_points = Histogram(
        "rawgraph_plotted_points",
        "Points per derived series after a merge.",
        buckets=(0, 10, 100, 500, 1000, 5000, 20000),
    )

    @classmethod
    def observe_segment(cls, duration_seconds: float, hit_count: int) -> None:
        cls.segment_latency.observe(duration_seconds)
        cls.segment_hits.observe(hit_count)

    @classmethod
    def observe_series(cls, point_counts: Sequence[int]) -> None:
        for count in point_counts:
            cls.plotted_points.observe(count)

    @classmethod
    def record_stale(cls) -> None:
        cls.stale_results.inc()

    @classmethod
    def record_error(cls) -> None:
        cls.retrieval_errors.inc()


class TimedSection:
    """Context manager capturing elapsed time for metrics."""

    def __init__(self) -> None:
        self._start = 0.0
        self.duration = 0.0

    def __enter__(self) -> "TimedSection":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401
        self.duration = time.perf_counter() - self._start


__all__ = [
    "PanelMetrics",
    "TimedSection",
    "bind_correlation_id",
    "clear_correlation_id",
    "configure_logging",
    "get_logger",
]
