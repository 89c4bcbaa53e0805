"""
Prometheus metrics for repolang monitoring.

Usage:
    from repolang.metrics import track_latency, COMPUTE_LATENCY

    @track_latency(COMPUTE_LATENCY)
    def compute(...):
        ...
"""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Callable, TypeVar

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

T = TypeVar("T")

COMPUTE_LATENCY = Histogram(
    "repolang_compute_latency_seconds",
    "Language stats computation latency",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)

CACHE_DECISIONS_TOTAL = Counter(
    "repolang_cache_decisions_total",
    "Cache state observed before each computation",
    ["state"],
)

FILES_CLASSIFIED_TOTAL = Counter(
    "repolang_files_classified_total",
    "Blobs read and classified (memo misses only)",
    ["mode"],
)

CACHE_WRITES_TOTAL = Counter(
    "repolang_cache_writes_total",
    "Cache persistence attempts",
    ["status"],
)


def track_latency(metric: Histogram) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator to track function latency."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: object, **kwargs: object) -> T:
            start = time.time()
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.error(f"{func.__name__} failed: {e}")
                raise
            finally:
                metric.observe(time.time() - start)

        return wrapper  # type: ignore[return-value]

    return decorator
