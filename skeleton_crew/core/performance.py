# CREW_FEAT: performance-001
"""
Skeleton Crew - Performance Monitoring
======================================

Optional timing helpers. The no-op monitor is the default so a runtime
pays nothing unless monitoring is enabled.
"""

import time
from typing import Callable, Dict


class NoOpPerformanceMonitor:
    """Monitor that records nothing."""

    def start_timer(self, label: str) -> Callable[[], float]:
        return lambda: 0.0

    def record_metric(self, name: str, value: float) -> None:
        pass

    def get_metrics(self) -> Dict[str, float]:
        return {}


class SimplePerformanceMonitor:
    """Keeps the last recorded value per metric name (milliseconds for timers)."""

    def __init__(self):
        self._metrics: Dict[str, float] = {}

    def start_timer(self, label: str) -> Callable[[], float]:
        """Start a timer; calling the returned function records and returns elapsed ms."""
        start = time.perf_counter()

        def stop() -> float:
            duration_ms = (time.perf_counter() - start) * 1000
            self.record_metric(label, duration_ms)
            return duration_ms

        return stop

    def record_metric(self, name: str, value: float) -> None:
        self._metrics[name] = value

    def get_metrics(self) -> Dict[str, float]:
        return dict(self._metrics)


def create_performance_monitor(enabled: bool = False):
    """Create a monitor for the given setting."""
    return SimplePerformanceMonitor() if enabled else NoOpPerformanceMonitor()


__all__ = [
    "NoOpPerformanceMonitor",
    "SimplePerformanceMonitor",
    "create_performance_monitor",
]
