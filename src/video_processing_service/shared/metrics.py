"""Per-job metrics collection."""

import time
from contextlib import contextmanager
from typing import Dict, Any, Iterator, List
from collections import defaultdict


class MetricsCollector:
    """
    Collects stage timings and counters for a single pipeline job.
    Implements IMetricsCollector protocol.

    Not thread-safe: the orchestrator creates one collector per job.
    """

    def __init__(self):
        self._start_time = time.monotonic()
        self._timers: Dict[str, float] = {}
        self._metrics: Dict[str, List[Any]] = defaultdict(list)
        self._counters: Dict[str, int] = defaultdict(int)

    def start_timer(self, name: str) -> None:
        """Start a named timer."""
        self._timers[name] = time.monotonic()

    def stop_timer(self, name: str) -> float:
        """
        Stop a named timer, record ``<name>_duration`` and return elapsed time.

        Raises:
            KeyError: If timer was not started
        """
        if name not in self._timers:
            raise KeyError(f"Timer '{name}' was not started")

        elapsed = time.monotonic() - self._timers.pop(name)
        self.record_metric(f"{name}_duration", elapsed)
        return elapsed

    @contextmanager
    def timer(self, name: str) -> Iterator[None]:
        """Time the enclosed block, recording the duration even if it raises."""
        self.start_timer(name)
        try:
            yield
        finally:
            self.stop_timer(name)

    def record_metric(self, name: str, value: Any) -> None:
        self._metrics[name].append(value)

    def increment_counter(self, name: str, amount: int = 1) -> None:
        self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_metric(self, name: str) -> list:
        return list(self._metrics.get(name, []))

    def get_summary(self) -> Dict[str, Any]:
        """
        Get summary of all metrics.

        Numeric metrics recorded once collapse to their value, repeated ones
        to count/sum/min/max.
        """
        summary: Dict[str, Any] = {
            "total_elapsed": self.elapsed_time(),
            "counters": dict(self._counters),
            "metrics": {},
        }

        for name, values in self._metrics.items():
            if not values:
                continue
            numeric = all(isinstance(v, (int, float)) for v in values)
            if numeric and len(values) == 1:
                summary["metrics"][name] = values[0]
            elif numeric:
                summary["metrics"][name] = {
                    "count": len(values),
                    "sum": sum(values),
                    "min": min(values),
                    "max": max(values),
                }
            else:
                summary["metrics"][name] = list(values)

        return summary

    def elapsed_time(self) -> float:
        """Get total elapsed time since initialization."""
        return time.monotonic() - self._start_time
