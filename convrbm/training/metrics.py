"""Metric tracking for the training loop."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass


@dataclass
class MetricValue:
    """Container for a metric value with weighted running statistics."""

    current: float = 0.0
    mean: float = 0.0
    min: float = float("inf")
    max: float = float("-inf")
    count: float = 0.0

    def update(self, value: float, weight: float = 1.0) -> None:
        """Update metric with a new value.

        Args:
            value: New observation
            weight: Weight of the observation, e.g. the batch size
        """
        self.current = value
        self.count += weight
        self.mean += (value - self.mean) * weight / self.count
        self.min = min(self.min, value)
        self.max = max(self.max, value)


class MetricsTracker:
    """Tracks metrics during training."""

    def __init__(self) -> None:
        self.metrics: dict[str, MetricValue] = defaultdict(MetricValue)

    def update(self, metrics: dict[str, float], weight: float = 1.0) -> None:
        """Update metrics with new values.

        Args:
            metrics: Dictionary of metric values
            weight: Weight shared by all values, e.g. the batch size
        """
        for name, value in metrics.items():
            self.metrics[name].update(value, weight)

    def get_current(self) -> dict[str, float]:
        """Get current metric values."""
        return {name: metric.current for name, metric in self.metrics.items()}

    def reset(self) -> None:
        """Reset all metrics."""
        self.metrics.clear()

    def compute(self) -> dict[str, float]:
        """Compute the weighted mean of every metric since the last reset."""
        return {name: metric.mean for name, metric in self.metrics.items()}
