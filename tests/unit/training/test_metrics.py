"""Unit tests for metrics tracking."""

import pytest

from convrbm.training.metrics import MetricsTracker, MetricValue


class TestMetricValue:
    """Test MetricValue dataclass."""

    def test_running_statistics(self):
        """Mean, min and max follow the observations."""
        metric = MetricValue()
        for value in (1.0, 2.0, 3.0):
            metric.update(value)

        assert metric.current == 3.0
        assert metric.mean == pytest.approx(2.0)
        assert metric.min == 1.0
        assert metric.max == 3.0
        assert metric.count == 3

    def test_weighted_mean(self):
        """Weights scale the contribution of each observation."""
        metric = MetricValue()
        metric.update(1.0, weight=3)
        metric.update(5.0, weight=1)

        assert metric.mean == pytest.approx(2.0)


class TestMetricsTracker:
    """Test MetricsTracker class."""

    def test_update_and_compute(self):
        """compute() returns the weighted epoch means."""
        tracker = MetricsTracker()
        tracker.update({"reconstruction_error": 0.4, "free_energy": -2.0}, weight=2)
        tracker.update({"reconstruction_error": 0.1, "free_energy": -5.0}, weight=1)

        result = tracker.compute()

        assert result["reconstruction_error"] == pytest.approx(0.3)
        assert result["free_energy"] == pytest.approx(-3.0)
        assert tracker.get_current() == {"reconstruction_error": 0.1, "free_energy": -5.0}

    def test_reset(self):
        """Reset clears every metric."""
        tracker = MetricsTracker()
        tracker.update({"x": 1.0})

        tracker.reset()

        assert tracker.compute() == {}
        assert tracker.get_current() == {}
