"""Training loop, callbacks and metrics."""

from .callbacks import (
    Callback,
    CallbackList,
    EarlyStoppingCallback,
    LoggingCallback,
    MetricsCallback,
)
from .metrics import MetricsTracker, MetricValue
from .trainer import Trainer

__all__ = [
    # Trainer
    "Trainer",

    # Callbacks
    "Callback", "CallbackList", "LoggingCallback", "MetricsCallback",
    "EarlyStoppingCallback",

    # Metrics
    "MetricsTracker", "MetricValue",
]
