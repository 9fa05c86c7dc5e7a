"""Callback system for the training loop.

Callbacks hook into the beginning and end of training, of every epoch and of
every batch. The trainer always installs :class:`MetricsCallback` and
:class:`LoggingCallback`; :class:`EarlyStoppingCallback` is added when
enabled in the training configuration.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from torch import Tensor

from convrbm.core.logging import logger
from convrbm.core.types import ContrastiveModel


class Callback:
    """Base class for training callbacks. Every hook is a no-op."""

    def on_train_begin(self, trainer: Any) -> None:
        """Called at the beginning of training."""

    def on_train_end(self, trainer: Any) -> None:
        """Called at the end of training."""

    def on_epoch_start(self, trainer: Any, model: ContrastiveModel) -> None:
        """Called at the start of each epoch."""

    def on_epoch_end(
        self, trainer: Any, model: ContrastiveModel, metrics: dict[str, float]
    ) -> None:
        """Called at the end of each epoch with the epoch metrics."""

    def on_batch_start(
        self, trainer: Any, model: ContrastiveModel, batch: Tensor
    ) -> None:
        """Called before processing each batch."""

    def on_batch_end(
        self, trainer: Any, model: ContrastiveModel, metrics: dict[str, float]
    ) -> None:
        """Called after processing each batch with the batch metrics."""


class CallbackList:
    """Container for multiple callbacks."""

    def __init__(self, callbacks: list[Callback]):
        """Initialize callback list.

        Args:
            callbacks: List of callback instances
        """
        self.callbacks = callbacks
        self._should_stop = False

    @property
    def should_stop(self) -> bool:
        """Check if any callback requested stopping."""
        return self._should_stop

    def stop_training(self) -> None:
        """Signal that training should stop."""
        self._should_stop = True

    def __getattr__(self, name: str) -> Callable[..., None]:
        """Delegate hook calls to all callbacks."""
        if not name.startswith("on_"):
            raise AttributeError(name)

        def method(*args: Any, **kwargs: Any) -> None:
            for callback in self.callbacks:
                hook = getattr(callback, name, None)
                if hook is not None:
                    hook(*args, **kwargs)

        return method


class LoggingCallback(Callback):
    """Callback for logging training progress."""

    def __init__(self, log_every: int = 100):
        """Initialize logging callback.

        Args:
            log_every: Frequency of batch logging (in steps)
        """
        self.log_every = log_every
        self.step_count = 0

    def on_epoch_start(self, trainer: Any, model: ContrastiveModel) -> None:
        """Log epoch start."""
        logger.debug(
            "Starting epoch",
            epoch=trainer.current_epoch,
            learning_rate=model.learning_rate,
            momentum=model.momentum,
        )

    def on_epoch_end(
        self, trainer: Any, model: ContrastiveModel, metrics: dict[str, float]
    ) -> None:
        """Log epoch metrics."""
        logger.info("Epoch completed", epoch=trainer.current_epoch, **metrics)

    def on_batch_end(
        self, trainer: Any, model: ContrastiveModel, metrics: dict[str, float]
    ) -> None:
        """Log batch metrics every ``log_every`` steps."""
        self.step_count += 1
        if self.step_count % self.log_every == 0:
            logger.debug("Training step", step=trainer.global_step, **metrics)


class MetricsCallback(Callback):
    """Callback for storing per-epoch metrics."""

    def __init__(self, save_path: str | Path | None = None):
        """Initialize metrics callback.

        Args:
            save_path: Optional JSON file the metrics are written to
                after every epoch
        """
        self.save_path = Path(save_path) if save_path else None
        self.train_metrics: list[dict[str, float]] = []

    def on_epoch_end(
        self, trainer: Any, model: ContrastiveModel, metrics: dict[str, float]
    ) -> None:
        """Store training metrics."""
        self.train_metrics.append(
            {**metrics, "epoch": trainer.current_epoch, "timestamp": time.time()}
        )

        if self.save_path:
            self._save_metrics()

    def _save_metrics(self) -> None:
        """Save metrics to file."""
        self.save_path.parent.mkdir(parents=True, exist_ok=True)
        with self.save_path.open("w") as f:
            json.dump({"train": self.train_metrics}, f, indent=2)


class EarlyStoppingCallback(Callback):
    """Stop training when a monitored metric stops improving."""

    def __init__(
        self,
        patience: int = 10,
        min_delta: float = 1e-4,
        monitor: str = "reconstruction_error",
        mode: str = "min",
    ):
        """Initialize early stopping callback.

        Args:
            patience: Number of epochs to wait for improvement
            min_delta: Minimum change to qualify as improvement
            monitor: Metric to monitor
            mode: 'min' or 'max' for monitored metric
        """
        if mode not in {"min", "max"}:
            raise ValueError(f"mode must be 'min' or 'max', got '{mode}'")

        self.patience = patience
        self.min_delta = min_delta
        self.monitor = monitor
        self.mode = mode

        self.best_value = float("inf") if mode == "min" else float("-inf")
        self.patience_counter = 0

    def on_epoch_end(
        self, trainer: Any, model: ContrastiveModel, metrics: dict[str, float]
    ) -> None:
        """Check for improvement."""
        if self.monitor not in metrics:
            return

        current_value = metrics[self.monitor]

        if self.mode == "min":
            improved = current_value < self.best_value - self.min_delta
        else:
            improved = current_value > self.best_value + self.min_delta

        if improved:
            self.best_value = current_value
            self.patience_counter = 0
        else:
            self.patience_counter += 1

        if self.patience_counter >= self.patience:
            logger.info(
                "Early stopping triggered",
                monitor=self.monitor,
                patience=self.patience,
                best_value=self.best_value,
            )
            trainer.callbacks.stop_training()
