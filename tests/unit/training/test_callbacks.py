"""Unit tests for training callbacks."""

import json
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from convrbm.training.callbacks import (
    Callback,
    CallbackList,
    EarlyStoppingCallback,
    LoggingCallback,
    MetricsCallback,
)


class MockTrainer:
    """Mock trainer for testing callbacks."""

    def __init__(self) -> None:
        self.current_epoch = 0
        self.global_step = 0
        self.callbacks = Mock()


class TestCallbackList:
    """Test CallbackList dispatch."""

    def test_dispatch(self) -> None:
        """Hooks are forwarded to every callback."""
        first, second = Mock(spec=Callback), Mock(spec=Callback)
        callbacks = CallbackList([first, second])

        callbacks.on_epoch_end("trainer", "model", {"reconstruction_error": 0.1})

        first.on_epoch_end.assert_called_once_with("trainer", "model", {"reconstruction_error": 0.1})
        second.on_epoch_end.assert_called_once()

    def test_stop_flag(self) -> None:
        """Stopping is requested through the list."""
        callbacks = CallbackList([])

        assert callbacks.should_stop is False
        callbacks.stop_training()
        assert callbacks.should_stop is True

    def test_unknown_attribute(self) -> None:
        """Only hook names are delegated."""
        with pytest.raises(AttributeError):
            CallbackList([]).missing  # noqa: B018


class TestLoggingCallback:
    """Test LoggingCallback."""

    @patch('convrbm.training.callbacks.logger')
    def test_epoch_end(self, mock_logger) -> None:
        """Epoch metrics are logged as fields."""
        trainer = MockTrainer()
        trainer.current_epoch = 4

        LoggingCallback().on_epoch_end(trainer, Mock(), {"reconstruction_error": 0.2})

        mock_logger.info.assert_called_once_with(
            "Epoch completed", epoch=4, reconstruction_error=0.2
        )

    @patch('convrbm.training.callbacks.logger')
    def test_batch_frequency(self, mock_logger) -> None:
        """Batches are logged every ``log_every`` steps."""
        callback = LoggingCallback(log_every=3)
        trainer = MockTrainer()

        for _ in range(7):
            callback.on_batch_end(trainer, Mock(), {"reconstruction_error": 0.5})

        assert mock_logger.debug.call_count == 2


class TestMetricsCallback:
    """Test MetricsCallback."""

    def test_collects_and_saves(self, tmp_path: Path) -> None:
        """Epoch metrics are stored and written as JSON."""
        path = tmp_path / "out" / "metrics.json"
        callback = MetricsCallback(save_path=path)
        trainer = MockTrainer()
        metrics = {"reconstruction_error": 0.3}

        callback.on_epoch_end(trainer, Mock(), metrics)

        assert callback.train_metrics[0]["reconstruction_error"] == 0.3
        assert callback.train_metrics[0]["epoch"] == 0
        assert "epoch" not in metrics
        assert json.loads(path.read_text())["train"][0]["reconstruction_error"] == 0.3


class TestEarlyStoppingCallback:
    """Test EarlyStoppingCallback."""

    def test_patience(self) -> None:
        """Stopping is requested after ``patience`` epochs without improvement."""
        callback = EarlyStoppingCallback(patience=2, min_delta=0.01)
        trainer = MockTrainer()

        for error in (0.5, 0.4, 0.395, 0.399):
            callback.on_epoch_end(trainer, Mock(), {"reconstruction_error": error})

        assert callback.best_value == 0.4
        trainer.callbacks.stop_training.assert_called_once()

    def test_improvement_resets(self) -> None:
        """An improvement resets the counter."""
        callback = EarlyStoppingCallback(patience=2)
        trainer = MockTrainer()

        for error in (0.5, 0.5, 0.3, 0.3):
            callback.on_epoch_end(trainer, Mock(), {"reconstruction_error": error})

        assert callback.patience_counter == 1
        trainer.callbacks.stop_training.assert_not_called()

    def test_max_mode(self) -> None:
        """Higher is better in max mode."""
        callback = EarlyStoppingCallback(patience=1, monitor="score", mode="max")
        trainer = MockTrainer()

        callback.on_epoch_end(trainer, Mock(), {"score": 1.0})
        callback.on_epoch_end(trainer, Mock(), {"score": 2.0})

        assert callback.best_value == 2.0
        trainer.callbacks.stop_training.assert_not_called()

    def test_missing_metric(self) -> None:
        """Epochs without the monitored metric are ignored."""
        callback = EarlyStoppingCallback(patience=1)
        trainer = MockTrainer()

        callback.on_epoch_end(trainer, Mock(), {"free_energy": -3.0})

        trainer.callbacks.stop_training.assert_not_called()

    def test_invalid_mode(self) -> None:
        """Only min and max modes exist."""
        with pytest.raises(ValueError, match="mode"):
            EarlyStoppingCallback(mode="sideways")
