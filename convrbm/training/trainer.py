"""Contrastive divergence training loop.

The trainer is model-agnostic: anything implementing the
:class:`~convrbm.core.types.ContrastiveModel` protocol can be trained. Each
batch runs a positive phase on the data and ``cd_steps`` Gibbs steps for the
negative phase, then applies a momentum update to every parameter the model
returned statistics for.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Any

import torch
from torch import Tensor
from torch.utils.data import DataLoader, TensorDataset
from tqdm.auto import tqdm

from convrbm.core.config import TrainingConfig
from convrbm.core.logging import LoggerMixin, log_context
from convrbm.core.types import ContrastiveModel, Dataset
from convrbm.utils.tensor import stack_samples

from .callbacks import (
    Callback,
    CallbackList,
    EarlyStoppingCallback,
    LoggingCallback,
    MetricsCallback,
)
from .metrics import MetricsTracker


class Trainer(LoggerMixin):
    """Trainer for RBM-like models.

    This class orchestrates the training process, handling:
    - Batching and shuffling of the dataset
    - Positive and negative Gibbs phases (CD-k)
    - Momentum updates of the parameters
    - Metrics tracking, logging and callbacks
    """

    def __init__(
        self,
        model: ContrastiveModel,
        config: TrainingConfig | None = None,
        callbacks: Sequence[Callback] | None = None,
    ):
        """Initialize trainer.

        Args:
            model: Model to train
            config: Training configuration
            callbacks: Optional list of callbacks
        """
        if not isinstance(model, ContrastiveModel):
            raise TypeError(
                f"{type(model).__name__} does not implement the ContrastiveModel protocol"
            )

        self.model = model
        self.config = config or TrainingConfig()

        self.metrics = MetricsTracker()
        self.callbacks = self._setup_callbacks(callbacks)

        # Training state
        self.current_epoch = 0
        self.global_step = 0
        self.velocities: dict[str, Tensor] = {}
        self.last_update: dict[str, Tensor] = {}

    def _setup_callbacks(self, callbacks: Sequence[Callback] | None) -> CallbackList:
        """Setup default and user callbacks."""
        default_callbacks: list[Callback] = [
            MetricsCallback(),
            LoggingCallback(log_every=self.config.log_every),
        ]

        if self.config.early_stopping:
            default_callbacks.append(
                EarlyStoppingCallback(
                    patience=self.config.patience,
                    min_delta=self.config.min_delta,
                )
            )

        return CallbackList(default_callbacks + list(callbacks or []))

    def _make_loader(self, samples: Dataset) -> DataLoader:
        """Validate the samples and wrap them in a data loader."""
        params = [param for _, param in self.model.named_parameters()]
        data = stack_samples(
            samples,
            self.model.num_visible,
            dtype=params[0].dtype if params else None,
            device=params[0].device if params else None,
        )

        generator = None
        if self.config.seed is not None:
            generator = torch.Generator().manual_seed(self.config.seed)

        return DataLoader(
            TensorDataset(data),
            batch_size=self.config.batch_size,
            shuffle=self.config.shuffle,
            generator=generator,
        )

    def fit(self, samples: Dataset, num_epochs: int | None = None) -> dict[str, Any]:
        """Train the model.

        Args:
            samples: Training samples, each holding ``num_visible`` values
            num_epochs: Number of epochs (overrides config)

        Returns
        -------
            Per-epoch metrics under ``history`` and the last epoch's metrics
            under ``final_metrics``

        Raises
        ------
            SizeMismatchError: If a sample has the wrong number of values
            ValueError: If the dataset is empty
        """
        if num_epochs is None:
            num_epochs = self.config.epochs
        loader = self._make_loader(samples)

        self.log_info(
            "Starting training",
            epochs=num_epochs,
            samples=len(loader.dataset),
            batches=len(loader),
            cd_steps=self.config.cd_steps,
        )
        self.callbacks.on_train_begin(self)

        history: list[dict[str, float]] = []
        for epoch in range(num_epochs):
            self.current_epoch = epoch

            with log_context(epoch=epoch):
                history.append(self._train_epoch(loader))

            if self.callbacks.should_stop:
                self.log_info("Stopping early", epoch=epoch)
                break

        self.callbacks.on_train_end(self)
        self.log_info(
            "Training completed",
            final_epoch=self.current_epoch,
            total_steps=self.global_step,
        )

        return {
            "history": history,
            "final_metrics": history[-1] if history else {},
        }

    def _train_epoch(self, loader: DataLoader) -> dict[str, float]:
        """Train one epoch.

        Args:
            loader: Training data loader

        Returns
        -------
            Epoch metrics
        """
        self.metrics.reset()
        self.callbacks.on_epoch_start(self, self.model)

        pbar = tqdm(
            loader,
            desc=f"Epoch {self.current_epoch}",
            disable=not self.config.show_progress,
            leave=False,
        )

        epoch_start = time.perf_counter()

        for (data,) in pbar:
            self.callbacks.on_batch_start(self, self.model, data)

            batch_metrics = self._training_step(data)
            self.metrics.update(batch_metrics, weight=data.shape[0])
            pbar.set_postfix(self.metrics.get_current())

            self.callbacks.on_batch_end(self, self.model, batch_metrics)
            self.global_step += 1

        epoch_metrics = self.metrics.compute()
        epoch_metrics["epoch_time"] = time.perf_counter() - epoch_start

        self.callbacks.on_epoch_end(self, self.model, epoch_metrics)

        return epoch_metrics

    @torch.no_grad()
    def _training_step(self, data: Tensor) -> dict[str, float]:
        """Single CD-k step on one batch.

        Args:
            data: Batch of flattened samples, ``(B, num_visible)``

        Returns
        -------
            Batch metrics
        """
        v1 = data.reshape(-1, *self.model.visible_shape)

        # positive phase
        h1_a, h1_s = self.model.activate_hidden(v1)

        # negative phase
        h_a, h_s = h1_a, h1_s
        for _ in range(self.config.cd_steps):
            v2_a, v2_s = self.model.activate_visible(h_a, h_s)
            h_a, h_s = self.model.activate_hidden(v2_a, v2_s)

        metrics = {"reconstruction_error": (v1 - v2_a).pow(2).mean().item()}
        free_energy = getattr(self.model, "free_energy", None)
        if callable(free_energy):
            metrics["free_energy"] = free_energy(v1).mean().item()

        statistics = self.model.gradient_statistics(v1, h1_a, v2_a, h_a)
        self._apply_update(statistics)

        return metrics

    def _apply_update(self, statistics: dict[str, Tensor]) -> None:
        """Apply ``velocity = momentum * velocity + lr * statistic`` to each parameter."""
        learning_rate = self.model.learning_rate
        momentum = self.model.momentum

        for name, param in self.model.named_parameters():
            if name not in statistics:
                continue

            velocity = self.velocities.get(name)
            if velocity is None:
                velocity = torch.zeros_like(param)

            velocity = momentum * velocity + learning_rate * statistics[name].to(param)
            param.add_(velocity)

            self.velocities[name] = velocity
            self.last_update[name] = velocity.clone()
