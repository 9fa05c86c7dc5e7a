"""Base classes for energy-based models.

This module provides the abstract base classes shared by the models of the
library: device and dtype handling, logging, input preparation and the
Gibbs-sampling interface of latent variable models.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, NoReturn

import torch
from torch import Tensor, nn

from convrbm.core.config import ModelConfig
from convrbm.core.device import DeviceManager
from convrbm.core.logging import LoggerMixin
from convrbm.core.types import Phase, TensorLike
from convrbm.utils.tensor import create_generator, ensure_tensor


class EnergyBasedModel(nn.Module, LoggerMixin, ABC):
    """Abstract base class for all energy-based models.

    Models own mutable training state and a random generator, so an instance
    can be neither copied nor pickled.
    """

    def __init__(
        self, config: ModelConfig, generator: torch.Generator | None = None
    ):
        """Initialize the model.

        Args:
            config: Model configuration
            generator: Random generator used for sampling. When None, one is
                created from ``config.seed``.
        """
        super().__init__()
        self.config = config
        self._device_manager = DeviceManager(config.device)

        self._build_model()
        self.to(device=self.device, dtype=self.dtype)

        if generator is None:
            generator = create_generator(config.seed, self.device)
        self.generator = generator

        self.log_info(
            "Initialized model",
            model_type=self.__class__.__name__,
            device=str(self.device),
            dtype=str(self.dtype),
        )

    @property
    def device(self) -> torch.device:
        """Get model device."""
        return self._device_manager.device

    @property
    def dtype(self) -> torch.dtype:
        """Get model dtype."""
        return self.config.torch_dtype

    @abstractmethod
    def _build_model(self) -> None:
        """Create parameters and buffers."""

    @abstractmethod
    def energy(self, visible: Tensor, hidden: Tensor) -> Tensor:
        """Compute the joint energy of visible and hidden configurations."""

    @abstractmethod
    def free_energy(self, visible: Tensor) -> Tensor:
        """Compute free energy by marginalizing the hidden units."""

    def prepare_input(self, x: TensorLike) -> Tensor:
        """Convert input to a tensor on the model device with the model dtype."""
        return self._device_manager.to_device(ensure_tensor(x), dtype=self.dtype)

    def parameter_summary(self) -> dict[str, Any]:
        """Get summary of model parameters."""
        total_params = sum(p.numel() for p in self.parameters())
        return {
            "total_parameters": total_params,
            "parameter_shapes": {
                name: tuple(p.shape) for name, p in self.named_parameters()
            },
        }

    def __copy__(self) -> NoReturn:
        raise TypeError(f"{self.__class__.__name__} instances cannot be copied")

    def __deepcopy__(self, memo: dict[int, Any]) -> NoReturn:
        raise TypeError(f"{self.__class__.__name__} instances cannot be copied")

    def __reduce_ex__(self, protocol: Any) -> NoReturn:
        raise TypeError(f"{self.__class__.__name__} instances cannot be pickled")

    def __repr__(self) -> str:
        """Return representation with configuration values."""
        config_str = ", ".join(f"{k}={v}" for k, v in self.config.to_dict().items())
        return f"{self.__class__.__name__}({config_str})"


class LatentVariableModel(EnergyBasedModel, ABC):
    """Base class for models with a visible and a hidden layer.

    Subclasses provide the two conditional activations; each returns a pair
    of (probabilities, samples).
    """

    learning_rate: float
    momentum: float

    @abstractmethod
    def activate_hidden(self, v_a: Tensor, v_s: Tensor | None = None) -> Phase:
        """Compute hidden probabilities and samples given the visible layer."""

    @abstractmethod
    def activate_visible(self, h_a: Tensor, h_s: Tensor) -> Phase:
        """Compute visible probabilities and samples given the hidden layer."""

    @abstractmethod
    def gradient_statistics(
        self, v_pos: Tensor, h_pos: Tensor, v_neg: Tensor, h_neg: Tensor
    ) -> dict[str, Tensor]:
        """Compute contrastive divergence statistics per parameter."""

    def gibbs_step(self, v_a: Tensor, v_s: Tensor | None = None) -> Phase:
        """Perform one visible -> hidden -> visible step of Gibbs sampling.

        Args:
            v_a: Visible activation probabilities
            v_s: Visible samples

        Returns
        -------
            New visible probabilities and samples
        """
        h_a, h_s = self.activate_hidden(v_a, v_s)
        return self.activate_visible(h_a, h_s)
