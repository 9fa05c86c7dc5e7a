"""Core type definitions and protocols for the convrbm library.

The trainer only relies on the :class:`ContrastiveModel` protocol, so any
RBM-like model exposing the sampling and statistics methods can be trained
with it.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Protocol, TypeAlias, runtime_checkable

import numpy as np
import torch
from torch import Tensor, nn

# Type aliases for common patterns
TensorLike: TypeAlias = Tensor | np.ndarray | Sequence[float]
Dataset: TypeAlias = Tensor | np.ndarray | Sequence[TensorLike]
Device: TypeAlias = torch.device | str | None
DType: TypeAlias = torch.dtype | None
Phase: TypeAlias = tuple[Tensor, Tensor]


@runtime_checkable
class ContrastiveModel(Protocol):
    """Capabilities a model needs to be trained by contrastive divergence."""

    learning_rate: float
    momentum: float

    @property
    def num_visible(self) -> int:
        """Number of visible units."""
        ...

    @property
    def visible_shape(self) -> tuple[int, ...]:
        """Shape of one visible configuration."""
        ...

    def activate_hidden(self, v_a: Tensor, v_s: Tensor | None = None) -> Phase:
        """Return hidden probabilities and samples given the visible layer."""
        ...

    def activate_visible(self, h_a: Tensor, h_s: Tensor) -> Phase:
        """Return visible probabilities and samples given the hidden layer."""
        ...

    def gradient_statistics(
        self, v_pos: Tensor, h_pos: Tensor, v_neg: Tensor, h_neg: Tensor
    ) -> dict[str, Tensor]:
        """Return batch-averaged CD statistics keyed by parameter name."""
        ...

    def named_parameters(self) -> Iterator[tuple[str, nn.Parameter]]:
        """Iterate over the trainable parameters."""
        ...
