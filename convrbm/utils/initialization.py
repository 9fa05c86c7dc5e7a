"""Parameter initialization strategies for filters and biases."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

import torch
from torch import Tensor, nn

InitStrategy = str | float | Tensor | Callable[[Tensor], Any]


class InitMethod(str, Enum):
    """Enumeration of initialization methods."""

    ZEROS = "zeros"
    ONES = "ones"
    CONSTANT = "constant"
    NORMAL = "normal"
    UNIFORM = "uniform"
    XAVIER_UNIFORM = "xavier_uniform"
    XAVIER_NORMAL = "xavier_normal"


class Initializer:
    """Parameter initializer supporting named, constant and custom strategies.

    Example:
        >>> init = Initializer("normal", std=0.01)
        >>> init(model.W)
    """

    def __init__(self, method: InitStrategy, **kwargs: Any):
        """Initialize the initializer.

        Args:
            method: Initialization method (string, number, tensor or callable)
            **kwargs: Additional arguments for the initialization method
        """
        self.method = method
        self.kwargs = kwargs
        self._init_fn = self._resolve_init_fn()

    def _resolve_init_fn(self) -> Callable[[Tensor], Any]:
        """Resolve initialization method to a callable."""
        if isinstance(self.method, Tensor):
            source = self.method

            def copy_init(tensor: Tensor) -> None:
                if tensor.shape != source.shape:
                    raise ValueError(
                        f"Shape mismatch: {tensor.shape} vs {source.shape}"
                    )
                tensor.copy_(source)

            return copy_init

        if callable(self.method):
            return self.method

        if isinstance(self.method, int | float):
            value = float(self.method)
            return lambda t: nn.init.constant_(t, value)

        method = str(self.method).lower()

        if method in (InitMethod.ZEROS, "zero"):
            return nn.init.zeros_
        if method in (InitMethod.ONES, "one"):
            return nn.init.ones_
        if method == InitMethod.CONSTANT:
            val = self.kwargs.get("val", 0.0)
            return lambda t: nn.init.constant_(t, val)
        if method == InitMethod.NORMAL:
            mean = self.kwargs.get("mean", 0.0)
            std = self.kwargs.get("std", 0.01)
            return lambda t: nn.init.normal_(t, mean=mean, std=std)
        if method == InitMethod.UNIFORM:
            a = self.kwargs.get("a", -0.1)
            b = self.kwargs.get("b", 0.1)
            return lambda t: nn.init.uniform_(t, a=a, b=b)
        if method == InitMethod.XAVIER_UNIFORM:
            gain = self.kwargs.get("gain", 1.0)
            return lambda t: nn.init.xavier_uniform_(t, gain=gain)
        if method == InitMethod.XAVIER_NORMAL:
            gain = self.kwargs.get("gain", 1.0)
            return lambda t: nn.init.xavier_normal_(t, gain=gain)

        valid = ", ".join(m.value for m in InitMethod)
        raise ValueError(f"Unknown init method: {self.method}. Must be one of {valid}")

    @torch.no_grad()
    def __call__(self, tensor: Tensor) -> Tensor:
        """Initialize ``tensor`` in place and return it."""
        self._init_fn(tensor)
        return tensor
