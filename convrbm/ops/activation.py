"""Activation and stochastic sampling of binary units."""

from __future__ import annotations

import torch
from torch import Tensor

from convrbm.core.config import UnitType
from convrbm.core.exceptions import NonFiniteError, UnsupportedUnitTypeError


def logistic_sigmoid(x: Tensor) -> Tensor:
    """Compute ``1 / (1 + exp(-x))`` elementwise."""
    return torch.sigmoid(x)


def sample_bernoulli(prob: Tensor, generator: torch.Generator | None = None) -> Tensor:
    """Draw binary states with ``P(1) = prob``.

    A unit is on when its probability exceeds a uniform draw from ``[0, 1)``,
    so a probability of exactly 0 is never on.

    Args:
        prob: Activation probabilities
        generator: Random generator for the uniform draws

    Returns
    -------
        Tensor of zeros and ones with the dtype of ``prob``
    """
    noise = torch.rand(
        prob.shape, generator=generator, dtype=prob.dtype, device=prob.device
    )
    return (prob > noise).to(prob.dtype)


def check_finite(name: str, tensor: Tensor) -> Tensor:
    """Raise :class:`NonFiniteError` if ``tensor`` holds NaN or infinity."""
    bad = ~torch.isfinite(tensor)
    if bad.any():
        raise NonFiniteError(name, int(bad.sum().item()))
    return tensor


def activate_binary(
    pre_activation: Tensor,
    unit_type: UnitType | str,
    layer: str,
    generator: torch.Generator | None = None,
) -> tuple[Tensor, Tensor]:
    """Turn pre-activations into probabilities and binary samples.

    Args:
        pre_activation: Total input to each unit
        unit_type: Configured unit type of the layer
        layer: Layer name used in error messages
        generator: Random generator for sampling

    Returns
    -------
        Tuple of (probabilities, samples)
    """
    if UnitType(unit_type) is not UnitType.BINARY:
        raise UnsupportedUnitTypeError(layer, UnitType(unit_type).value)

    prob = check_finite(f"{layer} probabilities", logistic_sigmoid(pre_activation))
    sample = check_finite(f"{layer} samples", sample_bernoulli(prob, generator))
    return prob, sample
