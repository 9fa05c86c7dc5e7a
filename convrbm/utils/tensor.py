"""Tensor conversion and random generator helpers."""

from __future__ import annotations

import time

import numpy as np
import torch
from torch import Tensor

from convrbm.core.exceptions import SizeMismatchError
from convrbm.core.types import Dataset, Device, DType, TensorLike


def ensure_tensor(
    x: TensorLike, dtype: DType | None = None, device: Device | None = None
) -> Tensor:
    """Convert input to tensor with specified dtype and device.

    Args:
        x: Input data (tensor, numpy array, list, or scalar)
        dtype: Target data type
        device: Target device

    Returns
    -------
        Tensor with specified properties
    """
    if isinstance(x, Tensor):
        tensor = x
    elif isinstance(x, np.ndarray):
        tensor = torch.from_numpy(x)
    elif isinstance(x, int | float):
        tensor = torch.tensor([x])
    else:
        tensor = torch.as_tensor(x)

    if dtype is not None or device is not None:
        tensor = tensor.to(dtype=dtype, device=device)

    return tensor


def stack_samples(
    samples: Dataset,
    num_values: int,
    dtype: DType | None = None,
    device: Device | None = None,
) -> Tensor:
    """Stack a dataset into a ``(num_samples, num_values)`` tensor.

    Every sample must hold exactly ``num_values`` values; nothing is padded
    or truncated.

    Raises
    ------
        SizeMismatchError: If a sample has the wrong number of values
        ValueError: If the dataset is empty
    """
    if len(samples) == 0:
        raise ValueError("Cannot train on an empty dataset")

    if isinstance(samples, Tensor | np.ndarray):
        rows = list(ensure_tensor(samples).reshape(len(samples), -1))
    else:
        rows = [ensure_tensor(sample).reshape(-1) for sample in samples]

    for index, row in enumerate(rows):
        if row.numel() != num_values:
            raise SizeMismatchError(
                f"Training sample {index}", num_values, row.numel()
            )

    dtype = dtype or torch.get_default_dtype()
    return torch.stack([row.to(dtype=dtype) for row in rows]).to(device=device)


def create_generator(
    seed: int | None = None, device: Device | None = None
) -> torch.Generator:
    """Create a random generator for stochastic unit sampling.

    Args:
        seed: Seed for reproducible sampling. When None, the generator is
            seeded from the wall clock, so runs are not reproducible.
        device: Device the generator draws on

    Returns
    -------
        Seeded generator
    """
    generator = torch.Generator(device=device or "cpu")
    if seed is None:
        seed = time.time_ns() & 0xFFFF_FFFF_FFFF
    generator.manual_seed(seed)
    return generator
