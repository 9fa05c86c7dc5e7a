"""Convolution primitives for convolutional RBMs.

All functions implement *true* convolution (the kernel is applied in reversed
order) in "valid" mode unless stated otherwise, and validate their operand
sizes instead of reading out of bounds.

Shapes used throughout:

- visible field ``(B, NV, NV)``
- hidden feature maps ``(B, K, NH, NH)``
- filter bank ``(K, NW, NW)`` with ``NW = NV - NH + 1``
"""

from __future__ import annotations

import torch.nn.functional as F  # noqa: N812
from torch import Tensor

from convrbm.core.exceptions import SizeMismatchError


def convolve(input: Tensor, kernel: Tensor, out: Tensor | None = None) -> Tensor:  # noqa: A002
    """Convolve a 1-D signal with a 1-D kernel.

    ``out[n] = sum_k input[n + k] * kernel[len(kernel) - 1 - k]``

    Args:
        input: Signal of length ``N``
        kernel: Kernel of length ``M <= N``
        out: Optional buffer of length ``N - M + 1``; it is overwritten

    Returns
    -------
        The convolution result (``out`` when given)

    Raises
    ------
        SizeMismatchError: If ``len(out) + len(kernel) - 1 != len(input)``
    """
    if input.dim() != 1 or kernel.dim() != 1:
        raise SizeMismatchError(
            "1-D convolution operands", "1-D tensors",
            f"{input.dim()}-D input and {kernel.dim()}-D kernel",
        )

    expected = input.numel() - kernel.numel() + 1
    if expected < 1:
        raise SizeMismatchError(
            "Convolution kernel length", f"at most {input.numel()}", kernel.numel()
        )
    if out is not None and (out.dim() != 1 or out.numel() != expected):
        raise SizeMismatchError("Convolution output length", expected, out.numel())

    weight = kernel.to(input.dtype).flip(0).view(1, 1, -1)
    result = F.conv1d(input.view(1, 1, -1), weight).view(-1)

    if out is None:
        return result
    return out.copy_(result)


def convolve2d_valid(input: Tensor, kernels: Tensor) -> Tensor:  # noqa: A002
    """Convolve a batch of fields with every kernel of a filter bank.

    Args:
        input: Fields of shape ``(B, NV, NV)``
        kernels: Filter bank of shape ``(K, NW, NW)``

    Returns
    -------
        Feature map inputs of shape ``(B, K, NV - NW + 1, NV - NW + 1)``
    """
    _check_fields("Visible field", input, 3)
    _check_fields("Filter bank", kernels, 3)
    if kernels.shape[-1] > input.shape[-1]:
        raise SizeMismatchError(
            "Kernel size", f"at most {input.shape[-1]}", kernels.shape[-1]
        )

    weight = kernels.flip(-1, -2).unsqueeze(1)
    return F.conv2d(input.unsqueeze(1), weight)


def convolve2d_full(input: Tensor, kernels: Tensor) -> Tensor:  # noqa: A002
    """Project feature maps back onto the visible field, one map per kernel.

    This is the transpose of :func:`convolve2d_valid`: every hidden unit
    spreads its value over the ``NW x NW`` visible patch it was computed
    from. Contributions are returned per kernel, not summed.

    Args:
        input: Feature maps of shape ``(B, K, NH, NH)``
        kernels: Filter bank of shape ``(K, NW, NW)``

    Returns
    -------
        Per-kernel visible contributions of shape ``(B, K, NV, NV)``
    """
    _check_fields("Feature maps", input, 4)
    _check_fields("Filter bank", kernels, 3)
    if input.shape[1] != kernels.shape[0]:
        raise SizeMismatchError("Number of feature maps", kernels.shape[0], input.shape[1])

    weight = kernels.flip(-1, -2).unsqueeze(1)
    return F.conv_transpose2d(input, weight, groups=kernels.shape[0])


def correlate_filters(visible: Tensor, hidden: Tensor) -> Tensor:
    """Compute the filter statistic ``<v h>`` summed over a batch.

    Entry ``[k, p, q]`` is the sum over the batch and over every hidden
    position ``(i, j)`` of ``hidden[b, k, i, j] * visible[b, i + NW-1-p, j + NW-1-q]``,
    i.e. the derivative of the interaction energy with respect to ``W[k, p, q]``.

    Args:
        visible: Fields of shape ``(B, NV, NV)``
        hidden: Feature maps of shape ``(B, K, NH, NH)``

    Returns
    -------
        Statistic of shape ``(K, NW, NW)``
    """
    _check_fields("Visible field", visible, 3)
    _check_fields("Feature maps", hidden, 4)
    if visible.shape[0] != hidden.shape[0]:
        raise SizeMismatchError("Batch size", visible.shape[0], hidden.shape[0])
    if hidden.shape[-1] > visible.shape[-1]:
        raise SizeMismatchError(
            "Feature map size", f"at most {visible.shape[-1]}", hidden.shape[-1]
        )

    # batch as channels, so conv2d sums over it
    stats = F.conv2d(visible.unsqueeze(0), hidden.transpose(0, 1))
    return stats[0].flip(-1, -2)


def _check_fields(what: str, tensor: Tensor, dims: int) -> None:
    """Check rank and squareness of a batch of 2-D fields."""
    if tensor.dim() != dims:
        raise SizeMismatchError(f"{what} rank", dims, tensor.dim())
    if tensor.shape[-1] != tensor.shape[-2]:
        raise SizeMismatchError(
            f"{what} (square)", "equal height and width", tuple(tensor.shape[-2:])
        )
