"""Device placement utilities."""

from __future__ import annotations

import torch
from torch import Tensor


class DeviceManager:
    """Resolves a device specification and moves tensors onto it."""

    def __init__(self, device: str | torch.device | None = None):
        """Initialize device manager.

        Args:
            device: Device specification. Can be:
                - None or 'auto': automatically select best device
                - 'cuda', 'cuda:0', etc.: specific CUDA device
                - 'mps': Metal Performance Shaders (Apple Silicon)
                - 'cpu': CPU device
        """
        self._device = self._resolve_device(device)

    @property
    def device(self) -> torch.device:
        """Current active device."""
        return self._device

    @property
    def is_cuda(self) -> bool:
        """Check if current device is CUDA."""
        return self._device.type == 'cuda'

    @staticmethod
    def _resolve_device(device: str | torch.device | None) -> torch.device:
        """Resolve device specification to torch.device."""
        if device is None or device == 'auto':
            if torch.cuda.is_available():
                return torch.device('cuda')
            if hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
                return torch.device('mps')
            return torch.device('cpu')

        if isinstance(device, str):
            device = torch.device(device)

        if device.type == 'cuda' and not torch.cuda.is_available():
            raise RuntimeError("CUDA device requested but CUDA is not available")
        if device.type == 'mps' and not (
            hasattr(torch.backends, 'mps') and torch.backends.mps.is_available()
        ):
            raise RuntimeError("MPS device requested but MPS is not available")

        return device

    def to_device(self, tensor: Tensor, dtype: torch.dtype | None = None) -> Tensor:
        """Move a tensor to the managed device, optionally casting it."""
        return tensor.to(device=self._device, dtype=dtype)

    def __repr__(self) -> str:
        """Return representation with the resolved device."""
        return f"DeviceManager(device={self._device})"
