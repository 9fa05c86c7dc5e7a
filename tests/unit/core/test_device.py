"""Unit tests for device management."""

from unittest.mock import patch

import pytest
import torch

from convrbm.core.device import DeviceManager


class TestDeviceManager:
    """Test DeviceManager class."""

    def test_cpu(self) -> None:
        """Test explicit CPU selection."""
        manager = DeviceManager("cpu")

        assert manager.device == torch.device("cpu")
        assert manager.is_cuda is False
        assert repr(manager) == "DeviceManager(device=cpu)"

    @patch('torch.cuda.is_available', return_value=False)
    def test_auto_without_cuda(self, _mock_cuda) -> None:
        """Auto selection falls back to a non-CUDA device."""
        manager = DeviceManager("auto")
        assert manager.device.type in {"cpu", "mps"}

    @patch('torch.cuda.is_available', return_value=False)
    def test_cuda_unavailable(self, _mock_cuda) -> None:
        """Requesting CUDA without CUDA is an error."""
        with pytest.raises(RuntimeError, match="CUDA"):
            DeviceManager("cuda")

    def test_to_device_casts(self) -> None:
        """Tensors are moved and optionally cast."""
        manager = DeviceManager("cpu")
        tensor = manager.to_device(torch.ones(3, dtype=torch.float32), dtype=torch.float64)

        assert tensor.dtype == torch.float64
        assert tensor.device.type == "cpu"
