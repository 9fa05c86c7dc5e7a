"""Unit tests for tensor utilities."""

import numpy as np
import pytest
import torch

from convrbm.core.exceptions import SizeMismatchError
from convrbm.utils.tensor import create_generator, ensure_tensor, stack_samples


class TestEnsureTensor:
    """Test ensure_tensor function."""

    def test_tensor_passthrough(self) -> None:
        """Tensors are returned as is without dtype or device."""
        x = torch.randn(3, 4)
        assert ensure_tensor(x) is x

    def test_numpy_conversion(self) -> None:
        """Numpy arrays share memory with the result."""
        arr = np.ones((2, 3), dtype=np.float32)
        result = ensure_tensor(arr)

        assert result.shape == (2, 3)
        assert result.dtype == torch.float32

    def test_list_and_scalar(self) -> None:
        """Lists and scalars are converted."""
        assert ensure_tensor([1.0, 2.0]).tolist() == [1.0, 2.0]
        assert ensure_tensor(3.0).shape == (1,)

    def test_dtype_conversion(self) -> None:
        """Test dtype conversion."""
        result = ensure_tensor([1, 0, 1], dtype=torch.float64)
        assert result.dtype == torch.float64


class TestStackSamples:
    """Test stack_samples function."""

    def test_sequence_of_grids(self) -> None:
        """Grids and flat samples are flattened into rows."""
        samples = [torch.ones(2, 2), [0.0, 1.0, 0.0, 1.0], np.zeros(4)]
        result = stack_samples(samples, 4)

        assert result.shape == (3, 4)
        assert result.dtype == torch.get_default_dtype()
        assert result[1].tolist() == [0.0, 1.0, 0.0, 1.0]

    def test_tensor_dataset(self) -> None:
        """A batch tensor is reshaped to one row per sample."""
        result = stack_samples(torch.ones(5, 3, 3), 9, dtype=torch.float64)

        assert result.shape == (5, 9)
        assert result.dtype == torch.float64

    def test_wrong_size_reports_index(self) -> None:
        """The first malformed sample is reported."""
        samples = [torch.ones(4), torch.ones(4), torch.ones(5)]

        with pytest.raises(SizeMismatchError, match="Training sample 2") as excinfo:
            stack_samples(samples, 4)

        assert excinfo.value.expected == 4
        assert excinfo.value.actual == 5

    def test_empty(self) -> None:
        """An empty dataset cannot be trained on."""
        with pytest.raises(ValueError, match="empty"):
            stack_samples([], 4)
        with pytest.raises(ValueError, match="empty"):
            stack_samples(torch.empty(0, 4), 4)


class TestCreateGenerator:
    """Test create_generator function."""

    def test_seeded_generators_agree(self) -> None:
        """Equal seeds give equal streams."""
        a = torch.rand(5, generator=create_generator(7))
        b = torch.rand(5, generator=create_generator(7))

        assert torch.equal(a, b)

    def test_unseeded(self) -> None:
        """Without a seed the generator is still usable."""
        generator = create_generator()
        assert torch.rand(2, generator=generator).shape == (2,)
