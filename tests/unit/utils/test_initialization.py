"""Unit tests for parameter initialization utilities."""

import pytest
import torch

from convrbm.utils.initialization import Initializer, InitMethod


class TestInitMethod:
    """Test InitMethod enum."""

    def test_init_method_values(self):
        """Test that init methods have correct string values."""
        assert InitMethod.ZEROS == "zeros"
        assert InitMethod.NORMAL == "normal"
        assert InitMethod.XAVIER_NORMAL == "xavier_normal"


class TestInitializer:
    """Test Initializer class."""

    def test_strategies(self):
        """Strings, numbers, tensors and callables are all accepted."""
        tensor = torch.randn(2, 3, 3)
        Initializer("zeros")(tensor)
        assert torch.all(tensor == 0)

        Initializer(0.25)(tensor)
        assert torch.all(tensor == 0.25)

        source = torch.randn(2, 3, 3)
        Initializer(source)(tensor)
        assert torch.equal(tensor, source)

        Initializer(lambda t: t.fill_(42.0))(tensor)
        assert torch.all(tensor == 42.0)

    def test_scalar_tensor(self):
        """A zero-dimensional bias can be initialized."""
        bias = torch.empty(())
        Initializer(-1.5)(bias)
        assert bias.item() == -1.5

    def test_normal_kwargs(self):
        """Keyword arguments reach the underlying initializer."""
        tensor = torch.empty(10_000)
        Initializer("normal", mean=1.0, std=0.01)(tensor)

        assert tensor.mean().item() == pytest.approx(1.0, abs=1e-3)
        assert tensor.std().item() == pytest.approx(0.01, rel=0.1)

    def test_xavier_on_filter_bank(self):
        """Xavier initialization works on a (K, NW, NW) filter bank."""
        tensor = torch.zeros(4, 5, 5)
        Initializer("xavier_uniform")(tensor)
        assert tensor.abs().sum() > 0

    def test_shape_mismatch(self):
        """Copying from a tensor of another shape fails."""
        with pytest.raises(ValueError, match="Shape mismatch"):
            Initializer(torch.zeros(2))(torch.zeros(3))

    def test_unknown_method(self):
        """Test invalid method name."""
        with pytest.raises(ValueError, match="Unknown init method"):
            Initializer("bogus")

    def test_runs_without_grad(self):
        """Initialization does not record autograd history."""
        param = torch.nn.Parameter(torch.zeros(3))
        Initializer("ones")(param)
        assert torch.all(param == 1)
