"""Global pytest configuration and fixtures for the convrbm test suite.

This module provides:
- Test configuration and setup
- Shared fixtures used across test modules
- Custom pytest markers
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

import numpy as np
import pytest
import torch
from _pytest.config import Config

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from convrbm.core.config import ConvRBMConfig, TrainingConfig  # noqa: E402
from convrbm.models.crbm import ConvRBM  # noqa: E402

# Configure random seeds for reproducibility
SEED = 42


def pytest_configure(config: Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks integration tests"
    )


@pytest.fixture(scope="session", autouse=True)
def configure_testing_environment() -> None:
    """Configure the testing environment."""
    np.random.seed(SEED)
    torch.manual_seed(SEED)
    torch.backends.cudnn.deterministic = True
    torch.backends.cudnn.benchmark = False
    os.environ["PYTHONHASHSEED"] = str(SEED)


@pytest.fixture
def torch_random_state() -> Generator[torch.Generator, None, None]:
    """Provide a seeded PyTorch random generator."""
    generator = torch.Generator()
    generator.manual_seed(SEED)
    yield generator


@pytest.fixture
def small_config() -> ConvRBMConfig:
    """6x6 visible field, two 4x4 feature maps, 3x3 kernels."""
    return ConvRBMConfig(visible_size=6, hidden_size=4, num_filters=2, seed=SEED)


@pytest.fixture
def small_model(small_config: ConvRBMConfig) -> ConvRBM:
    """Zero-initialized model built from ``small_config``."""
    return ConvRBM(small_config)


@pytest.fixture
def random_model(small_config: ConvRBMConfig) -> ConvRBM:
    """Model with random filters and biases."""
    model = ConvRBM(small_config)
    generator = torch.Generator().manual_seed(SEED)
    with torch.no_grad():
        model.W.copy_(torch.randn(model.W.shape, generator=generator) * 0.5)
        model.hbias.copy_(torch.randn(model.hbias.shape, generator=generator) * 0.1)
        model.vbias.fill_(-0.2)
    return model


@pytest.fixture
def training_config() -> TrainingConfig:
    """Quiet, deterministic training configuration."""
    return TrainingConfig(
        epochs=2, batch_size=4, shuffle=False, seed=SEED, show_progress=False
    )


@pytest.fixture
def binary_patterns() -> torch.Tensor:
    """Sixteen flattened 6x6 binary samples made of bars."""
    samples = torch.zeros(16, 6, 6)
    for i in range(16):
        if i % 2 == 0:
            samples[i, i % 6, :] = 1.0
        else:
            samples[i, :, i % 6] = 1.0
    return samples.reshape(16, 36)


@pytest.fixture
def assert_tensors_equal():
    """Fixture providing tensor comparison utility."""
    def _assert_tensors_equal(
        actual: torch.Tensor,
        expected: torch.Tensor,
        rtol: float = 1e-5,
        atol: float = 1e-6,
        msg: str = ""
    ) -> None:
        """Assert that two tensors are equal within tolerance."""
        assert actual.shape == expected.shape, f"Shape mismatch: {actual.shape} vs {expected.shape}"
        assert torch.allclose(actual, expected.to(actual.dtype), rtol=rtol, atol=atol), (
            f"Tensor values not close. {msg}\n"
            f"Max diff: {(actual - expected).abs().max():.6e}"
        )

    return _assert_tensors_equal
