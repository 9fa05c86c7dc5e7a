"""Convolutional Restricted Boltzmann Machines.

A PyTorch library for training convolutional RBMs with contrastive
divergence: a bank of shared kernels is learned from unlabeled square
samples by alternating Gibbs sampling and momentum weight updates.
"""

__version__ = "0.1.0"
__author__ = "convrbm Contributors"
__license__ = "MIT"

from . import core, models, ops, training, utils
from .core.config import ConvRBMConfig, ModelConfig, TrainingConfig, UnitType
from .core.device import DeviceManager
from .core.exceptions import (
    ConvRBMError,
    NonFiniteError,
    SizeMismatchError,
    UnsupportedUnitTypeError,
)
from .core.logging import log_context, log_duration, logger, setup_logging
from .models.base import EnergyBasedModel, LatentVariableModel
from .models.crbm import ConvRBM
from .training.callbacks import (
    Callback,
    CallbackList,
    EarlyStoppingCallback,
    LoggingCallback,
    MetricsCallback,
)
from .training.metrics import MetricsTracker
from .training.trainer import Trainer

__all__ = [
    # Version info
    "__version__", "__author__", "__license__",

    # Submodules
    "core", "models", "ops", "training", "utils",

    # Core classes
    "ModelConfig", "ConvRBMConfig", "TrainingConfig", "UnitType",
    "DeviceManager", "setup_logging", "logger", "log_context", "log_duration",

    # Errors
    "ConvRBMError", "SizeMismatchError", "NonFiniteError",
    "UnsupportedUnitTypeError",

    # Models
    "EnergyBasedModel", "LatentVariableModel", "ConvRBM",

    # Training
    "Trainer", "Callback", "CallbackList", "LoggingCallback",
    "MetricsCallback", "EarlyStoppingCallback", "MetricsTracker",
]
