"""Core functionality for the convrbm library."""

from .config import (
    BaseConfig,
    ConvRBMConfig,
    ModelConfig,
    TrainingConfig,
    UnitType,
)
from .device import DeviceManager
from .exceptions import (
    ConvRBMError,
    NonFiniteError,
    SizeMismatchError,
    UnsupportedUnitTypeError,
)
from .logging import (
    LogConfig,
    LoggerMixin,
    MetricProcessor,
    log_context,
    log_duration,
    logger,
    setup_logging,
)
from .types import ContrastiveModel, Dataset, Device, DType, Phase, TensorLike

__all__ = [
    # Config
    "BaseConfig", "ModelConfig", "ConvRBMConfig", "TrainingConfig", "UnitType",

    # Device
    "DeviceManager",

    # Exceptions
    "ConvRBMError", "SizeMismatchError", "NonFiniteError",
    "UnsupportedUnitTypeError",

    # Logging
    "LogConfig", "LoggerMixin", "MetricProcessor",
    "setup_logging", "logger", "log_context", "log_duration",

    # Types
    "ContrastiveModel", "Dataset", "Device", "DType", "Phase", "TensorLike",
]
