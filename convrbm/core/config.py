"""Configuration management using Pydantic for type safety and validation.

This module provides the configuration classes for models and training.
Configurations are immutable; use ``with_updates`` to derive a new one.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

import torch
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

T = TypeVar("T", bound="BaseConfig")


class UnitType(str, Enum):
    """Kinds of stochastic units a layer can be configured with."""

    BINARY = "binary"
    GAUSSIAN = "gaussian"
    RELU = "relu"
    SOFTMAX = "softmax"


class BaseConfig(BaseModel):
    """Base configuration class with common functionality.

    All configuration classes inherit from this to get:
    - Automatic validation
    - JSON/YAML serialization
    - Immutability (frozen)
    """

    model_config = ConfigDict(
        frozen=True,
        use_enum_values=True,
        arbitrary_types_allowed=True,
        extra="forbid",
    )

    @classmethod
    def from_dict(cls: type[T], config_dict: dict[str, Any]) -> T:
        """Create configuration from dictionary."""
        return cls(**config_dict)

    @classmethod
    def from_file(cls: type[T], path: str | Path) -> T:
        """Load configuration from JSON or YAML file."""
        path = Path(path)

        if path.suffix in {".yaml", ".yml"}:
            try:
                import yaml
            except ImportError as err:
                raise ImportError(
                    "PyYAML required for YAML config files"
                ) from err
            with path.open() as f:
                data = yaml.safe_load(f)
        elif path.suffix == ".json":
            with path.open() as f:
                data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file type: {path.suffix}")

        return cls.from_dict(data)

    def save(self, path: str | Path) -> None:
        """Save configuration to file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if path.suffix in {".yaml", ".yml"}:
            try:
                import yaml
            except ImportError as err:
                raise ImportError(
                    "PyYAML required for YAML config files"
                ) from err
            with path.open("w") as f:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False)
        else:
            with path.open("w") as f:
                json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary representation."""
        return self.model_dump(mode="json")

    def with_updates(self: T, **kwargs: Any) -> T:
        """Create a new config with updated fields.

        Only explicitly set fields are carried over so that derived values
        are recomputed for the new configuration.
        """
        current = self.model_dump(mode="json", exclude_unset=True)
        return self.__class__(**{**current, **kwargs})


class ModelConfig(BaseConfig):
    """Base configuration for all models."""

    device: str | None = Field("cpu", description="Device to use (cuda/cpu/mps/auto)")
    dtype: str = Field("float32", description="Data type (float32/float64)")
    seed: int | None = Field(
        None, description="Seed for the model's random generator"
    )

    @field_validator("device")
    @classmethod
    def validate_device(cls, v: str | None) -> str:
        """Validate and normalize device string."""
        if v is None or v == "auto":
            return "cuda" if torch.cuda.is_available() else "cpu"
        if v not in {"cuda", "cpu", "mps"} and not v.startswith("cuda:"):
            raise ValueError(f"Invalid device: {v}")
        return v

    @field_validator("dtype")
    @classmethod
    def validate_dtype(cls, v: str) -> str:
        """Validate data type string."""
        if v not in _DTYPES:
            raise ValueError(
                f"Invalid dtype: {v}. Must be one of {sorted(_DTYPES)}"
            )
        return v

    @property
    def torch_device(self) -> torch.device:
        """Get torch device object."""
        return torch.device(self.device or "cpu")

    @property
    def torch_dtype(self) -> torch.dtype:
        """Get torch dtype object."""
        return _DTYPES[self.dtype]


_DTYPES: dict[str, torch.dtype] = {
    "float32": torch.float32,
    "float": torch.float32,
    "fp32": torch.float32,
    "float64": torch.float64,
    "double": torch.float64,
    "fp64": torch.float64,
}


class ConvRBMConfig(ModelConfig):
    """Configuration for Convolutional Restricted Boltzmann Machines.

    The visible layer is a ``visible_size x visible_size`` field and each of
    the ``num_filters`` hidden feature maps is ``hidden_size x hidden_size``.
    The kernel size follows from both: ``visible_size - hidden_size + 1``.
    """

    visible_size: int = Field(..., description="Side length of the visible field (NV)")
    hidden_size: int = Field(..., description="Side length of each feature map (NH)")
    num_filters: int = Field(..., description="Number of shared kernels (K)")
    kernel_size: int | None = Field(
        None, description="Kernel side length (NW), derived when omitted"
    )

    visible_unit: UnitType = Field(UnitType.BINARY, description="Visible unit type")
    hidden_unit: UnitType = Field(UnitType.BINARY, description="Hidden unit type")

    # Initialization
    weight_init: str | float = Field("zeros", description="Filter initialization")
    bias_init: str | float = Field(0.0, description="Bias initialization")

    # Learning
    learning_rate: float = Field(0.1, description="Learning rate", gt=0)
    momentum: float = Field(0.5, description="Momentum", ge=0, lt=1)
    l2_weight: float = Field(0.0, description="L2 penalty on the filters", ge=0)

    @field_validator("visible_size", "hidden_size", "num_filters")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Ensure sizes are positive."""
        if v <= 0:
            raise ValueError("ensure this value is greater than 0")
        return v

    @field_validator("visible_unit", "hidden_unit")
    @classmethod
    def validate_unit(cls, v: UnitType | str) -> UnitType | str:
        """Only binary stochastic units are supported."""
        if UnitType(v) is not UnitType.BINARY:
            raise ValueError(f"Only binary units are supported, got '{UnitType(v).value}'")
        return v

    @field_validator("weight_init", "bias_init")
    @classmethod
    def validate_init_method(cls, v: str | float, info: ValidationInfo) -> str | float:
        """Validate initialization method names."""
        if not isinstance(v, str):
            return v
        valid_methods = {
            "zeros",
            "zero",
            "ones",
            "one",
            "constant",
            "normal",
            "uniform",
            "xavier_uniform",
            "xavier_normal",
        }
        if info.field_name == "bias_init":
            # biases are 1-D, xavier needs a fan-in
            valid_methods -= {"xavier_uniform", "xavier_normal"}
        if v.lower() not in valid_methods:
            raise ValueError(
                f"Unknown init method for {info.field_name}: {v}. "
                f"Must be one of {sorted(valid_methods)}"
            )
        return v

    @model_validator(mode="after")
    def derive_kernel_size(self) -> ConvRBMConfig:
        """Derive the kernel size and check it against an explicit one."""
        if self.hidden_size > self.visible_size:
            raise ValueError(
                f"hidden_size ({self.hidden_size}) cannot exceed "
                f"visible_size ({self.visible_size})"
            )
        derived = self.visible_size - self.hidden_size + 1
        if self.kernel_size is None:
            # frozen model, bypass __setattr__
            object.__setattr__(self, "kernel_size", derived)
        elif self.kernel_size != derived:
            raise ValueError(
                f"kernel_size must be visible_size - hidden_size + 1 = {derived}, "
                f"got {self.kernel_size}"
            )
        return self


class TrainingConfig(BaseConfig):
    """Configuration for the training loop."""

    epochs: int = Field(10, description="Number of epochs", gt=0)
    batch_size: int = Field(10, description="Batch size", gt=0)
    cd_steps: int = Field(1, description="Gibbs steps per negative phase (CD-k)", gt=0)
    shuffle: bool = Field(True, description="Shuffle samples every epoch")
    seed: int | None = Field(None, description="Seed for batch shuffling")

    # Logging
    log_every: int = Field(100, description="Logging frequency (steps)", gt=0)
    show_progress: bool = Field(True, description="Show a progress bar")

    # Early stopping
    early_stopping: bool = Field(False, description="Enable early stopping")
    patience: int = Field(10, description="Early stopping patience", gt=0)
    min_delta: float = Field(
        1e-4, description="Minimum improvement for early stopping", ge=0
    )
