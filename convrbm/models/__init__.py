"""Energy-based models."""

from .base import EnergyBasedModel, LatentVariableModel
from .crbm import ConvRBM

__all__ = ["EnergyBasedModel", "LatentVariableModel", "ConvRBM"]
