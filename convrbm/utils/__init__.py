"""Utility functions for the convrbm library."""

from .initialization import Initializer, InitMethod
from .tensor import create_generator, ensure_tensor, stack_samples

__all__ = [
    "Initializer", "InitMethod",
    "create_generator", "ensure_tensor", "stack_samples",
]
