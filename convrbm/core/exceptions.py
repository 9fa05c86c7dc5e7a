"""Exception hierarchy for the convrbm library."""

from __future__ import annotations


class ConvRBMError(Exception):
    """Base class for all library errors."""


class SizeMismatchError(ConvRBMError, ValueError):
    """Raised when a sample, field or kernel has an unexpected size."""

    def __init__(self, what: str, expected: object, actual: object):
        self.what = what
        self.expected = expected
        self.actual = actual
        super().__init__(f"{what}: expected {expected}, got {actual}")


class NonFiniteError(ConvRBMError, FloatingPointError):
    """Raised when an activation or sample is NaN or infinite."""

    def __init__(self, name: str, count: int):
        self.name = name
        self.count = count
        super().__init__(f"{count} non-finite values in '{name}'")


class UnsupportedUnitTypeError(ConvRBMError, TypeError):
    """Raised when a layer is configured with anything but binary units."""

    def __init__(self, layer: str, unit_type: object):
        self.layer = layer
        self.unit_type = unit_type
        super().__init__(
            f"Only binary {layer} units are supported, got '{unit_type}'"
        )
