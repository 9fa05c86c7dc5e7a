"""Numerical building blocks: convolutions and unit activations."""

from .activation import activate_binary, check_finite, logistic_sigmoid, sample_bernoulli
from .convolution import convolve, convolve2d_full, convolve2d_valid, correlate_filters

__all__ = [
    # Convolution
    "convolve", "convolve2d_valid", "convolve2d_full", "correlate_filters",

    # Activation
    "logistic_sigmoid", "sample_bernoulli", "check_finite", "activate_binary",
]
