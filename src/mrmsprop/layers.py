"""Minimal weight layer consumed by the optimizers."""

import numbers
from typing import Optional

import torch
import torch.nn as nn


def is_positive_int(value) -> bool:
    """True for integers (Python or numpy) greater than zero. Floats and bools are rejected."""
    return (
        isinstance(value, numbers.Integral)
        and not isinstance(value, bool)
        and value > 0
    )


class WeightLayer:
    """
    A dense weight matrix and its gradient.

    ``weights`` and ``deltas`` are (height x width) tensors. Row y, column x
    addresses one weight.

    Args:
        weights: Initial weight matrix (tensor, array or nested lists)
        deltas: Initial gradient matrix (default: zeros)
    """

    def __init__(self, weights, deltas=None):
        self.weights = torch.as_tensor(weights)
        if self.weights.dim() != 2:
            raise ValueError(f"Weights must be 2-D, got shape {tuple(self.weights.shape)}")

        if deltas is None:
            self.deltas = torch.zeros_like(self.weights)
        else:
            self.deltas = torch.as_tensor(deltas, dtype=self.weights.dtype)

    @property
    def width(self) -> int:
        return self.weights.shape[1]

    @property
    def height(self) -> int:
        return self.weights.shape[0]

    @classmethod
    def zeros(cls, width: int, height: int, dtype=torch.float32) -> "WeightLayer":
        return cls(torch.zeros(height, width, dtype=dtype))

    @classmethod
    def random(
        cls,
        width: int,
        height: int,
        std: float = 0.1,
        generator: Optional[torch.Generator] = None,
        dtype=torch.float32,
    ) -> "WeightLayer":
        """Gaussian initialised weights with zero deltas."""
        weights = torch.randn(height, width, generator=generator, dtype=dtype) * std
        return cls(weights)

    @classmethod
    def from_linear(cls, linear: nn.Linear) -> "WeightLayer":
        """
        Copy the weight matrix of an nn.Linear.

        The result has width ``in_features`` and height ``out_features``.
        The gradient is copied too when one is present.
        """
        weights = linear.weight.detach().clone()
        deltas = None
        if linear.weight.grad is not None:
            deltas = linear.weight.grad.detach().clone()
        return cls(weights, deltas)

    def __repr__(self):
        return f"WeightLayer(width={self.width}, height={self.height})"
