"""Utility functions for MRmsProp."""

from .training import train_layer, validate_layer, NonFiniteUpdateError

__all__ = [
    "train_layer",
    "validate_layer",
    "NonFiniteUpdateError",
]
