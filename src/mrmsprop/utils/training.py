"""Training utilities."""

from typing import Callable

import torch
from tqdm import tqdm

from mrmsprop.layers import is_positive_int


class NonFiniteUpdateError(FloatingPointError):
    """Raised when an optimizer step produces NaN or Inf weights."""


def check_shape(name, matrix, height, width):
    """Raise ValueError unless ``matrix`` is height x width."""
    shape = tuple(torch.as_tensor(matrix).shape)
    if shape != (height, width):
        raise ValueError(f"Layer {name} has shape {shape}, expected {(height, width)}")


def validate_layer(layer):
    """
    Check that a layer can be stepped by an optimizer.

    Args:
        layer: Object with ``width``, ``height``, ``weights`` and ``deltas``

    Raises:
        ValueError: If the dimensions are not positive integers or the weight
            and delta matrices are not height x width
    """
    width = getattr(layer, 'width', None)
    height = getattr(layer, 'height', None)
    if not is_positive_int(width) or not is_positive_int(height):
        raise ValueError(f"Layer must have positive integer width and height, got {width}x{height}")

    for name in ('weights', 'deltas'):
        check_shape(name, getattr(layer, name), height, width)


def train_layer(
    layer,
    optimizer,
    compute_deltas: Callable[[torch.Tensor], torch.Tensor],
    num_steps: int,
    progress: bool = True,
):
    """
    Run ``num_steps`` optimizer steps on a single layer.

    Each step computes fresh deltas from the current weights, asks the
    optimizer for new weights and installs them into the layer.

    Args:
        layer: Layer the optimizer is bound to
        optimizer: Optimizer exposing ``step()`` and ``clipped_fraction()``
        compute_deltas: Maps the current weights to their gradient
        num_steps: Number of steps
        progress: Show a progress bar

    Returns:
        Final weights

    Raises:
        ValueError: If the layer is malformed, or ``compute_deltas`` returns
            a matrix that is not height x width. Bad deltas are not installed.
        NonFiniteUpdateError: If a step produces NaN or Inf weights. The
            layer keeps the last finite weights.
    """
    validate_layer(layer)

    pbar = tqdm(range(num_steps), desc="Training", disable=not progress)
    for step in pbar:
        deltas = compute_deltas(layer.weights)
        check_shape('deltas', deltas, layer.height, layer.width)
        layer.deltas = deltas

        weights = optimizer.step()

        if not torch.isfinite(weights).all():
            raise NonFiniteUpdateError(f"Non-finite weights produced at step {step}")

        layer.weights = weights

        pbar.set_postfix({'clipped': optimizer.clipped_fraction()})

    if progress:
        print(f"Finished {num_steps} steps on {layer.height}x{layer.width} layer")

    return layer.weights
