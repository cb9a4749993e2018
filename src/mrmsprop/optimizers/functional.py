"""
Functional form of Momentum Root Mean Squared Propagation.

Every function here is pure: inputs are never modified and new tensors are
returned. All operations are element-wise, so each (y, x) cell of a weight
matrix is updated independently of every other cell.

Update rule for a single cell:
    clipped  = clip(delta, clip_value, -clip_value)
    m_{t+1}  = m_t * decay + (1 - decay) * delta^2
    w_{t+1}  = w_t - lr * clipped / sqrt(m_{t+1} + eps) - lambda * w_t

Note that the momentum uses the raw delta while the weight step uses the
clipped one.
"""

import torch


def clip_by_value(value, max, min):
    """
    Clip ``value`` to ``[min, max]``.

    The argument order is (value, max, min). ``value > max`` is tested
    before ``value < min``, so NaN passes through unchanged.

    Args:
        value: Python number or tensor
        max: Upper bound
        min: Lower bound

    Returns:
        Clipped value, same kind as ``value``
    """
    if isinstance(value, torch.Tensor):
        upper = torch.as_tensor(max, dtype=value.dtype, device=value.device)
        lower = torch.as_tensor(min, dtype=value.dtype, device=value.device)
        return torch.where(value > upper, upper, torch.where(value < lower, lower, value))

    if value > max:
        return max
    if value < min:
        return min
    return value


def is_clipped_by_value(value, max, min):
    """
    Return 1 where ``value`` would be clipped by :func:`clip_by_value`, else 0.

    Does not say in which direction the clipping happens.
    """
    if isinstance(value, torch.Tensor):
        return ((value > max) | (value < min)).to(torch.int64)

    if value > max:
        return 1
    if value < min:
        return 1
    return 0


def get_momentum(delta, decay, previous_momentum):
    """Exponential moving average of squared deltas."""
    return previous_momentum * decay + (1 - decay) * delta * delta


def momentum_rmsprop(
    weights: torch.Tensor,
    deltas: torch.Tensor,
    momentums: torch.Tensor,
    *,
    learning_rate: float,
    decay_rate: float,
    regularization_strength: float,
    clip_value: float,
    smooth_eps: float,
):
    """
    One MRmsProp step over a whole weight matrix.

    Args:
        weights: Current weights (height x width)
        deltas: Gradients, same shape as weights
        momentums: Running mean of squared gradients, same shape as weights
        learning_rate: Step size
        decay_rate: Momentum decay
        regularization_strength: L2 weight decay coefficient
        clip_value: Symmetric bound applied to deltas for the weight step
        smooth_eps: Added to the momentum before the square root

    Returns:
        (new_weights, new_momentums)
    """
    clipped_deltas = clip_by_value(deltas, clip_value, -clip_value)

    # Momentum first; the weight step reads the new value
    new_momentums = get_momentum(deltas, decay_rate, momentums)

    new_weights = (
        weights
        + -learning_rate * clipped_deltas / torch.sqrt(new_momentums + smooth_eps)
        - regularization_strength * weights
    )

    return new_weights, new_momentums
