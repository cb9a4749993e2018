"""
MRmsProp: Momentum Root Mean Squared Propagation

Per-weight adaptive update rule for the weight matrix of one layer:
1. Clip each gradient to [-clip_value, clip_value]
2. Keep an exponential moving average of squared (unclipped) gradients
3. Scale the clipped gradient by 1 / sqrt(average + eps)
4. Subtract an L2 weight decay term
"""

__version__ = "0.1.0"

from mrmsprop.optimizers import (
    MomentumRootMeanSquaredPropagation,
    MRmsProp,
    MRmsPropConfig,
    MomentumRMSprop,
    create_optimizers,
    clip_by_value,
    is_clipped_by_value,
    get_momentum,
)
from mrmsprop.layers import WeightLayer
from mrmsprop.utils.training import (
    train_layer,
    validate_layer,
    NonFiniteUpdateError,
)

__all__ = [
    # Optimizers
    "MomentumRootMeanSquaredPropagation",
    "MRmsProp",
    "MRmsPropConfig",
    "MomentumRMSprop",
    "create_optimizers",
    "clip_by_value",
    "is_clipped_by_value",
    "get_momentum",
    # Layers
    "WeightLayer",
    # Training
    "train_layer",
    "validate_layer",
    "NonFiniteUpdateError",
]
