"""
Adaptive gradient-descent update rules for layer weight matrices.

Key classes:
- MomentumRootMeanSquaredPropagation (MRmsProp): per-layer optimizer
- MomentumRMSprop: the same rule as a torch.optim.Optimizer
- MRmsPropConfig: immutable hyperparameters
"""

from .functional import (
    clip_by_value,
    is_clipped_by_value,
    get_momentum,
    momentum_rmsprop,
)
from .layer_optimizer import (
    MomentumRootMeanSquaredPropagation,
    MRmsProp,
    MRmsPropConfig,
    MomentumRMSprop,
    create_optimizers,
)

__all__ = [
    # Per-layer optimizer
    "MomentumRootMeanSquaredPropagation",
    "MRmsProp",
    "MRmsPropConfig",
    "create_optimizers",
    # torch.optim variant
    "MomentumRMSprop",
    # Kernel functions
    "clip_by_value",
    "is_clipped_by_value",
    "get_momentum",
    "momentum_rmsprop",
]
