"""
Momentum Root Mean Squared Propagation (MRmsProp)

Adaptive per-weight learning rate based on a running mean of squared
gradients, with gradient clipping and L2 weight decay:

    m_{t+1} = decay * m_t + (1 - decay) * g^2
    w_{t+1} = w_t - lr * clip(g) / sqrt(m_{t+1} + eps) - lambda * w_t

Two front ends share the same functional kernel:
- MomentumRootMeanSquaredPropagation: bound to a single layer object
  exposing ``width``, ``height``, ``weights`` and ``deltas``
- MomentumRMSprop: a regular torch.optim.Optimizer over parameters
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

import torch
from torch.optim import Optimizer

from ..layers import is_positive_int
from .functional import is_clipped_by_value, momentum_rmsprop


@dataclass(frozen=True)
class MRmsPropConfig:
    """Hyperparameters for MRmsProp. Immutable once built."""

    decay_rate: float = 0.999
    regularization_strength: float = 1e-5
    learning_rate: float = 0.01
    smooth_eps: float = 1e-8
    clip_value: float = 5.0

    @classmethod
    def from_overrides(
        cls,
        settings: Optional[Mapping[str, Any]] = None,
        **overrides,
    ) -> "MRmsPropConfig":
        """
        Build a config from the defaults, a settings mapping and keyword overrides.

        Keyword overrides win over ``settings``. Unknown keys raise TypeError.
        Values are not range-checked; e.g. ``smooth_eps=0`` can produce NaN.
        """
        merged = dict(settings or {})
        merged.update(overrides)
        return dataclasses.replace(cls(), **merged)


class MomentumRootMeanSquaredPropagation:
    """
    MRmsProp bound to one layer.

    The optimizer keeps its own momentum matrix (zeros at construction, same
    shape as the layer's weights) and reads ``layer.weights`` and
    ``layer.deltas`` on every step. It never writes to the layer: ``step()``
    returns the new weights and the caller installs them.

    Args:
        layer: Object with ``width``, ``height``, ``weights`` and ``deltas``
        settings: Optional mapping of hyperparameter overrides
        **overrides: Hyperparameter overrides (decay_rate,
            regularization_strength, learning_rate, smooth_eps, clip_value)

    Example:
        optimizer = MRmsProp(layer, learning_rate=0.1)
        layer.weights = optimizer.step()
    """

    defaults = MRmsPropConfig()

    def __init__(self, layer, settings: Optional[Mapping[str, Any]] = None, **overrides):
        width = getattr(layer, 'width', None)
        height = getattr(layer, 'height', None)
        if not is_positive_int(width) or not is_positive_int(height):
            raise ValueError(f"Layer must have positive integer width and height, got {width}x{height}")

        self.layer = layer
        self.width = int(width)
        self.height = int(height)
        self.config = MRmsPropConfig.from_overrides(settings, **overrides)

        weights = getattr(layer, 'weights', None)
        if isinstance(weights, torch.Tensor):
            self.momentums = torch.zeros(
                self.height, self.width, dtype=weights.dtype, device=weights.device
            )
        else:
            self.momentums = torch.zeros(self.height, self.width)

    @property
    def learning_rate(self) -> float:
        return self.config.learning_rate

    @property
    def decay_rate(self) -> float:
        return self.config.decay_rate

    @property
    def regularization_strength(self) -> float:
        return self.config.regularization_strength

    @property
    def smooth_eps(self) -> float:
        return self.config.smooth_eps

    @property
    def clip_value(self) -> float:
        return self.config.clip_value

    def step(self) -> torch.Tensor:
        """
        Compute updated weights from the layer's current weights and deltas.

        Replaces the internal momentum matrix. The layer is left untouched.
        The computation runs in the floating dtype of ``layer.weights``; the
        momentum is converted to that dtype when the weights' dtype changes.

        Returns:
            New weight matrix (height x width)
        """
        weights = torch.as_tensor(self.layer.weights, device=self.momentums.device)
        if not weights.is_floating_point():
            weights = weights.to(self.momentums.dtype)
        deltas = torch.as_tensor(self.layer.deltas, dtype=weights.dtype, device=weights.device)

        new_weights, self.momentums = momentum_rmsprop(
            weights,
            deltas,
            self.momentums.to(weights.dtype),
            learning_rate=self.config.learning_rate,
            decay_rate=self.config.decay_rate,
            regularization_strength=self.config.regularization_strength,
            clip_value=self.config.clip_value,
            smooth_eps=self.config.smooth_eps,
        )
        return new_weights

    def run(self, *args) -> torch.Tensor:
        """Layer-graph entry point. Arguments are ignored; same as ``step()``."""
        return self.step()

    def clipped_fraction(self) -> float:
        """Fraction of the layer's current deltas that exceed ``clip_value``."""
        deltas = torch.as_tensor(self.layer.deltas)
        clipped = is_clipped_by_value(deltas, self.config.clip_value, -self.config.clip_value)
        return clipped.sum().item() / clipped.numel()

    def reset(self):
        """Zero the momentum matrix."""
        self.momentums = torch.zeros_like(self.momentums)

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(width={self.width}, height={self.height}, "
            f"config={self.config})"
        )


# Short name
MRmsProp = MomentumRootMeanSquaredPropagation


def create_optimizers(layers: Iterable, settings=None, **overrides) -> List[MomentumRootMeanSquaredPropagation]:
    """
    Create one independent optimizer per layer.

    Each optimizer owns its momentum matrix, so layers can be stepped in any
    order or in parallel.
    """
    return [
        MomentumRootMeanSquaredPropagation(layer, settings, **overrides)
        for layer in layers
    ]


class MomentumRMSprop(Optimizer):
    """
    MRmsProp as a torch optimizer.

    Applies the same update as MomentumRootMeanSquaredPropagation to every
    parameter with a gradient, using ``p.grad`` as the delta.

    Args:
        params: Iterable of parameters to optimize
        lr: Learning rate (default: 0.01)
        decay_rate: Decay of the squared-gradient average (default: 0.999)
        weight_decay: L2 regularization strength (default: 1e-5)
        eps: Term added before the square root (default: 1e-8)
        clip_value: Gradient clip bound (default: 5)
    """

    def __init__(
        self,
        params,
        lr=0.01,
        decay_rate=0.999,
        weight_decay=1e-5,
        eps=1e-8,
        clip_value=5.0,
    ):
        if lr < 0.0:
            raise ValueError(f"Invalid learning rate: {lr}")
        if decay_rate < 0.0 or decay_rate > 1.0:
            raise ValueError(f"Invalid decay rate: {decay_rate}")
        if eps < 0.0:
            raise ValueError(f"Invalid epsilon value: {eps}")

        defaults = dict(
            lr=lr,
            decay_rate=decay_rate,
            weight_decay=weight_decay,
            eps=eps,
            clip_value=clip_value,
        )
        super(MomentumRMSprop, self).__init__(params, defaults)

    @torch.no_grad()
    def step(self, closure=None):
        """Performs a single optimization step."""
        loss = None
        if closure is not None:
            with torch.enable_grad():
                loss = closure()

        for group in self.param_groups:
            for p in group['params']:
                if p.grad is None:
                    continue

                state = self.state[p]
                if len(state) == 0:
                    state['step'] = 0
                    state['momentum'] = torch.zeros_like(p)

                state['step'] += 1

                new_p, state['momentum'] = momentum_rmsprop(
                    p,
                    p.grad,
                    state['momentum'],
                    learning_rate=group['lr'],
                    decay_rate=group['decay_rate'],
                    regularization_strength=group['weight_decay'],
                    clip_value=group['clip_value'],
                    smooth_eps=group['eps'],
                )
                p.copy_(new_p)

        return loss
