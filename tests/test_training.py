"""
Tests for the layer container and the training loop.

These tests verify:
1. WeightLayer exposes width/height matching its matrices
2. validate_layer catches shape mismatches
3. train_layer drives weights toward a target and halts on NaN/Inf
"""

from types import SimpleNamespace

import torch
import torch.nn as nn
import pytest

from mrmsprop import (
    MRmsProp,
    WeightLayer,
    train_layer,
    validate_layer,
    NonFiniteUpdateError,
)


class TestWeightLayer:

    def test_dimensions(self):
        layer = WeightLayer(torch.zeros(5, 3))
        assert layer.width == 3
        assert layer.height == 5
        assert torch.equal(layer.deltas, torch.zeros(5, 3))

    def test_zeros(self):
        layer = WeightLayer.zeros(width=4, height=2)
        assert layer.weights.shape == (2, 4)

    def test_random_is_reproducible(self):
        a = WeightLayer.random(3, 3, generator=torch.Generator().manual_seed(7))
        b = WeightLayer.random(3, 3, generator=torch.Generator().manual_seed(7))
        assert torch.equal(a.weights, b.weights)

    def test_rejects_non_matrix(self):
        with pytest.raises(ValueError):
            WeightLayer(torch.zeros(3))

    def test_from_linear(self):
        linear = nn.Linear(4, 3)
        loss = linear(torch.randn(8, 4)).pow(2).sum()
        loss.backward()

        layer = WeightLayer.from_linear(linear)

        assert layer.width == 4
        assert layer.height == 3
        assert torch.equal(layer.weights, linear.weight.detach())
        assert torch.equal(layer.deltas, linear.weight.grad)
        # Copies, not views
        layer.weights += 1
        assert not torch.equal(layer.weights, linear.weight.detach())

    def test_from_linear_without_grad(self):
        layer = WeightLayer.from_linear(nn.Linear(2, 6))
        assert torch.count_nonzero(layer.deltas) == 0


class TestValidateLayer:

    def test_valid(self):
        validate_layer(WeightLayer.zeros(3, 2))

    def test_mismatched_deltas(self):
        layer = WeightLayer.zeros(3, 2)
        layer.deltas = torch.zeros(3, 2)
        with pytest.raises(ValueError, match="deltas"):
            validate_layer(layer)

    def test_non_positive_dimensions(self):
        layer = SimpleNamespace(width=0, height=2, weights=[[]], deltas=[[]])
        with pytest.raises(ValueError):
            validate_layer(layer)

    def test_non_integer_dimensions(self):
        layer = SimpleNamespace(width=2.0, height=1, weights=[[0.0, 0.0]], deltas=[[0.0, 0.0]])
        with pytest.raises(ValueError, match="integer"):
            validate_layer(layer)


def quadratic_deltas(target):
    """Gradient of sum((w - target)^2)."""
    return lambda weights: 2 * (weights - target)


def test_train_layer_reaches_target():
    target = torch.tensor([[0.5, -0.5], [1.0, 0.0], [-1.0, 0.25]])
    layer = WeightLayer.zeros(width=2, height=3)
    optimizer = MRmsProp(layer, learning_rate=0.01, decay_rate=0.9)

    weights = train_layer(layer, optimizer, quadratic_deltas(target), num_steps=1000, progress=False)

    assert weights is layer.weights
    assert torch.allclose(weights, target, atol=0.05)


def test_train_layer_clips_large_gradients():
    target = torch.full((2, 2), 100.0)
    layer = WeightLayer.zeros(width=2, height=2)
    optimizer = MRmsProp(layer, learning_rate=0.01, decay_rate=0.9, clip_value=1.0)

    train_layer(layer, optimizer, quadratic_deltas(target), num_steps=1, progress=False)

    assert optimizer.clipped_fraction() == 1.0
    # Weight step uses clip_value while the momentum sees the raw gradient
    expected = 0.01 * 1.0 / torch.sqrt(torch.tensor(0.1 * 200.0 ** 2 + 1e-8))
    assert torch.allclose(layer.weights, expected.expand(2, 2), rtol=1e-4)


def test_train_layer_halts_on_non_finite_update():
    layer = WeightLayer(torch.ones(2, 2))
    optimizer = MRmsProp(layer, smooth_eps=0.0)

    with pytest.raises(NonFiniteUpdateError):
        train_layer(layer, optimizer, torch.zeros_like, num_steps=3, progress=False)

    # Last finite weights stay installed
    assert torch.equal(layer.weights, torch.ones(2, 2))


def test_train_layer_rejects_misshapen_deltas():
    layer = WeightLayer.zeros(width=3, height=2)
    optimizer = MRmsProp(layer)

    # Would broadcast against the 2x3 weights
    with pytest.raises(ValueError, match="deltas"):
        train_layer(layer, optimizer, lambda w: torch.ones(4, 2, 3), num_steps=1, progress=False)

    assert layer.weights.shape == (2, 3)
    assert layer.deltas.shape == (2, 3)
    assert optimizer.momentums.shape == (2, 3)


def test_train_layer_checks_deltas_on_every_step():
    layer = WeightLayer.zeros(width=2, height=2)
    optimizer = MRmsProp(layer)
    calls = []

    def compute_deltas(weights):
        calls.append(1)
        if len(calls) == 3:
            return torch.ones(2, 1)
        return torch.ones_like(weights)

    with pytest.raises(ValueError):
        train_layer(layer, optimizer, compute_deltas, num_steps=5, progress=False)

    assert len(calls) == 3
    assert layer.weights.shape == (2, 2)
    assert optimizer.momentums.shape == (2, 2)


def test_train_layer_validates_before_stepping():
    layer = WeightLayer.zeros(2, 2)
    optimizer = MRmsProp(layer)
    layer.deltas = torch.zeros(1, 1)

    with pytest.raises(ValueError):
        train_layer(layer, optimizer, torch.zeros_like, num_steps=1, progress=False)
