#!/usr/bin/env python3
"""
Simple example demonstrating MRmsProp.

This script shows:
1. How to step a single layer with MRmsProp
2. How to use MomentumRMSprop as a torch optimizer
"""

import torch
import torch.nn as nn

from mrmsprop import MRmsProp, MomentumRMSprop, WeightLayer, train_layer


def example_1_layer_optimizer():
    """Example 1: Fit a weight matrix to a linear regression target."""
    print("=" * 60)
    print("Example 1: Per-layer MRmsProp")
    print("=" * 60)

    true_weights = torch.randn(5, 10)
    X = torch.randn(100, 10)
    y = X @ true_weights.T + 0.1 * torch.randn(100, 5)

    layer = WeightLayer.zeros(width=10, height=5)
    optimizer = MRmsProp(layer, learning_rate=0.01, decay_rate=0.9)

    def compute_deltas(weights):
        # Gradient of the mean squared error with respect to the weights
        residual = X @ weights.T - y
        return 2 * residual.T @ X / X.shape[0]

    weights = train_layer(layer, optimizer, compute_deltas, num_steps=500)

    error = (weights - true_weights).abs().max().item()
    print(f"  Max weight error: {error:.4f}")


def example_2_torch_optimizer():
    """Example 2: MomentumRMSprop on an nn.Linear."""
    print("=" * 60)
    print("Example 2: MomentumRMSprop")
    print("=" * 60)

    true_weights = torch.randn(10, 5)
    X = torch.randn(100, 10)
    y = X @ true_weights + 0.1 * torch.randn(100, 5)

    model = nn.Linear(10, 5, bias=False)
    optimizer = MomentumRMSprop(model.parameters(), lr=0.01, decay_rate=0.9)

    for epoch in range(200):
        pred = model(X)
        loss = nn.functional.mse_loss(pred, y)

        optimizer.zero_grad()
        loss.backward()
        optimizer.step()

        if (epoch + 1) % 50 == 0:
            print(f"  Epoch {epoch+1}: Loss = {loss.item():.6f}")


if __name__ == "__main__":
    torch.manual_seed(0)
    example_1_layer_optimizer()
    example_2_torch_optimizer()
