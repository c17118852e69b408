"""Forward pass, backpropagation and gradient accumulation for sigmoid MLPs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np

from .activations import sigmoid, sigmoid_deriv
from .dense import (
    DimensionMismatch,
    add_elementwise,
    column,
    dot_prod,
    hadamard,
    transpose,
    vector_transpose,
)
from .types import ActivationState, Array, Gradients, ParameterSet


def forward(params: ParameterSet, inputs: Array) -> ActivationState:
    """Run ``z = W·y + b``, ``y = sigmoid(z)`` layer by layer.

    ``inputs`` may be flat or a column; ``activations[0]`` is always the raw
    input as a column.
    """

    y = column(inputs)
    activations: List[Array] = [y]
    pre_activations: List[Array] = []
    for W, b in zip(params.weights, params.biases):
        z = dot_prod(W, y) + column(b)
        y = sigmoid(z)
        pre_activations.append(z)
        activations.append(y)
    return ActivationState(activations=activations, pre_activations=pre_activations)


def backward(params: ParameterSet, state: ActivationState, output_delta: Array) -> List[Array]:
    """Propagate ``output_delta`` back to the first hidden layer.

    Returns one delta column per non-input layer, ordered from the first
    hidden layer to the output layer.
    """

    n_deltas = len(params.weights)
    deltas: List[Array] = [np.empty(0)] * n_deltas
    deltas[-1] = column(output_delta)
    for idx in reversed(range(n_deltas - 1)):
        propagated = dot_prod(transpose(params.weights[idx + 1]), deltas[idx + 1])
        deltas[idx] = hadamard(propagated, sigmoid_deriv(state.pre_activations[idx]))
    return deltas


def gradients(state: ActivationState, deltas: List[Array]) -> Gradients:
    """Per-example gradients ``dW_l = delta_{l+1}·y_l^T`` and ``dB_l = delta_{l+1}``."""

    if len(deltas) != len(state.activations) - 1:
        raise DimensionMismatch(
            f"{len(deltas)} deltas for {len(state.activations)} activation layers"
        )
    weights = [dot_prod(delta, transpose(y)) for delta, y in zip(deltas, state.activations)]
    biases = [vector_transpose(delta) for delta in deltas]
    return Gradients(weights=weights, biases=biases)


@dataclass
class GradientAccumulator:
    """Running sum of per-example gradients over one mini-batch."""

    weights: List[Array] = field(default_factory=list)
    biases: List[Array] = field(default_factory=list)
    count: int = 0

    def add(self, grads: Gradients) -> None:
        if self.count == 0:
            self.weights = [g.copy() for g in grads.weights]
            self.biases = [g.copy() for g in grads.biases]
        else:
            self.weights = add_elementwise(self.weights, grads.weights)
            self.biases = add_elementwise(self.biases, grads.biases)
        self.count += 1

    def total(self) -> Gradients:
        if self.count == 0:
            raise ValueError("No gradients accumulated")
        return Gradients(weights=list(self.weights), biases=list(self.biases))

    def reset(self) -> None:
        self.weights = []
        self.biases = []
        self.count = 0


__all__ = ["GradientAccumulator", "backward", "forward", "gradients"]
