"""Cost functions paired with their output-layer error signal."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from ..core.activations import sigmoid_deriv
from ..core.dense import (
    column,
    cross_entropy_cost_deriv,
    hadamard,
    quadratic_cost_deriv,
)
from ..core.types import ActivationState, Array
from .config import CostFunction

CostFn = Callable[[Array, Array], float]
DeltaFn = Callable[[ActivationState, Array], Array]


@dataclass(frozen=True)
class Loss:
    """Cost wrapper returning both the scalar cost and the output delta."""

    kind: CostFunction
    cost: CostFn
    delta: DeltaFn

    @property
    def name(self) -> str:
        return self.kind.value

    def __call__(self, state: ActivationState, target: Array) -> tuple[float, Array]:
        target = column(target)
        return self.cost(state.output, target), self.delta(state, target)


class LossRegistry:
    """Central registry for cost functions."""

    def __init__(self) -> None:
        self._registry: Dict[CostFunction, Loss] = {}

    def register(self, kind: CostFunction, cost: CostFn, delta: DeltaFn) -> None:
        self._registry[kind] = Loss(kind, cost, delta)

    def get(self, kind: CostFunction | str) -> Loss:
        if not isinstance(kind, CostFunction):
            try:
                kind = CostFunction(str(kind))
            except ValueError as exc:
                available = ", ".join(self.names())
                raise KeyError(f"Unknown cost {kind!r}. Available costs: {available}") from exc
        return self._registry[kind]

    def names(self) -> Iterable[str]:
        return sorted(kind.value for kind in self._registry)


REGISTRY = LossRegistry()


def quadratic_cost(y: Array, target: Array) -> float:
    return float(0.5 * np.sum(np.square(y - target)))


def cross_entropy_cost(y: Array, target: Array) -> float:
    eps = 1e-12
    y = np.clip(y, eps, 1.0 - eps)
    return float(-np.sum(target * np.log(y) + (1.0 - target) * np.log(1.0 - y)))


def _quadratic_delta(state: ActivationState, target: Array) -> Array:
    return hadamard(
        quadratic_cost_deriv(state.output, target),
        sigmoid_deriv(state.pre_activations[-1]),
    )


def _cross_entropy_delta(state: ActivationState, target: Array) -> Array:
    return cross_entropy_cost_deriv(state.output, target)


REGISTRY.register(CostFunction.QUADRATIC, quadratic_cost, _quadratic_delta)
REGISTRY.register(CostFunction.CROSS_ENTROPY, cross_entropy_cost, _cross_entropy_delta)

__all__ = ["Loss", "LossRegistry", "REGISTRY", "cross_entropy_cost", "quadratic_cost"]
