"""Core typing contracts for sigmanet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class Topology:
    """Layer sizes of the perceptron, input layer first."""

    sizes: Tuple[int, ...]

    def __post_init__(self) -> None:
        sizes = tuple(int(s) for s in self.sizes)
        if len(sizes) < 2:
            raise ValueError("A topology needs at least an input and an output layer")
        if any(s <= 0 for s in sizes):
            raise ValueError(f"Layer sizes must be positive, got {list(sizes)}")
        object.__setattr__(self, "sizes", sizes)

    @classmethod
    def of(cls, sizes: Sequence[int]) -> "Topology":
        return cls(tuple(sizes))

    @property
    def n_layers(self) -> int:
        return len(self.sizes)

    @property
    def transitions(self) -> int:
        return len(self.sizes) - 1

    @property
    def input_size(self) -> int:
        return self.sizes[0]

    @property
    def output_size(self) -> int:
        return self.sizes[-1]

    def parameter_count(self) -> int:
        return sum(o * i + o for i, o in zip(self.sizes[:-1], self.sizes[1:]))

    def describe(self) -> str:
        return str(list(self.sizes))

    def slug(self) -> str:
        return "x".join(str(s) for s in self.sizes)


@dataclass
class ParameterSet:
    """Per-transition weight matrices and bias vectors.

    ``weights[l]`` has shape ``(size(l+1), size(l))`` and ``biases[l]`` has
    shape ``(size(l+1),)``. The training loop mutates the arrays in place.
    """

    weights: List[Array]
    biases: List[Array]

    def validate(self, topology: Topology) -> None:
        from .dense import DimensionMismatch

        if len(self.weights) != topology.transitions or len(self.biases) != topology.transitions:
            raise DimensionMismatch(
                f"Expected {topology.transitions} weight/bias pairs for topology "
                f"{topology.describe()}, got {len(self.weights)}/{len(self.biases)}"
            )
        dims = topology.sizes
        for idx, (W, b) in enumerate(zip(self.weights, self.biases)):
            expected = (dims[idx + 1], dims[idx])
            if W.shape != expected:
                raise DimensionMismatch(f"W{idx} has shape {W.shape}, expected {expected}")
            if b.shape != (dims[idx + 1],):
                raise DimensionMismatch(
                    f"b{idx} has shape {b.shape}, expected {(dims[idx + 1],)}"
                )

    def copy(self) -> "ParameterSet":
        return ParameterSet(
            weights=[W.copy() for W in self.weights],
            biases=[b.copy() for b in self.biases],
        )

    def snapshot(self) -> "ParameterSet":
        """Return a read-only copy suitable for inference."""

        frozen = self.copy()
        for array in (*frozen.weights, *frozen.biases):
            array.setflags(write=False)
        return frozen

    def state_dict(self) -> Dict[str, Array]:
        state = {f"W{idx}": W.copy() for idx, W in enumerate(self.weights)}
        state.update({f"b{idx}": b.copy() for idx, b in enumerate(self.biases)})
        return state

    @classmethod
    def from_state_dict(cls, state: Mapping[str, Array], transitions: int) -> "ParameterSet":
        weights: List[Array] = []
        biases: List[Array] = []
        for idx in range(transitions):
            for key in (f"W{idx}", f"b{idx}"):
                if key not in state:
                    raise KeyError(f"Missing parameter {key} in state dict")
            weights.append(np.array(state[f"W{idx}"], dtype=np.float64))
            biases.append(np.array(state[f"b{idx}"], dtype=np.float64))
        return cls(weights=weights, biases=biases)


@dataclass
class ActivationState:
    """Column-vector activations captured during one forward pass."""

    activations: List[Array]
    pre_activations: List[Array]

    @property
    def output(self) -> Array:
        return self.activations[-1]


@dataclass
class Gradients:
    """Weight and bias gradients shaped like a :class:`ParameterSet`."""

    weights: List[Array]
    biases: List[Array]


@dataclass(frozen=True)
class Example:
    """A single input vector with its integer class label."""

    inputs: Array
    label: int

    def target(self, size: int = 10) -> Array:
        from .dense import output_vector

        return output_vector(self.label, size)


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :meth:`sigmanet.training.trainer.Trainer.run`."""

    epochs: int
    best_successes: int
    history: List[Dict[str, float]] = field(default_factory=list)
    metrics_path: str = ""
    manifest_path: str = ""
    summary_path: str = ""
