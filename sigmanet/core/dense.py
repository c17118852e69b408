"""Dense linear-algebra primitives used by the forward and backward passes.

All vectors flowing through the network are stored as column matrices of
shape ``(n, 1)``; :func:`vector_transpose` converts such a column back into a
flat vector. Every operation checks shapes up front and raises
:class:`DimensionMismatch` rather than relying on NumPy broadcasting, which
would silently accept many wrong layouts.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from .activations import sigmoid, sigmoid_deriv
from .types import Array


class DimensionMismatch(ValueError):
    """Raised when operands of a linear-algebra operation have incompatible shapes."""


class InvalidLabel(ValueError):
    """Raised when a class label falls outside the one-hot range."""


def _as_matrix(x: Array, name: str) -> Array:
    x = np.asarray(x, dtype=np.float64)
    if x.ndim != 2:
        raise DimensionMismatch(f"{name} must be a 2-D matrix, got shape {x.shape}")
    return x


def dot_prod(a: Array, b: Array) -> Array:
    """Matrix product ``a · b`` of shape ``(rows(a), cols(b))``."""

    a = _as_matrix(a, "a")
    b = _as_matrix(b, "b")
    if a.shape[1] != b.shape[0]:
        raise DimensionMismatch(
            f"Cannot multiply {a.shape} by {b.shape}: "
            f"{a.shape[1]} columns vs {b.shape[0]} rows"
        )
    return a @ b


def vector_transpose(v: Array) -> Array:
    """Flatten a column-vector-shaped matrix ``(n, 1)`` into a vector ``(n,)``."""

    v = _as_matrix(v, "v")
    if v.shape[1] != 1:
        raise DimensionMismatch(f"Expected a column vector, got shape {v.shape}")
    return v[:, 0].copy()


def transpose(m: Array) -> Array:
    """Return ``m`` with its axes swapped; a flat vector is read as a column."""

    m = np.asarray(m, dtype=np.float64)
    if m.ndim == 1:
        m = m.reshape(-1, 1)
    m = _as_matrix(m, "m")
    return m.T.copy()


def column(v: Array) -> Array:
    """Return ``v`` as an ``(n, 1)`` column matrix."""

    return np.asarray(v, dtype=np.float64).reshape(-1, 1)


def hadamard(a: Array, b: Array) -> Array:
    """Elementwise product of two equally shaped arrays."""

    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise DimensionMismatch(f"Hadamard product needs equal shapes, got {a.shape} and {b.shape}")
    return a * b


def quadratic_cost_deriv(y: Array, real: Array) -> Array:
    """Derivative of ``C = 1/2 |y - real|^2`` with respect to ``y``."""

    y = np.asarray(y, dtype=np.float64)
    real = np.asarray(real, dtype=np.float64)
    if y.shape != real.shape:
        raise DimensionMismatch(f"Output {y.shape} and target {real.shape} differ")
    return y - real


def cross_entropy_cost_deriv(y: Array, real: Array) -> Array:
    """Output-layer error of the cross-entropy cost on sigmoid units.

    The true derivative ``(y - real) / (y (1 - y))`` is multiplied by the
    sigmoid derivative ``y (1 - y)`` at the output layer, leaving ``y - real``.
    """

    y = np.asarray(y, dtype=np.float64)
    real = np.asarray(real, dtype=np.float64)
    if y.shape != real.shape:
        raise DimensionMismatch(f"Output {y.shape} and target {real.shape} differ")
    return y - real


def add_elementwise(list_a: Sequence[Array], list_b: Sequence[Array]) -> List[Array]:
    """Pairwise sum of two equally structured collections of matrices."""

    if len(list_a) != len(list_b):
        raise DimensionMismatch(
            f"Cannot add collections of {len(list_a)} and {len(list_b)} matrices"
        )
    summed: List[Array] = []
    for idx, (a, b) in enumerate(zip(list_a, list_b)):
        if np.shape(a) != np.shape(b):
            raise DimensionMismatch(
                f"Entry {idx} shapes differ: {np.shape(a)} vs {np.shape(b)}"
            )
        summed.append(np.asarray(a, dtype=np.float64) + np.asarray(b, dtype=np.float64))
    return summed


def output_vector(label: int, size: int = 10) -> Array:
    """One-hot vector of length ``size`` with ``1.0`` at ``label``."""

    if isinstance(label, (bool, np.bool_)) or int(label) != label:
        raise InvalidLabel(f"Label must be an integer, got {label!r}")
    label = int(label)
    if not 0 <= label < size:
        raise InvalidLabel(f"Label {label} outside [0, {size - 1}]")
    out = np.zeros(size, dtype=np.float64)
    out[label] = 1.0
    return out


__all__ = [
    "DimensionMismatch",
    "InvalidLabel",
    "add_elementwise",
    "column",
    "cross_entropy_cost_deriv",
    "dot_prod",
    "hadamard",
    "output_vector",
    "quadratic_cost_deriv",
    "sigmoid",
    "sigmoid_deriv",
    "transpose",
    "vector_transpose",
]
