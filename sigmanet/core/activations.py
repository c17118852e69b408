"""Activation utilities for sigmanet."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(z: Array) -> Array:
    """Return the logistic activation ``1 / (1 + e^-z)`` elementwise."""

    z = np.asarray(z, dtype=np.float64)
    # exp of a non-positive argument only, so large |z| cannot overflow
    e = np.exp(-np.abs(z))
    return np.where(z >= 0, 1.0 / (1.0 + e), e / (1.0 + e))


def sigmoid_deriv(z: Array) -> Array:
    """Return ``sigmoid(z) * (1 - sigmoid(z))``, which lies in (0, 0.25]."""

    z = np.asarray(z, dtype=np.float64)
    e = np.exp(-np.abs(z))
    return e / np.square(1.0 + e)
