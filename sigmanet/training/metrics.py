"""Classification metric helpers."""

from __future__ import annotations

import numpy as np

from ..core.dense import output_vector
from ..core.types import Array


def predicted_class(output: Array) -> int:
    """Index of the largest output activation; ties go to the earlier index."""

    return int(np.argmax(np.ravel(output)))


def is_correct(output: Array, target: Array) -> bool:
    """Compare the one-hot prediction for ``output`` against ``target`` exactly."""

    target = np.ravel(target)
    prediction = output_vector(predicted_class(output), target.size)
    return bool(np.array_equal(prediction, target))


def error_rate(successes: int, total: int) -> float:
    if total <= 0:
        raise ValueError("Cannot compute an error rate over an empty set")
    return (total - successes) / total


__all__ = ["error_rate", "is_correct", "predicted_class"]
