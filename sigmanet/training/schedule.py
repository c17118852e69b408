"""Learning-rate control driven by held-out test error."""

from __future__ import annotations

import logging

from .config import AdaptiveRate

logger = logging.getLogger(__name__)


class LearningRateController:
    """Hold the current learning rate and adapt it from measured test error.

    The schedule only engages once the error drops below
    :attr:`ERROR_THRESHOLD`. Each update recomputes the rate from the live
    error; nothing is decayed cumulatively. Adaptive rates never go below
    :attr:`MIN_RATE`.
    """

    ERROR_THRESHOLD = 0.035
    MIN_RATE = 0.0001

    def __init__(self, initial_rate: float, mode: AdaptiveRate = AdaptiveRate.NONE) -> None:
        if initial_rate <= 0:
            raise ValueError(f"Learning rate must be positive, got {initial_rate}")
        self.initial_rate = float(initial_rate)
        self.rate = float(initial_rate)
        self.mode = mode
        self.slope = (self.initial_rate - self.MIN_RATE) / self.ERROR_THRESHOLD

    @property
    def adaptive(self) -> bool:
        return self.mode is not AdaptiveRate.NONE

    def update(self, error: float) -> float:
        """Return the (possibly new) rate for test error ``error`` in [0, 1]."""

        if not 0.0 <= error <= 1.0:
            raise ValueError(f"Test error must lie in [0, 1], got {error}")
        if self.mode is AdaptiveRate.NONE or error >= self.ERROR_THRESHOLD:
            return self.rate

        if self.mode is AdaptiveRate.LINEAR:
            rate = self.slope * error + self.MIN_RATE
        elif self.mode is AdaptiveRate.QUADRATIC:
            rate = error * error / self.ERROR_THRESHOLD
        elif self.mode is AdaptiveRate.SQRT:
            rate = (error * self.ERROR_THRESHOLD**3) ** 0.25
        else:  # pragma: no cover - guardrail for new modes
            raise ValueError(f"Unknown adaptive rate mode: {self.mode}")

        rate = max(rate, self.MIN_RATE)
        if rate != self.rate:
            logger.info(
                "Learning rate %.6g -> %.6g (%s, test error %.4f)",
                self.rate,
                rate,
                self.mode.value,
                error,
            )
        self.rate = rate
        return rate


__all__ = ["LearningRateController"]
