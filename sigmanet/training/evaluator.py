"""Held-out evaluation with best-model tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..checkpoints import CheckpointSink
from ..core.backprop import forward
from ..data.registry import ClassificationDataset
from .metrics import error_rate, is_correct
from .schedule import LearningRateController

if TYPE_CHECKING:  # pragma: no cover
    from .trainer import Network

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvalResult:
    successes: int
    total: int
    error: float
    saved: bool = False

    @property
    def accuracy(self) -> float:
        return self.successes / self.total


class Evaluator:
    """Count correct classifications on the test split after each epoch.

    The test error drives ``schedule`` when it is adaptive. With ``save_best``
    enabled, every result at least as good as the best seen so far (starting
    from ``min_score``) is handed to ``sink``.
    """

    def __init__(
        self,
        schedule: LearningRateController | None = None,
        sink: CheckpointSink | None = None,
        *,
        save_best: bool = False,
        min_score: int = 0,
    ) -> None:
        if save_best and sink is None:
            raise ValueError("save_best requires a checkpoint sink")
        self.schedule = schedule
        self.sink = sink
        self.save_best = save_best
        self.best_successes = int(min_score)

    def evaluate(self, network: "Network", dataset: ClassificationDataset) -> EvalResult:
        parameters = network.parameters.snapshot()
        output_size = network.topology.output_size
        total = dataset.test_size()
        successes = 0
        for idx in range(total):
            example = dataset.test_example(idx)
            state = forward(parameters, example.inputs)
            if is_correct(state.output, example.target(output_size)):
                successes += 1

        error = error_rate(successes, total)
        if self.schedule is not None and self.schedule.adaptive:
            self.schedule.update(error)

        saved = False
        if self.save_best and self.sink is not None and successes >= self.best_successes:
            self.best_successes = successes
            saved = self.sink.save(parameters, network.topology, successes)
            if not saved:
                logger.warning("Best model with %d successes was not persisted", successes)
        return EvalResult(successes=successes, total=total, error=error, saved=saved)


__all__ = ["EvalResult", "Evaluator"]
