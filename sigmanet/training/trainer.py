"""Mini-batch SGD training loop for sigmoid perceptrons."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

import numpy as np

from ..core.backprop import GradientAccumulator, backward, forward, gradients
from ..core.types import (
    ActivationState,
    Array,
    Example,
    Gradients,
    ParameterSet,
    RunResult,
    Topology,
)
from ..data.registry import ClassificationDataset
from .config import CostFunction, Regularization
from .evaluator import EvalResult, Evaluator
from .losses import REGISTRY as LOSS_REGISTRY
from .losses import Loss
from .metrics import predicted_class
from .schedule import LearningRateController

logger = logging.getLogger(__name__)


@dataclass
class Network:
    """A topology, its live parameters and the cost used to train them."""

    topology: Topology
    parameters: ParameterSet
    cost: CostFunction = CostFunction.CROSS_ENTROPY
    loss: Loss = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.parameters.validate(self.topology)
        self.loss = LOSS_REGISTRY.get(self.cost)

    def describe(self) -> str:
        return self.topology.describe()

    def forward(self, inputs: Array) -> ActivationState:
        return forward(self.parameters, inputs)

    def example_gradients(self, example: Example) -> tuple[float, Gradients]:
        """Cost and per-example gradients for one training example."""

        state = self.forward(example.inputs)
        cost, output_delta = self.loss(state, example.target(self.topology.output_size))
        deltas = backward(self.parameters, state, output_delta)
        return cost, gradients(state, deltas)

    def predict(self, inputs: Array) -> int:
        return predicted_class(self.forward(inputs).output)


@dataclass
class SGDOptimizer:
    """Apply the batch-averaged, optionally L2-regularized gradient step."""

    schedule: LearningRateController
    regularization: Regularization = Regularization.NONE
    lam: float = 0.0
    training_size: int = 1

    @property
    def lr(self) -> float:
        return self.schedule.rate

    def regularization_factor(self) -> float:
        """Weight shrink factor ``1 - lr*lambda/n``; raises ``ValueError`` unless positive."""

        if self.regularization is Regularization.NONE:
            return 1.0
        if self.regularization is Regularization.L2:
            factor = 1.0 - self.lr * (self.lam / self.training_size)
            if factor <= 0:
                raise ValueError(
                    f"L2 factor 1 - lr*lambda/n = {factor:.4g} is not positive "
                    f"(lr={self.lr}, lambda={self.lam}, n={self.training_size})"
                )
            return factor
        raise ValueError(f"Unknown regularization: {self.regularization}")  # pragma: no cover

    def step(self, parameters: ParameterSet, grads: Gradients, batch_size: int) -> None:
        """Update ``parameters`` in place from gradients summed over ``batch_size`` examples."""

        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        shrink = self.regularization_factor()
        scale = self.lr / batch_size
        for W, dW in zip(parameters.weights, grads.weights):
            W *= shrink
            W -= scale * dW
        # biases are never regularized
        for b, dB in zip(parameters.biases, grads.biases):
            b -= scale * dB


class Trainer:
    """Run epochs of mini-batch SGD followed by held-out evaluation."""

    def __init__(
        self,
        network: Network,
        optimizer: SGDOptimizer,
        evaluator: Evaluator,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.network = network
        self.optimizer = optimizer
        self.evaluator = evaluator
        self.callbacks = list(callbacks or [])

    def run(
        self,
        dataset: ClassificationDataset,
        epochs: int,
        mini_batch: int,
        *,
        shuffle: bool = True,
        rng: np.random.Generator | None = None,
    ) -> RunResult:
        if dataset.input_size() != self.network.topology.input_size:
            raise ValueError(
                f"Dataset inputs have {dataset.input_size()} features but the network "
                f"expects {self.network.topology.input_size}"
            )
        if dataset.num_classes > self.network.topology.output_size:
            raise ValueError(
                f"Dataset has {dataset.num_classes} classes but the output layer "
                f"has {self.network.topology.output_size} units"
            )
        if mini_batch < 1:
            raise ValueError(f"mini_batch must be >= 1, got {mini_batch}")
        rng = rng if rng is not None else np.random.default_rng()
        self.optimizer.training_size = dataset.training_size()
        self.optimizer.regularization_factor()

        history: List[Dict[str, float]] = []
        for epoch in range(1, epochs + 1):
            train_cost = self.train_epoch(dataset, mini_batch)
            if shuffle:
                dataset.shuffle(rng)
            result = self.evaluator.evaluate(self.network, dataset)
            metrics = self._epoch_metrics(result, train_cost)
            history.append(metrics)
            logger.info(
                "Epoch %d: %d / %d (%.2f%%)",
                epoch,
                result.successes,
                result.total,
                100.0 * result.accuracy,
            )
            self._emit_epoch(epoch, metrics)

        return RunResult(
            epochs=epochs,
            best_successes=int(max((m["successes"] for m in history), default=0)),
            history=history,
        )

    def train_epoch(self, dataset: ClassificationDataset, mini_batch: int) -> float:
        """One pass over the training split; returns the mean per-example cost.

        Mini-batches are contiguous; a trailing partial batch is applied with
        its own size as the averaging divisor.
        """

        total_cost = 0.0
        n = dataset.training_size()
        for start in range(0, n, mini_batch):
            examples = [dataset.training_example(i) for i in range(start, min(start + mini_batch, n))]
            total_cost += self.train_minibatch(examples)
        return total_cost / n

    def train_minibatch(self, examples: Sequence[Example]) -> float:
        accumulator = GradientAccumulator()
        batch_cost = 0.0
        for example in examples:
            cost, grads = self.network.example_gradients(example)
            accumulator.add(grads)
            batch_cost += cost
        self.optimizer.step(self.network.parameters, accumulator.total(), accumulator.count)
        return batch_cost

    def _epoch_metrics(self, result: EvalResult, train_cost: float) -> Dict[str, float]:
        return {
            "accuracy": float(result.accuracy),
            "error": float(result.error),
            "successes": float(result.successes),
            "train_cost": float(train_cost),
            "learning_rate": float(self.optimizer.lr),
        }

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["Network", "SGDOptimizer", "Trainer"]
