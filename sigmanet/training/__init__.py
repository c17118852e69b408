"""Training loop, evaluation and run assembly."""

from .config import AdaptiveRate, CostFunction, NetworkConfig, Regularization
from .evaluator import EvalResult, Evaluator
from .schedule import LearningRateController
from .trainer import Network, SGDOptimizer, Trainer

__all__ = [
    "AdaptiveRate",
    "CostFunction",
    "EvalResult",
    "Evaluator",
    "LearningRateController",
    "Network",
    "NetworkConfig",
    "Regularization",
    "SGDOptimizer",
    "Trainer",
]
