"""sigmanet public API."""

from .checkpoints import CheckpointSink
from .core import activations, backprop, dense, types  # noqa: F401
from .core.dense import DimensionMismatch, InvalidLabel
from .core.types import ParameterSet, Topology
from .initializers import InitMode, initialize_parameters
from .training.config import AdaptiveRate, CostFunction, NetworkConfig, Regularization
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Network, SGDOptimizer, Trainer

__all__ = [
    "AdaptiveRate",
    "CheckpointSink",
    "CostFunction",
    "DimensionMismatch",
    "InitMode",
    "InvalidLabel",
    "Network",
    "NetworkConfig",
    "ParameterSet",
    "Regularization",
    "SGDOptimizer",
    "Topology",
    "Trainer",
    "activations",
    "backprop",
    "dense",
    "initialize_parameters",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
]
