"""Parameter initialisation modes."""

from __future__ import annotations

import enum
from pathlib import Path

import numpy as np

from .checkpoints import read_parameters, write_parameters
from .core.types import ParameterSet, Topology


class InitMode(enum.Enum):
    RANDOM = "random"
    RANDOM_AND_SAVE = "random_and_save"
    LOAD_SAVED = "load_saved"
    LOAD_NAMED = "load_named"


def default_init_path(topology: Topology, directory: str | Path = ".") -> Path:
    return Path(directory) / f"initial-{topology.slug()}.npz"


def random_parameters(topology: Topology, rng: np.random.Generator) -> ParameterSet:
    """Gaussian weights scaled by ``1/sqrt(fan_in)`` and standard Gaussian biases."""

    weights = []
    biases = []
    dims = topology.sizes
    for fan_in, fan_out in zip(dims[:-1], dims[1:]):
        weights.append(rng.standard_normal((fan_out, fan_in)) / np.sqrt(fan_in))
        biases.append(rng.standard_normal(fan_out))
    return ParameterSet(weights=weights, biases=biases)


def initialize_parameters(
    topology: Topology,
    mode: InitMode = InitMode.RANDOM,
    *,
    rng: np.random.Generator | None = None,
    path: str | Path | None = None,
    directory: str | Path = ".",
) -> ParameterSet:
    """Build the starting :class:`ParameterSet` for ``topology``.

    ``RANDOM_AND_SAVE`` writes the fresh set to :func:`default_init_path` so a
    later run can start from identical parameters with ``LOAD_SAVED``.
    ``LOAD_NAMED`` reads ``path``.
    """

    if mode is InitMode.RANDOM:
        return random_parameters(topology, rng or np.random.default_rng())
    if mode is InitMode.RANDOM_AND_SAVE:
        parameters = random_parameters(topology, rng or np.random.default_rng())
        write_parameters(default_init_path(topology, directory), parameters, topology)
        return parameters
    if mode is InitMode.LOAD_SAVED:
        source = default_init_path(topology, directory)
    elif mode is InitMode.LOAD_NAMED:
        if path is None:
            raise ValueError("LOAD_NAMED initialisation requires a path")
        source = Path(path)
    else:  # pragma: no cover - guardrail for new modes
        raise ValueError(f"Unknown initialisation mode: {mode}")

    saved_topology, parameters = read_parameters(source)
    if saved_topology != topology:
        raise ValueError(
            f"{source} holds topology {saved_topology.describe()}, "
            f"expected {topology.describe()}"
        )
    return parameters


__all__ = ["InitMode", "default_init_path", "initialize_parameters", "random_parameters"]
