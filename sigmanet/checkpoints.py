"""Compressed ``.npz`` persistence for parameter sets."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

import numpy as np

from .core.types import ParameterSet, Topology

logger = logging.getLogger(__name__)


def checkpoint_name(score: int, topology: Topology) -> str:
    return f"model-{int(score)}-{topology.slug()}.npz"


def write_parameters(path: str | Path, parameters: ParameterSet, topology: Topology) -> Path:
    """Write ``parameters`` and ``topology`` to ``path``; I/O errors propagate."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = parameters.state_dict()
    payload["topology"] = np.asarray(topology.sizes, dtype=np.int64)
    with path.open("wb") as handle:
        np.savez_compressed(handle, **payload)
    return path


def read_parameters(path: str | Path) -> Tuple[Topology, ParameterSet]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No saved parameters at {path}")
    with np.load(path) as archive:
        topology = Topology.of(archive["topology"].tolist())
        state = {name: archive[name] for name in archive.files if name != "topology"}
    parameters = ParameterSet.from_state_dict(state, topology.transitions)
    parameters.validate(topology)
    return topology, parameters


class CheckpointSink:
    """Save best-scoring parameter sets under ``directory``."""

    def __init__(self, directory: str | Path = ".") -> None:
        self.directory = Path(directory)
        self.last_path: Path | None = None

    def path_for(self, score: int, topology: Topology) -> Path:
        return self.directory / checkpoint_name(score, topology)

    def save(self, parameters: ParameterSet, topology: Topology, score: int) -> bool:
        path = self.path_for(score, topology)
        try:
            write_parameters(path, parameters, topology)
        except OSError as exc:
            logger.warning("Could not save checkpoint %s: %s", path, exc)
            return False
        self.last_path = path
        logger.info("Saved parameters scoring %d to %s", score, path)
        return True

    def load(self, path: str | Path) -> Tuple[Topology, ParameterSet]:
        return read_parameters(path)


__all__ = ["CheckpointSink", "checkpoint_name", "read_parameters", "write_parameters"]
