"""Run manifest for a trained perceptron."""

from __future__ import annotations

import json
import platform
import time
from pathlib import Path
from typing import Mapping

import numpy as np

from ..core.types import Topology
from .metrics import git_sha


def network_record(topology: Topology) -> dict:
    """Layer sizes and trainable parameter counts per weight/bias transition."""

    dims = topology.sizes
    layers = [
        {"fan_in": fan_in, "fan_out": fan_out, "weights": fan_in * fan_out, "biases": fan_out}
        for fan_in, fan_out in zip(dims[:-1], dims[1:])
    ]
    return {
        "topology": list(dims),
        "slug": topology.slug(),
        "parameter_count": topology.parameter_count(),
        "layers": layers,
    }


def write_manifest(
    path: str | Path,
    *,
    config: Mapping[str, object],
    dataset_provenance: Mapping[str, object],
    topology: Topology,
) -> str:
    """Record the network, resolved config and dataset provenance of one run.

    The seed inside ``config`` fixes both initialisation and shuffling.
    """

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    manifest = {
        "network": network_record(topology),
        "config": config,
        "dataset": dict(dataset_provenance),
        "git_sha": git_sha(),
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "environment": {
            "python": platform.python_version(),
            "numpy": np.__version__,
        },
    }
    path.write_text(json.dumps(manifest, indent=2, default=str))
    return str(path)


__all__ = ["network_record", "write_manifest"]
