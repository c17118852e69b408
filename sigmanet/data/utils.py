"""Utility helpers for dataset loaders."""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import numpy as np

DEFAULT_CACHE_SUBDIR = Path.home() / ".cache" / "sigmanet"


def resolve_cache_dir(cache_dir: str | Path | None = None) -> Path:
    """Resolve the effective cache directory for datasets."""

    env_dir = os.environ.get("SIGMANET_CACHE_DIR")
    base = Path(cache_dir or env_dir or DEFAULT_CACHE_SUBDIR)
    base.mkdir(parents=True, exist_ok=True)
    return base


def offline_requested(offline: bool | None = None) -> bool:
    """Explicit ``offline`` wins; otherwise ``SIGMANET_DATA_OFFLINE`` (default on)."""

    if offline is not None:
        return bool(offline)
    return os.environ.get("SIGMANET_DATA_OFFLINE", "1") == "1"


def checksum_path(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(8192), b""):
            digest.update(chunk)
    return digest.hexdigest()


@dataclass(frozen=True)
class SplitIndices:
    """Indices for train/test partitions."""

    train: np.ndarray
    test: np.ndarray

    @property
    def sizes(self) -> Mapping[str, int]:
        return {"train": int(self.train.size), "test": int(self.test.size)}


def deterministic_split(
    n_samples: int,
    *,
    test_split: float = 0.2,
    seed: int = 0,
) -> SplitIndices:
    """Return seeded train/test indices holding out ``test_split`` of the samples."""

    if not 0 < test_split < 1:
        raise ValueError("test_split must be in (0, 1)")

    rng = np.random.default_rng(seed)
    indices = np.arange(n_samples)
    rng.shuffle(indices)

    test_size = min(max(int(round(n_samples * test_split)), 1), n_samples)
    if n_samples - test_size <= 0:
        raise ValueError("Not enough samples for the requested split")
    return SplitIndices(train=indices[test_size:], test=indices[:test_size])


__all__ = [
    "SplitIndices",
    "checksum_path",
    "deterministic_split",
    "offline_requested",
    "resolve_cache_dir",
]
