"""Pure in-memory synthetic classification datasets."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from .registry import ClassificationDataset, register_dataset
from .utils import deterministic_split

_XOR_CENTERS = np.array([[-1.0, -1.0], [-1.0, 1.0], [1.0, -1.0], [1.0, 1.0]])
_XOR_LABELS = np.array([0, 1, 1, 0], dtype=np.int64)


def _make_xor(n_points: int, noise: float, seed: int) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    cluster = np.arange(n_points) % len(_XOR_CENTERS)
    x = _XOR_CENTERS[cluster] + noise * rng.standard_normal((n_points, 2))
    return x, _XOR_LABELS[cluster]


def _make_blobs(
    n_points: int, classes: int, spread: float, noise: float, seed: int
) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    angles = 2.0 * np.pi * np.arange(classes) / classes
    centers = spread * np.stack([np.cos(angles), np.sin(angles)], axis=1)
    labels = np.arange(n_points) % classes
    x = centers[labels] + noise * rng.standard_normal((n_points, 2))
    return x, labels.astype(np.int64)


def _split(
    name: str,
    x: np.ndarray,
    y: np.ndarray,
    *,
    num_classes: int,
    test_split: float,
    seed: int,
    provenance: dict,
) -> ClassificationDataset:
    splits = deterministic_split(x.shape[0], test_split=test_split, seed=seed)
    provenance = dict(provenance)
    provenance.update({"type": "synthetic", "seed": seed, "test_split": test_split})
    return ClassificationDataset(
        name,
        x[splits.train],
        y[splits.train],
        x[splits.test],
        y[splits.test],
        num_classes=num_classes,
        provenance=provenance,
    )


@register_dataset("xor")
def build_xor(
    n_points: int = 200,
    noise: float = 0.2,
    seed: int = 0,
    *,
    test_split: float = 0.2,
    offline: bool | None = None,
    cache_dir: str | Path | None = None,
    **_: object,
) -> ClassificationDataset:
    """Noisy clusters at the four corners of a square labelled by XOR of the signs."""

    x, y = _make_xor(n_points, noise, seed)
    return _split(
        "xor",
        x,
        y,
        num_classes=2,
        test_split=test_split,
        seed=seed,
        provenance={"name": "xor", "n_points": n_points, "noise": noise},
    )


@register_dataset("blobs")
def build_blobs(
    n_points: int = 300,
    classes: int = 3,
    spread: float = 3.0,
    noise: float = 0.5,
    seed: int = 0,
    *,
    test_split: float = 0.2,
    offline: bool | None = None,
    cache_dir: str | Path | None = None,
    **_: object,
) -> ClassificationDataset:
    """Gaussian clusters evenly spaced on a circle, one per class."""

    if not 2 <= classes <= 10:
        raise ValueError(f"blobs supports 2 to 10 classes, got {classes}")
    x, y = _make_blobs(n_points, classes, spread, noise, seed)
    return _split(
        "blobs",
        x,
        y,
        num_classes=classes,
        test_split=test_split,
        seed=seed,
        provenance={"name": "blobs", "n_points": n_points, "classes": classes, "noise": noise},
    )


__all__ = ["build_blobs", "build_xor"]
