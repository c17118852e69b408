"""MNIST handwritten digits with an offline synthetic fixture."""

from __future__ import annotations

import logging
import urllib.request
from pathlib import Path

import numpy as np

from .registry import ClassificationDataset, register_dataset
from .utils import checksum_path, offline_requested, resolve_cache_dir

logger = logging.getLogger(__name__)

MNIST_URL = "https://storage.googleapis.com/tensorflow/tf-keras-datasets/mnist.npz"
MNIST_CHECKSUM = "731c5ac602752760c8e48fbffcf8c3b850d9dc2a2aedcf2cc48468fc17b673d1"


def _load_archive(path: Path) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    with np.load(path) as data:
        return data["x_train"], data["y_train"], data["x_test"], data["y_test"]


def _prepare_inputs(images: np.ndarray) -> np.ndarray:
    images = images.astype(np.float64)
    if images.max() > 1:
        images /= 255.0
    return images.reshape(images.shape[0], -1)


def _offline_dataset(n_train: int, n_test: int) -> tuple[np.ndarray, ...]:
    """Deterministic MNIST-shaped fixture: one noisy prototype image per digit."""

    rng = np.random.default_rng(12345)
    prototypes = (rng.random((10, 28, 28)) > 0.7).astype(np.float64)

    def draw(n: int) -> tuple[np.ndarray, np.ndarray]:
        labels = np.arange(n, dtype=np.int64) % 10
        noise = 0.15 * rng.standard_normal((n, 28, 28))
        images = np.clip(prototypes[labels] + noise, 0.0, 1.0)
        return images, labels

    x_train, y_train = draw(n_train)
    x_test, y_test = draw(n_test)
    return x_train, y_train, x_test, y_test


def _download(cache_root: Path) -> Path:
    target = cache_root / "mnist.npz"
    if target.exists() and checksum_path(target) == MNIST_CHECKSUM:
        return target
    logger.info("Downloading MNIST from %s", MNIST_URL)
    partial = target.with_suffix(".part")
    urllib.request.urlretrieve(MNIST_URL, partial)
    if checksum_path(partial) != MNIST_CHECKSUM:
        partial.unlink()
        raise OSError(f"Checksum mismatch for {MNIST_URL}")
    partial.replace(target)
    return target


@register_dataset("mnist")
def build_mnist(
    *,
    offline: bool | None = None,
    cache_dir: str | Path | None = None,
    path: str | Path | None = None,
    max_train: int | None = None,
    max_test: int | None = None,
    fixture_train: int = 500,
    fixture_test: int = 100,
    **_: object,
) -> ClassificationDataset:
    """Create the MNIST dataset: 60000 training and 10000 test images of 784 pixels.

    ``path`` points at a local keras-format ``mnist.npz``. Without it, online
    mode downloads the archive into the cache directory and offline mode falls
    back to a small synthetic fixture with the same shapes.
    """

    if path is not None:
        archive = _load_archive(Path(path))
        provenance: dict[str, object] = {"mode": "file", "path": str(path)}
    elif offline_requested(offline):
        archive = _offline_dataset(fixture_train, fixture_test)
        provenance = {"mode": "offline", "source": "synthetic"}
    else:
        archive_path = _download(resolve_cache_dir(cache_dir))
        archive = _load_archive(archive_path)
        provenance = {"mode": "cache", "path": str(archive_path), "checksum": MNIST_CHECKSUM}

    x_train, y_train, x_test, y_test = archive
    if max_train is not None:
        x_train, y_train = x_train[:max_train], y_train[:max_train]
    if max_test is not None:
        x_test, y_test = x_test[:max_test], y_test[:max_test]

    provenance.update({"name": "mnist", "max_train": max_train, "max_test": max_test})
    return ClassificationDataset(
        "mnist",
        _prepare_inputs(x_train),
        y_train,
        _prepare_inputs(x_test),
        y_test,
        num_classes=10,
        provenance=provenance,
    )


__all__ = ["build_mnist"]
