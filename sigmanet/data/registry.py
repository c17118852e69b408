"""Dataset registry and the in-memory classification dataset contract."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Iterable, MutableMapping

import numpy as np

from ..core.types import Array, Example


class ClassificationDataset:
    """Ordered, indexable training and test examples with integer labels.

    Inputs are stored as ``(n, input_size)`` float64 arrays and labels as
    ``(n,)`` int64 arrays. :meth:`shuffle` permutes the training split in
    place, keeping every input paired with its label.
    """

    def __init__(
        self,
        name: str,
        train_inputs: Array,
        train_labels: Array,
        test_inputs: Array,
        test_labels: Array,
        *,
        num_classes: int = 10,
        provenance: Dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.train_inputs = np.asarray(train_inputs, dtype=np.float64)
        self.train_labels = np.asarray(train_labels, dtype=np.int64).reshape(-1)
        self.test_inputs = np.asarray(test_inputs, dtype=np.float64)
        self.test_labels = np.asarray(test_labels, dtype=np.int64).reshape(-1)
        self.num_classes = int(num_classes)
        self.provenance = dict(provenance or {})
        self._validate()

    def _validate(self) -> None:
        for split, inputs, labels in (
            ("train", self.train_inputs, self.train_labels),
            ("test", self.test_inputs, self.test_labels),
        ):
            if inputs.ndim != 2:
                raise ValueError(f"{split} inputs must be 2-D, got shape {inputs.shape}")
            if inputs.shape[0] != labels.shape[0]:
                raise ValueError(
                    f"{split} split has {inputs.shape[0]} inputs but {labels.shape[0]} labels"
                )
            if labels.size and (labels.min() < 0 or labels.max() >= self.num_classes):
                raise ValueError(f"{split} labels must lie in [0, {self.num_classes - 1}]")
        if self.train_inputs.shape[1] != self.test_inputs.shape[1]:
            raise ValueError("train and test inputs differ in width")
        if self.training_size() == 0 or self.test_size() == 0:
            raise ValueError("Training and test splits must both be non-empty")

    def training_size(self) -> int:
        return int(self.train_labels.shape[0])

    def test_size(self) -> int:
        return int(self.test_labels.shape[0])

    def input_size(self) -> int:
        return int(self.train_inputs.shape[1])

    def training_example(self, index: int) -> Example:
        return Example(inputs=self.train_inputs[index], label=int(self.train_labels[index]))

    def test_example(self, index: int) -> Example:
        return Example(inputs=self.test_inputs[index], label=int(self.test_labels[index]))

    def shuffle(self, rng: np.random.Generator) -> None:
        """Apply one uniformly random permutation to training inputs and labels."""

        order = rng.permutation(self.training_size())
        self.train_inputs = self.train_inputs[order]
        self.train_labels = self.train_labels[order]

    @property
    def splits(self) -> Dict[str, int]:
        return {"train": self.training_size(), "test": self.test_size()}


DatasetFactory = Callable[..., ClassificationDataset]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    Usable as a decorator::

        @register_dataset("xor")
        def make_xor(**kwargs):
            ...

    or directly as ``register_dataset("xor", make_xor)``.
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(
    dataset: str,
    /,
    *,
    offline: bool | None = None,
    cache_dir: str | Path | None = None,
    **options: Any,
) -> ClassificationDataset:
    """Build the dataset registered under ``dataset``.

    ``offline=None`` defers to ``SIGMANET_DATA_OFFLINE`` (see
    :func:`sigmanet.data.utils.offline_requested`).
    """

    if dataset not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")
    return _REGISTRY[dataset](offline=offline, cache_dir=cache_dir, **options)


def available_datasets() -> Iterable[str]:
    return sorted(_REGISTRY)


__all__ = [
    "ClassificationDataset",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
