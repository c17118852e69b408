"""Dataset registry and loader helpers."""

# Ensure built-in datasets register themselves when the package is imported.
from . import mnist as _mnist  # noqa: F401
from . import synthetic as _synthetic  # noqa: F401
from .registry import (
    ClassificationDataset,
    available_datasets,
    get_dataset,
    register_dataset,
)

__all__ = [
    "ClassificationDataset",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
