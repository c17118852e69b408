"""Core numerical primitives for sigmanet."""

from . import activations, backprop, dense, types

__all__ = ["activations", "backprop", "dense", "types"]
