"""Command line interface for sigmanet."""
