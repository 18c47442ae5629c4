"""Potato potential-yield simulation under different planting dates."""

__version__ = "0.1.0"
