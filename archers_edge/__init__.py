"""Archer's Edge - archery team scoring and results."""

__version__ = "1.0.0"
