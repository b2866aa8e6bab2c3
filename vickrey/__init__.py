"""Sealed-bid second-price procurement auction service."""

__version__ = "1.0.0"
