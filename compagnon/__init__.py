"""Compagnon — public tender watch (BOAMP) for small building firms."""

__version__ = "1.0.0"
