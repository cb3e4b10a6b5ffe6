"""Monochrome status-icon synthesis with bounded caching."""

__version__ = "1.0.0"
