"""Background managers for long-running icon services."""

from .performance import PerformanceMonitor

__all__ = ["PerformanceMonitor"]
