"""Cadence template generation, project file tracking and terminal reports for Flow development."""

__version__ = "0.1.0"
__all__ = ["__version__"]