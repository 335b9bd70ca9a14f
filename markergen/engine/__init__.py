"""Run engine for markergen.

This module provides:
    - Driver: feeds marker sources through the augmentation chain
    - RunSummary: counts reported at the end of a run

Example:
    >>> from markergen.engine import build_driver
    >>> summary = build_driver(config).run()
"""

from .driver import Driver, RunSummary, build_driver

__all__ = [
    "Driver",
    "RunSummary",
    "build_driver",
]
