"""General utilities for markergen.

This module provides:
    - IndexCounter, the run-wide output index shared by Save stages
"""

from .counter import IndexCounter

__all__ = [
    "IndexCounter",
]
