"""Marker source datasets.

This module provides discovery and loading of the labeled marker images a
run starts from.
"""

from .markers import MarkerDataset, MarkerSource, discover_markers

__all__ = ["MarkerDataset", "MarkerSource", "discover_markers"]
