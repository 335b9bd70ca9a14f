"""markergen: augmented detector datasets from a handful of marker images.

This package sweeps every source marker through a fixed chain of geometric and
photometric transform stages and writes each resulting variant together with
its normalized bounding-box label.
"""

__version__ = "0.1.0"
__author__ = "markergen Team"
