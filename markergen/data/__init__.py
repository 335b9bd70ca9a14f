"""Data handling for markergen.

This package provides the image codec, label records, marker discovery and
the augmentation stages.

Modules:
    io: Image decode/encode between files and float canvases
    labels: Normalized label records and their one-line file format
    datasets: Marker source discovery
    transforms: Augmentation stages and pipeline construction

Example:
    >>> from markergen.data import MarkerDataset, build_pipeline
    >>> from markergen.configs import get_default_config
    >>>
    >>> config = get_default_config()
    >>> pipeline = build_pipeline(config)
    >>> for canvas, context in MarkerDataset(config.src):
    ...     pipeline(canvas, context)
"""

from .io import DecodeError, IMAGE_EXTENSIONS, decode_image, encode_image, canvas_to_pil
from .labels import LabelRecord, read_label, write_label
from .datasets import MarkerDataset, MarkerSource, discover_markers
from .transforms import AnnotationContext, BBox, Chain, build_pipeline

__all__ = [
    # Codec
    "DecodeError",
    "IMAGE_EXTENSIONS",
    "decode_image",
    "encode_image",
    "canvas_to_pil",
    # Labels
    "LabelRecord",
    "read_label",
    "write_label",
    # Datasets
    "MarkerDataset",
    "MarkerSource",
    "discover_markers",
    # Pipeline
    "AnnotationContext",
    "BBox",
    "Chain",
    "build_pipeline",
]
