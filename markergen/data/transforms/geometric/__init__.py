"""Geometric stages.

Stages that change the image frame. Pad is the only one that places the
subject inside a new frame, so it is the only one that writes the bbox.
"""

from .scale import Resize
from .affine import Shear, warp_affine
from .rotation import Rotate
from .pad import Pad

__all__ = [
    "Resize",
    "Shear",
    "Rotate",
    "Pad",
    "warp_affine",
]
