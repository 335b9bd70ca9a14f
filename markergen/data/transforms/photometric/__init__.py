"""Photometric stages.

Intensity stages that leave the frame, and therefore the bbox, untouched.
"""

from .color import Brightness
from .blur import Blur
from .noise import Noise

__all__ = [
    "Brightness",
    "Blur",
    "Noise",
]
