"""Rotation sweep with frame expansion."""

import math
from typing import Optional, Tuple

import cv2
import numpy as np
from torch import Tensor

from .._base import GRAY_FILL, Number, ParameterRange, Stage, SweepStage, canvas_size
from .affine import warp_affine


class Rotate(SweepStage):
    """Rotate about the image center over a range of angles.

    The output frame is the smallest axis-aligned box holding the rotated
    rectangle, so corners are never clipped:

        bound_w = |W cos a| + |H sin a|
        bound_h = |W sin a| + |H cos a|

    The rotation is translated so the content sits centered in that frame.

    Args:
        min_angle: First angle in degrees (counter-clockwise positive).
        max_angle: Last angle in degrees (inclusive).
        step: Angle increment in degrees.
        fill: Background value.
        downstream: Stage receiving each rotated canvas.
    """

    def __init__(
        self,
        min_angle: float = -45.0,
        max_angle: float = 45.0,
        step: float = 15.0,
        fill: float = GRAY_FILL,
        downstream: Optional[Stage] = None,
    ) -> None:
        super().__init__(ParameterRange(min_angle, max_angle, step, inclusive=True), downstream)
        self.fill = fill

    @staticmethod
    def bounding_size(width: int, height: int, angle: Number) -> Tuple[float, float]:
        """Exact width and height of the rotated rectangle's bounding box."""
        rad = math.radians(angle)
        cos_a, sin_a = abs(math.cos(rad)), abs(math.sin(rad))
        return width * cos_a + height * sin_a, width * sin_a + height * cos_a

    @classmethod
    def rotation_matrix(cls, width: int, height: int, angle: Number) -> Tuple[np.ndarray, Tuple[int, int]]:
        """Return the centered rotation map and the integer output frame size."""
        center = (float((width - 1) // 2), float((height - 1) // 2))
        matrix = cv2.getRotationMatrix2D(center, float(angle), 1.0)

        bound_w, bound_h = cls.bounding_size(width, height, angle)
        matrix[0, 2] += bound_w / 2.0 - width / 2.0
        matrix[1, 2] += bound_h / 2.0 - height / 2.0

        # Round up, ignoring float noise such as cos(90) = 6e-17
        size = (int(math.ceil(bound_w - 1e-6)), int(math.ceil(bound_h - 1e-6)))
        return matrix, size

    def transform(self, canvas: Tensor, angle: float) -> Tensor:
        width, height = canvas_size(canvas)
        matrix, size = self.rotation_matrix(width, height, angle)
        return warp_affine(canvas, matrix, size, self.fill)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(sweep={self.sweep}, fill={self.fill})"
