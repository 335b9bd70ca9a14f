"""Gaussian blur sweep."""

from typing import Optional

import cv2
from torch import Tensor

from .._base import ParameterRange, Stage, SweepStage, from_numpy, to_numpy


class Blur(SweepStage):
    """Apply Gaussian blur over a range of integer radii.

    Radius ``b = 0`` forwards the input as is. Radius ``b > 0`` uses a square
    kernel of size ``2 * (b - 1) + 1`` with sigma derived from the kernel
    size (``0.3 * ((k - 1) * 0.5 - 1) + 0.8``). Borders are reflected, so
    kernels wider than the canvas are fine.

    Args:
        min_radius: First radius, non-negative.
        max_radius: Last radius (inclusive).
        step: Radius increment.
        downstream: Stage receiving each blurred canvas.
    """

    def __init__(
        self,
        min_radius: int = 0,
        max_radius: int = 1,
        step: int = 1,
        downstream: Optional[Stage] = None,
    ) -> None:
        if min_radius < 0 or max_radius < 0:
            raise ValueError(f"Blur radii must be non-negative, got [{min_radius}, {max_radius}]")
        super().__init__(
            ParameterRange(int(min_radius), int(max_radius), int(step), inclusive=True),
            downstream,
        )

    @staticmethod
    def kernel_size(radius: int) -> int:
        return 2 * (radius - 1) + 1

    def transform(self, canvas: Tensor, radius: int) -> Tensor:
        if radius == 0:
            return canvas
        k = self.kernel_size(radius)
        return from_numpy(cv2.GaussianBlur(to_numpy(canvas), (k, k), 0))
