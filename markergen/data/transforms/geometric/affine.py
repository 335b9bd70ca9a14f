"""Affine stages and the shared warp helper."""

from typing import Optional, Tuple

import cv2
import numpy as np
from torch import Tensor

from .._base import GRAY_FILL, Number, ParameterRange, Stage, SweepStage, from_numpy, to_numpy


def warp_affine(
    canvas: Tensor,
    matrix: np.ndarray,
    size: Tuple[int, int],
    fill: float = GRAY_FILL,
) -> Tensor:
    """Render ``canvas`` through a 2x3 affine map into a ``size`` frame.

    Args:
        canvas: Source canvas ``(C, H, W)``.
        matrix: Forward 2x3 map from source to destination pixels.
        size: Output ``(width, height)``.
        fill: Value for destination pixels with no source.

    Returns:
        Warped canvas, Lanczos-interpolated.
    """
    warped = cv2.warpAffine(
        to_numpy(canvas),
        np.asarray(matrix, dtype=np.float64),
        (int(size[0]), int(size[1])),
        flags=cv2.INTER_LANCZOS4,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=(fill, fill, fill, fill),
    )
    return from_numpy(warped)


class Shear(SweepStage):
    """Vertical shear sweep.

    For each factor ``s`` the map is ``x' = x, y' = s * x + y``. The output
    frame is the integer bounding rectangle of the mapped corners, so the
    whole sheared image fits and uncovered pixels get ``fill``.

    Args:
        min_shear: First shear factor.
        max_shear: Last shear factor (inclusive).
        step: Factor increment.
        fill: Background value.
        downstream: Stage receiving each sheared canvas.
    """

    def __init__(
        self,
        min_shear: float = 0.0,
        max_shear: float = 1.0,
        step: float = 0.5,
        fill: float = GRAY_FILL,
        downstream: Optional[Stage] = None,
    ) -> None:
        super().__init__(ParameterRange(min_shear, max_shear, step, inclusive=True), downstream)
        self.fill = fill

    @staticmethod
    def shear_matrix(factor: Number, width: int, height: int) -> Tuple[np.ndarray, Tuple[int, int]]:
        """Return the shear map, shifted into its bounding frame, and the frame size."""
        matrix = np.array([[1.0, 0.0, 0.0], [factor, 1.0, 0.0]], dtype=np.float64)
        corners = np.array(
            [[0, 0], [width, 0], [width, height], [0, height]],
            dtype=np.float64,
        )
        mapped = corners @ matrix[:, :2].T + matrix[:, 2]
        x, y, w, h = cv2.boundingRect(mapped.astype(np.float32))

        # Negative factors map corners above the origin
        matrix[0, 2] -= x
        matrix[1, 2] -= y
        return matrix, (w, h)

    def transform(self, canvas: Tensor, factor: float) -> Tensor:
        width, height = canvas.shape[-1], canvas.shape[-2]
        matrix, size = self.shear_matrix(factor, width, height)
        return warp_affine(canvas, matrix, size, self.fill)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(sweep={self.sweep}, fill={self.fill})"
