"""Scale sweep for marker images."""

from typing import Optional

import cv2
from torch import Tensor

from .._base import ParameterRange, Stage, SweepStage, from_numpy, to_numpy


class Resize(SweepStage):
    """Resize to a series of square sizes.

    Emits one ``size x size`` variant for every size in
    ``[min_size, max_size)``. Resampling uses the Lanczos (8x8 windowed sinc)
    kernel so later degrading stages do not compound aliasing.

    Args:
        min_size: First output edge length, in pixels.
        max_size: Exclusive end of the sweep.
        step: Edge length increment.
        downstream: Stage receiving each resized canvas.

    Example:
        >>> [s for s in Resize(30, 208, 40).sweep]
        [30, 70, 110, 150, 190]
    """

    def __init__(
        self,
        min_size: int = 30,
        max_size: int = 208,
        step: int = 40,
        downstream: Optional[Stage] = None,
    ) -> None:
        sweep = ParameterRange(int(min_size), int(max_size), int(step))
        # Monotonic, so the end values bound every size
        if len(sweep) and min(sweep.start, sweep.last) <= 0:
            raise ValueError(f"Resize sizes must be positive, got {sweep}")
        super().__init__(sweep, downstream)

    def transform(self, canvas: Tensor, size: int) -> Tensor:
        resized = cv2.resize(
            to_numpy(canvas),
            (size, size),
            interpolation=cv2.INTER_LANCZOS4,
        )
        return from_numpy(resized)
