"""Brightness sweep."""

from typing import Optional

from torch import Tensor

from .._base import ParameterRange, Stage, SweepStage


class Brightness(SweepStage):
    """Add a constant offset to every channel, once per swept value.

    Samples are float inside the chain, so no clamping happens here; the
    codec saturates to ``[0, 255]`` when a variant is written.

    Args:
        min_offset: First offset, on the 8-bit scale.
        max_offset: Last offset (inclusive).
        step: Offset increment.
        downstream: Stage receiving each adjusted canvas.
    """

    def __init__(
        self,
        min_offset: float = -32.0,
        max_offset: float = 160.0,
        step: float = 64.0,
        downstream: Optional[Stage] = None,
    ) -> None:
        super().__init__(ParameterRange(min_offset, max_offset, step, inclusive=True), downstream)

    def transform(self, canvas: Tensor, offset: float) -> Tensor:
        return canvas + offset
