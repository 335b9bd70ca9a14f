"""Base types shared by every transform stage.

This module contains the pieces all stage modules build on:
- Canvas helpers (a canvas is a float32 ``(C, H, W)`` tensor on the 8-bit scale)
- BBox and AnnotationContext, the label state threaded through a chain
- ParameterRange, the finite sweep owned by a stage
- Stage, SweepStage and Identity, the stage contract
- Chain for linking stages in order
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Iterator, List, NamedTuple, Optional, Tuple, Union

import numpy as np
import torch
from torch import Tensor


logger = logging.getLogger("markergen.transforms")

# Neutral gray used for every out-of-source pixel
GRAY_FILL = 127.0

Number = Union[int, float]

# Slack for float ranges whose span is a near-exact multiple of the step
_RANGE_EPS = 1e-9


# ============================================================================
# Canvas helpers
# ============================================================================

def canvas_size(canvas: Tensor) -> Tuple[int, int]:
    """Return ``(width, height)`` of a ``(C, H, W)`` canvas."""
    return canvas.shape[-1], canvas.shape[-2]


def new_canvas(
    width: int,
    height: int,
    channels: int = 3,
    fill: float = GRAY_FILL,
) -> Tensor:
    """Allocate a float32 canvas filled with a constant value."""
    return torch.full((channels, height, width), float(fill), dtype=torch.float32)


def to_numpy(canvas: Tensor) -> np.ndarray:
    """Convert a ``(C, H, W)`` canvas to a contiguous ``(H, W, C)`` float32 array."""
    return np.ascontiguousarray(canvas.permute(1, 2, 0).cpu().numpy(), dtype=np.float32)


def from_numpy(array: np.ndarray) -> Tensor:
    """Convert an ``(H, W)`` or ``(H, W, C)`` array back to a ``(C, H, W)`` canvas."""
    if array.ndim == 2:
        # OpenCV drops the channel axis of single-channel images
        array = array[:, :, None]
    return torch.from_numpy(np.ascontiguousarray(array, dtype=np.float32)).permute(2, 0, 1).contiguous()


# ============================================================================
# Annotation state
# ============================================================================

class BBox(NamedTuple):
    """Pixel rectangle anchored at its top-left corner."""

    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class AnnotationContext:
    """Label state for one source image.

    ``class_id`` is fixed for the whole chain. ``bbox`` stays ``None`` until a
    stage that places the subject inside a new frame (Pad) sets it.

    Contexts are values: a stage that changes the bbox forwards the result of
    :meth:`with_bbox` and never mutates the context it received.
    """

    class_id: int
    bbox: Optional[BBox] = None

    def with_bbox(self, bbox: Union[BBox, Tuple[int, int, int, int]]) -> "AnnotationContext":
        return replace(self, bbox=BBox(*bbox))


# ============================================================================
# Parameter sweeps
# ============================================================================

class DegenerateRangeError(ValueError):
    """A parameter range that would never reach its end."""


@dataclass(frozen=True)
class ParameterRange:
    """Finite arithmetic sweep ``start, start + step, ...`` towards ``stop``.

    Values are computed by index rather than by accumulating ``step``, so the
    number of values is known up front and float drift cannot add or lose a
    value.

    Args:
        start: First value.
        stop: End of the sweep.
        step: Increment, non-zero and pointing from ``start`` towards ``stop``.
        inclusive: If True, ``stop`` itself is part of the sweep.

    Raises:
        DegenerateRangeError: If the step is zero, not finite, or points away
            from ``stop``.

    Example:
        >>> list(ParameterRange(30, 208, 40))
        [30, 70, 110, 150, 190]
        >>> list(ParameterRange(-45, 45, 15, inclusive=True))
        [-45, -30, -15, 0, 15, 30, 45]
    """

    start: Number
    stop: Number
    step: Number
    inclusive: bool = False

    def __post_init__(self) -> None:
        for name in ("start", "stop", "step"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise DegenerateRangeError(f"Range {name} must be finite, got {value}")
        if self.step == 0:
            raise DegenerateRangeError(f"Range step must be non-zero: {self}")
        span = self.stop - self.start
        if span != 0 and (span > 0) != (self.step > 0):
            raise DegenerateRangeError(
                f"Range step {self.step} never reaches {self.stop} from {self.start}"
            )

    def __len__(self) -> int:
        span = self.stop - self.start
        if span == 0:
            return 1 if self.inclusive else 0
        steps = span / self.step
        if self.inclusive:
            return int(math.floor(steps + _RANGE_EPS)) + 1
        return int(math.ceil(steps - _RANGE_EPS))

    @property
    def last(self) -> Optional[Number]:
        """Final value of the sweep, or None if it is empty."""
        count = len(self)
        return self.start + (count - 1) * self.step if count else None

    def __iter__(self) -> Iterator[Number]:
        for i in range(len(self)):
            yield self.start + i * self.step

    def __repr__(self) -> str:
        bracket = "]" if self.inclusive else ")"
        return f"[{self.start}, {self.stop}{bracket} step {self.step}"


# ============================================================================
# Stages
# ============================================================================

class Stage(ABC):
    """One unit of an augmentation chain.

    A stage receives a canvas and its context in :meth:`apply` and pushes zero
    or more derived ``(canvas, context)`` pairs to its downstream stage through
    :meth:`emit`. Each downstream call returns before the next one starts.

    Args:
        downstream: Stage to forward to. Defaults to a terminal Identity.
    """

    def __init__(self, downstream: Optional["Stage"] = None) -> None:
        self.downstream = downstream if downstream is not None else Identity()

    @abstractmethod
    def apply(self, canvas: Tensor, context: AnnotationContext) -> None:
        """Process one canvas, emitting derived variants downstream."""

    def emit(self, canvas: Tensor, context: AnnotationContext) -> None:
        """Forward a derived canvas, dropping empty ones."""
        width, height = canvas_size(canvas)
        if width <= 0 or height <= 0:
            logger.debug(f"{self.__class__.__name__}: dropped empty {width}x{height} canvas")
            return
        self.downstream.apply(canvas, context)

    def then(self, stage: "Stage") -> "Stage":
        """Set the downstream stage and return it, for fluent chaining."""
        self.downstream = stage
        return stage

    def num_variants(self) -> int:
        """Number of downstream calls per input, before any dropping."""
        return 1

    def __call__(self, canvas: Tensor, context: AnnotationContext) -> None:
        self.apply(canvas, context)

    def __repr__(self) -> str:
        return self.__class__.__name__ + "()"


class Identity(Stage):
    """Terminal no-op stage."""

    def __init__(self) -> None:
        self.downstream = None

    def apply(self, canvas: Tensor, context: AnnotationContext) -> None:
        pass

    def num_variants(self) -> int:
        return 0


class SweepStage(Stage):
    """Stage that emits one variant per value of its parameter range.

    Subclasses implement :meth:`transform` for a single value.
    """

    def __init__(self, sweep: ParameterRange, downstream: Optional[Stage] = None) -> None:
        super().__init__(downstream)
        self.sweep = sweep

    @abstractmethod
    def transform(self, canvas: Tensor, value: Number) -> Tensor:
        """Return the variant of ``canvas`` for one swept value."""

    def apply(self, canvas: Tensor, context: AnnotationContext) -> None:
        for value in self.sweep:
            self.emit(self.transform(canvas, value), context)

    def num_variants(self) -> int:
        return len(self.sweep)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(sweep={self.sweep})"


class Chain:
    """Link stages in order, each forwarding to the next.

    The chain is linear, but since a stage may call its downstream many
    times, one input fans out into a tree of variants at run time.

    Args:
        stages: Stages in application order. The last stage keeps a terminal
            Identity as its downstream.

    Example:
        >>> chain = Chain([Resize(30, 70, 40), Pad(416, 416), Save("out")])
        >>> chain(canvas, AnnotationContext(class_id=0))
    """

    def __init__(self, stages: List[Stage]) -> None:
        if not stages:
            raise ValueError("Chain needs at least one stage")
        self.stages = list(stages)
        for stage, following in zip(self.stages, self.stages[1:]):
            stage.then(following)

    @property
    def head(self) -> Stage:
        return self.stages[0]

    def apply(self, canvas: Tensor, context: AnnotationContext) -> None:
        """Push one source canvas through the whole chain."""
        self.head.apply(canvas, context)

    def num_variants(self) -> int:
        """Upper bound on sink calls per source (Pad may prune branches)."""
        total = 1
        for stage in self.stages:
            if isinstance(stage, SweepStage):
                total *= stage.num_variants()
        return total

    def find(self, stage_type: type) -> List[Stage]:
        """Return every stage of the given type, in chain order."""
        return [stage for stage in self.stages if isinstance(stage, stage_type)]

    def __call__(self, canvas: Tensor, context: AnnotationContext) -> None:
        self.apply(canvas, context)

    def __iter__(self) -> Iterator[Stage]:
        return iter(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    def __repr__(self) -> str:
        format_string = self.__class__.__name__ + "("
        for stage in self.stages:
            format_string += f"\n    {stage}"
        format_string += "\n)"
        return format_string
