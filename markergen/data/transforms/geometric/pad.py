"""Fixed-frame padding that establishes the label box."""

from typing import Optional

from torch import Tensor

from .._base import GRAY_FILL, AnnotationContext, BBox, Stage, canvas_size, logger, new_canvas


class Pad(Stage):
    """Center the canvas in a fixed-size frame and record where it went.

    A canvas that fits is copied into the middle of a ``width x height``
    frame filled with ``fill``, and the copy rectangle becomes the context's
    bbox. A canvas larger than the frame in either dimension is dropped: it
    is not forwarded, since cropping it would cut the subject.

    Args:
        width: Frame width.
        height: Frame height.
        fill: Background value.
        downstream: Stage receiving the padded canvas.
    """

    def __init__(
        self,
        width: int = 416,
        height: int = 416,
        fill: float = GRAY_FILL,
        downstream: Optional[Stage] = None,
    ) -> None:
        super().__init__(downstream)
        if width <= 0 or height <= 0:
            raise ValueError(f"Pad size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.fill = fill

    def placement(self, width: int, height: int) -> BBox:
        """Centered rectangle for a ``width x height`` canvas."""
        return BBox((self.width - width) // 2, (self.height - height) // 2, width, height)

    def apply(self, canvas: Tensor, context: AnnotationContext) -> None:
        width, height = canvas_size(canvas)
        if width > self.width or height > self.height:
            logger.debug(f"Pad: {width}x{height} does not fit {self.width}x{self.height}, dropped")
            return

        rect = self.placement(width, height)
        padded = new_canvas(self.width, self.height, canvas.shape[0], self.fill)
        padded[:, rect.y:rect.y + height, rect.x:rect.x + width] = canvas
        self.emit(padded, context.with_bbox(rect))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(width={self.width}, height={self.height})"
