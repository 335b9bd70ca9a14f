"""On-screen preview of generated variants."""

from typing import Callable, Optional, Tuple

import cv2
import numpy as np
from PIL import Image, ImageDraw
from torch import Tensor

from ...io import canvas_to_pil
from .._base import AnnotationContext, Stage


def draw_selection(
    image: Image.Image,
    bbox: Tuple[int, int, int, int],
    color: Tuple[int, int, int] = (255, 0, 0),
    line_width: int = 3,
) -> Image.Image:
    """Draw a pixel bbox ``(x, y, w, h)`` on a copy of ``image``.

    Returns:
        RGB copy of the image with the rectangle drawn.
    """
    image = image.convert("RGB")
    draw = ImageDraw.Draw(image)
    x, y, w, h = bbox
    draw.rectangle([x, y, x + w - 1, y + h - 1], outline=color, width=line_width)
    return image


def show_with_opencv(window: str, image: Image.Image, delay_ms: int) -> None:
    """Show an RGB image in an OpenCV window and pump events for ``delay_ms``."""
    cv2.imshow(window, cv2.cvtColor(np.asarray(image), cv2.COLOR_RGB2BGR))
    cv2.waitKey(delay_ms)


class Preview(Stage):
    """Display each variant with its bbox overlaid.

    Terminal stage: nothing is forwarded. When disabled it does nothing.

    Args:
        enabled: Whether to display anything.
        window: Window title.
        delay_ms: How long each frame is shown before the chain moves on.
        display: Callable ``(window, image, delay_ms)``. Defaults to an
            OpenCV window.
    """

    def __init__(
        self,
        enabled: bool = False,
        window: str = "img",
        delay_ms: int = 1,
        display: Optional[Callable[[str, Image.Image, int], None]] = None,
    ) -> None:
        super().__init__()
        self.enabled = enabled
        self.window = window
        self.delay_ms = delay_ms
        self.display = display if display is not None else show_with_opencv

    def render(self, canvas: Tensor, context: AnnotationContext) -> Image.Image:
        image = canvas_to_pil(canvas).convert("RGB")
        if context.bbox is not None:
            image = draw_selection(image, context.bbox)
        return image

    def apply(self, canvas: Tensor, context: AnnotationContext) -> None:
        if not self.enabled:
            return
        self.display(self.window, self.render(canvas, context), self.delay_ms)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(enabled={self.enabled})"
