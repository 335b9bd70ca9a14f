"""Augmentation stages for marker datasets.

Every stage pushes derived ``(canvas, context)`` pairs to a single downstream
stage; swept stages do so once per value, so a linear chain fans out into a
tree of variants.

Structure:
    _base: Core types (ParameterRange, AnnotationContext, Stage, Chain)
    geometric/: Frame-changing stages (resize, shear, rotate, pad)
    photometric/: Intensity stages (brightness, blur, noise)
    sinks/: Terminal stages (save, preview)

Example:
    >>> from markergen.data.transforms import Chain, Resize, Pad, Save
    >>> chain = Chain([
    ...     Resize(30, 208, 40),
    ...     Pad(416, 416),
    ...     Save("dataset/positive"),
    ... ])
    >>> chain(canvas, AnnotationContext(class_id=0))
"""

from pathlib import Path
from typing import Any, Optional

# Base utilities
from ._base import (
    GRAY_FILL,
    AnnotationContext,
    BBox,
    Chain,
    DegenerateRangeError,
    Identity,
    ParameterRange,
    Stage,
    SweepStage,
    canvas_size,
    new_canvas,
)

# Geometric stages
from .geometric import (
    Resize,
    Shear,
    Rotate,
    Pad,
)

# Photometric stages
from .photometric import (
    Brightness,
    Blur,
    Noise,
)

# Sinks
from .sinks import (
    Save,
    Preview,
    DirectoryCreateError,
)

from ...utils.counter import IndexCounter


def build_pipeline(config: Any, counter: Optional[IndexCounter] = None) -> Chain:
    """Build the marker augmentation chain from configuration.

    The chain shape is fixed; configuration only sets stage parameters:

        Resize -> Shear -> Rotate -> Pad -> Brightness -> Blur -> Noise
        -> Save -> Preview

    Args:
        config: Config (see ``get_default_config``) providing ``dst``,
            ``minsize``, ``maxsize``, ``stepsize``, ``show``, ``seed``
            and the ``pipeline``, ``save`` and ``preview`` sections.
        counter: Output index counter, shared by the whole run.

    Returns:
        Linked Chain ready to receive source canvases.

    Raises:
        DegenerateRangeError: If a configured range cannot terminate.
    """
    shear = config.get("pipeline.shear")
    rotate = config.get("pipeline.rotate")
    pad = config.get("pipeline.pad")
    brightness = config.get("pipeline.brightness")
    blur = config.get("pipeline.blur")
    noise = config.get("pipeline.noise")

    output_dir = Path(config.get("dst", "dataset")) / config.get("save.subdir", "positive")

    return Chain([
        Resize(
            min_size=config.get("minsize", 30),
            max_size=config.get("maxsize", 208),
            step=config.get("stepsize", 40),
        ),
        Shear(shear.min, shear.max, shear.step),
        Rotate(rotate.min, rotate.max, rotate.step),
        Pad(pad.width, pad.height, fill=pad.get("fill", GRAY_FILL)),
        Brightness(brightness.min, brightness.max, brightness.step),
        Blur(blur.min, blur.max, blur.step),
        Noise(noise.mean, noise.sigma, seed=config.get("seed")),
        Save(
            output_dir,
            counter=counter,
            image_ext=config.get("save.image_ext", "jpg"),
            quality=config.get("save.quality", 100),
            box_format=config.get("save.box_format", "xywh"),
        ),
        Preview(
            enabled=bool(config.get("show", False)),
            window=config.get("preview.window", "img"),
            delay_ms=config.get("preview.delay_ms", 1),
        ),
    ])


__all__ = [
    # Base
    "GRAY_FILL",
    "AnnotationContext",
    "BBox",
    "Chain",
    "DegenerateRangeError",
    "Identity",
    "ParameterRange",
    "Stage",
    "SweepStage",
    "canvas_size",
    "new_canvas",
    "build_pipeline",
    # Geometric
    "Resize",
    "Shear",
    "Rotate",
    "Pad",
    # Photometric
    "Brightness",
    "Blur",
    "Noise",
    # Sinks
    "Save",
    "Preview",
    "DirectoryCreateError",
]
