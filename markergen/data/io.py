"""Image codec for marker sources and generated variants.

Canvases are float32 ``(C, H, W)`` tensors on the 8-bit scale. Decoding goes
through PIL and always yields RGB; encoding saturates to ``uint8``.
"""

from pathlib import Path
from typing import Union

import torch
from torch import Tensor
from PIL import Image
import torchvision.transforms.functional as F


# Supported image extensions
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".webp", ".tiff"}


class DecodeError(ValueError):
    """A source image that is missing, unreadable or corrupt."""


def decode_image(path: Union[str, Path]) -> Tensor:
    """Load an image file as an RGB float canvas.

    Args:
        path: Image file path.

    Returns:
        Tensor (3, H, W), float32, values in [0, 255].

    Raises:
        DecodeError: If the file cannot be opened or decoded.
    """
    try:
        with Image.open(path) as img:
            img = img.convert("RGB")
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Cannot decode image {path}: {e}") from e
    return F.pil_to_tensor(img).to(torch.float32)


def canvas_to_pil(canvas: Tensor) -> Image.Image:
    """Saturate a float canvas to 8 bits and wrap it as a PIL image."""
    pixels = canvas.detach().cpu().clamp(0, 255).round().to(torch.uint8)
    return F.to_pil_image(pixels)


def encode_image(
    canvas: Tensor,
    path: Union[str, Path],
    quality: int = 100,
) -> None:
    """Write a canvas to disk; the format follows the file extension.

    Args:
        canvas: Canvas (C, H, W) on the 8-bit scale.
        path: Output file path.
        quality: JPEG quality, ignored by lossless formats.
    """
    canvas_to_pil(canvas).save(path, quality=quality)
