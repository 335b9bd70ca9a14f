"""Additive Gaussian noise."""

import threading
from typing import Optional, Sequence

import torch
from torch import Tensor

from .._base import AnnotationContext, Stage


class Noise(Stage):
    """Add one sample of Gaussian noise to every pixel and channel.

    Noise is sampled once per input rather than swept: a single noisy copy
    per upstream variant.

    Args:
        mean: Noise mean, on the 8-bit scale.
        sigma: Noise standard deviation.
        seed: If given, noise comes from a private generator seeded with it,
            making runs reproducible.
        downstream: Stage receiving the noisy canvas.
    """

    def __init__(
        self,
        mean: float = 10.0,
        sigma: float = 10.0,
        seed: Optional[int] = None,
        downstream: Optional[Stage] = None,
    ) -> None:
        super().__init__(downstream)
        if sigma < 0:
            raise ValueError(f"Noise sigma must be non-negative, got {sigma}")
        self.mean = mean
        self.sigma = sigma
        self.seed = seed
        self.generator = None
        if seed is not None:
            self.generator = torch.Generator().manual_seed(seed)
        self._lock = threading.Lock()

    def sample(self, shape: Sequence[int]) -> Tensor:
        """Draw a noise tensor of the given shape."""
        with self._lock:
            noise = torch.randn(tuple(shape), generator=self.generator, dtype=torch.float32)
        return noise * self.sigma + self.mean

    def apply(self, canvas: Tensor, context: AnnotationContext) -> None:
        self.emit(canvas + self.sample(canvas.shape), context)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(mean={self.mean}, sigma={self.sigma})"
