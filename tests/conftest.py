"""
Pytest fixtures and configuration for the markergen test suite.

This module provides shared fixtures: synthetic canvases, a recording stage
that captures everything pushed into it, and on-disk marker trees.
"""

from pathlib import Path
from typing import Callable, List, Tuple

import pytest
import torch
from torch import Tensor
from PIL import Image

from markergen.configs import Config, get_default_config
from markergen.data.transforms import AnnotationContext, Stage, canvas_size


# ============================================================================
# Recording stage
# ============================================================================

class Recorder(Stage):
    """Terminal stage that keeps a copy of every (canvas, context) it receives."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: List[Tuple[Tensor, AnnotationContext]] = []

    def apply(self, canvas: Tensor, context: AnnotationContext) -> None:
        self.calls.append((canvas.clone(), context))

    @property
    def canvases(self) -> List[Tensor]:
        return [canvas for canvas, _ in self.calls]

    @property
    def contexts(self) -> List[AnnotationContext]:
        return [context for _, context in self.calls]

    @property
    def sizes(self) -> List[Tuple[int, int]]:
        return [canvas_size(canvas) for canvas, _ in self.calls]


@pytest.fixture
def recorder() -> Recorder:
    """Fresh recording stage."""
    return Recorder()


@pytest.fixture
def make_recorder() -> Callable[[], Recorder]:
    """Factory for tests that need several recorders."""
    return Recorder


# ============================================================================
# Canvas Fixtures
# ============================================================================

@pytest.fixture
def marker_canvas() -> Tensor:
    """Deterministic random 100x100 RGB canvas on the 8-bit scale."""
    generator = torch.Generator().manual_seed(0)
    return torch.rand(3, 100, 100, generator=generator) * 255


@pytest.fixture
def flat_canvas() -> Tensor:
    """Uniform 100x100 RGB canvas with value 200."""
    return torch.full((3, 100, 100), 200.0)


@pytest.fixture
def context() -> AnnotationContext:
    """Context of a source with class id 3 and no bbox yet."""
    return AnnotationContext(class_id=3)


# ============================================================================
# Filesystem Fixtures
# ============================================================================

def write_marker(path: Path, size: Tuple[int, int] = (60, 60), color=(255, 255, 255)) -> Path:
    """Write a solid-color RGB marker image."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color=color).save(path)
    return path


@pytest.fixture
def marker_writer() -> Callable[..., Path]:
    """The ``write_marker`` helper, for tests that build their own trees."""
    return write_marker


@pytest.fixture
def marker_tree(tmp_path: Path) -> Path:
    """Source root with two markers, one of them nested, plus a non-image file."""
    src = tmp_path / "src"
    write_marker(src / "markers" / "a.png", color=(255, 0, 0))
    write_marker(src / "markers" / "nested" / "b.png", color=(0, 0, 255))
    (src / "markers" / "notes.txt").write_text("not a marker")
    return src


@pytest.fixture
def single_variant_config(tmp_path: Path) -> Config:
    """Default config narrowed so each source yields exactly one variant."""
    config = get_default_config()
    config.src = str(tmp_path / "src")
    config.dst = str(tmp_path / "dst")
    config.minsize = 30
    config.maxsize = 70
    config.stepsize = 40
    config.seed = 0
    config.set("pipeline.shear", {"min": 0.0, "max": 0.0, "step": 0.5})
    config.set("pipeline.rotate", {"min": 0.0, "max": 0.0, "step": 15.0})
    config.set("pipeline.brightness", {"min": 0.0, "max": 0.0, "step": 64.0})
    config.set("pipeline.blur", {"min": 0, "max": 0, "step": 1})
    config.set("pipeline.noise", {"mean": 0.0, "sigma": 0.0})
    return config
