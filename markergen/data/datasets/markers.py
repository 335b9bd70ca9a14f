"""Marker image dataset.

Source layout:
    - ``<src>/markers/`` holds the marker images, in any sub-directory depth
    - each discovered image is its own class; ids follow discovery order

Discovery is sorted by path, so class ids are stable across runs.

Example:
    >>> dataset = MarkerDataset("dataset")
    >>> canvas, context = dataset[0]
    >>> context.class_id
    0
"""

from pathlib import Path
from typing import List, NamedTuple, Tuple, Union

from torch import Tensor
from torch.utils.data import Dataset

from ..io import IMAGE_EXTENSIONS, decode_image
from ..transforms._base import AnnotationContext


class MarkerSource(NamedTuple):
    """A discovered marker image and the class id it was assigned."""

    class_id: int
    path: Path


def discover_markers(
    src_root: Union[str, Path],
    markers_dir: str = "markers",
) -> List[MarkerSource]:
    """Recursively collect marker images and assign class ids.

    Args:
        src_root: Source root directory.
        markers_dir: Sub-directory of ``src_root`` holding the markers.

    Returns:
        Sources sorted by path, with class ids 0, 1, 2, ...

    Raises:
        FileNotFoundError: If the markers directory does not exist.
    """
    root = Path(src_root) / markers_dir
    if not root.is_dir():
        raise FileNotFoundError(f"Marker directory not found: {root}")

    paths = sorted(
        p for p in root.rglob("*")
        if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
    )
    return [MarkerSource(class_id, path) for class_id, path in enumerate(paths)]


class MarkerDataset(Dataset):
    """Dataset of marker source images.

    Each item is a freshly decoded canvas and a new AnnotationContext holding
    the source's class id. A source that fails to decode keeps its class id;
    ids of later sources do not shift.

    Args:
        src_root: Source root directory.
        markers_dir: Sub-directory of ``src_root`` holding the markers.

    Attributes:
        sources: Discovered sources, in class id order.
    """

    def __init__(
        self,
        src_root: Union[str, Path],
        markers_dir: str = "markers",
    ) -> None:
        self.src_root = Path(src_root)
        self.markers_dir = markers_dir
        self.sources = discover_markers(self.src_root, markers_dir)

    def __len__(self) -> int:
        return len(self.sources)

    def __getitem__(self, idx: int) -> Tuple[Tensor, AnnotationContext]:
        """Decode one source.

        Returns:
            Tuple of (canvas (3, H, W) float32, context).

        Raises:
            DecodeError: If the image cannot be decoded.
        """
        source = self.sources[idx]
        canvas = decode_image(source.path)
        return canvas, AnnotationContext(class_id=source.class_id)
