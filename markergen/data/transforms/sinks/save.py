"""Persist variants and their labels."""

from pathlib import Path
from typing import Optional, Union

from torch import Tensor

from ...io import encode_image
from ...labels import BOX_FORMATS, LabelRecord, write_label
from ....utils.counter import IndexCounter
from .._base import AnnotationContext, Stage, canvas_size


class DirectoryCreateError(OSError):
    """The output directory cannot be created."""


class Save(Stage):
    """Write every variant as ``<index>.<ext>`` plus ``<index>.txt``.

    The index comes from a counter shared by the whole run, so files from
    all source images share one numbering. Save forwards the canvas
    unchanged, so a Preview can follow it.

    Args:
        folder: Output directory, created on first use.
        counter: Shared index counter. A fresh one starting at 0 if omitted.
        image_ext: Image file extension, which also picks the format.
        quality: JPEG quality passed to the codec.
        box_format: Label box layout, ``"xywh"`` or ``"cxcywh"``.
        downstream: Stage receiving the saved canvas.

    Raises:
        DirectoryCreateError: From :meth:`apply`, if ``folder`` cannot be created.
    """

    def __init__(
        self,
        folder: Union[str, Path],
        counter: Optional[IndexCounter] = None,
        image_ext: str = "jpg",
        quality: int = 100,
        box_format: str = "xywh",
        downstream: Optional[Stage] = None,
    ) -> None:
        super().__init__(downstream)
        if box_format not in BOX_FORMATS:
            raise ValueError(f"box_format must be one of {BOX_FORMATS}, got {box_format}")
        self.folder = Path(folder)
        self.counter = counter if counter is not None else IndexCounter()
        self.image_ext = image_ext.lstrip(".")
        self.quality = quality
        self.box_format = box_format

    def _ensure_folder(self) -> None:
        try:
            self.folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError(f"Cannot create output directory {self.folder}: {e}") from e

    def apply(self, canvas: Tensor, context: AnnotationContext) -> None:
        if context.bbox is None:
            raise ValueError("Save needs a bbox; place a Pad stage before it")

        self._ensure_folder()
        index = self.counter.next()

        width, height = canvas_size(canvas)
        record = LabelRecord.from_bbox(context.class_id, context.bbox, width, height, self.box_format)

        encode_image(canvas, self.folder / f"{index}.{self.image_ext}", quality=self.quality)
        write_label(record, self.folder / f"{index}.txt")

        self.emit(canvas, context)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(folder={str(self.folder)!r}, image_ext={self.image_ext!r})"
