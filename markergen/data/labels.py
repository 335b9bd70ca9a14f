"""Label records written next to every generated image.

A label file holds one line::

    class_id x y w h

where the four box fields are the bbox divided by the final canvas width or
height. ``xywh`` anchors the box at its top-left corner; ``cxcywh`` at its
center, which is what YOLO-style loaders read.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Union


BOX_FORMATS = ("xywh", "cxcywh")


def format_float(value: float) -> str:
    """Shortest decimal form with six significant digits (``%g``)."""
    return format(value, "g")


@dataclass(frozen=True)
class LabelRecord:
    """Normalized class id and box for one saved variant."""

    class_id: int
    x: float
    y: float
    w: float
    h: float

    @classmethod
    def from_bbox(
        cls,
        class_id: int,
        bbox: Tuple[int, int, int, int],
        width: int,
        height: int,
        box_format: str = "xywh",
    ) -> "LabelRecord":
        """Normalize a pixel bbox by the final canvas size.

        Args:
            class_id: Class of the subject.
            bbox: Pixel rectangle ``(x, y, width, height)``.
            width: Final canvas width.
            height: Final canvas height.
            box_format: ``"xywh"`` or ``"cxcywh"``.
        """
        if box_format not in BOX_FORMATS:
            raise ValueError(f"Unknown box format: {box_format}")
        x, y, w, h = bbox
        if box_format == "cxcywh":
            x, y = x + w / 2, y + h / 2
        return cls(class_id, x / width, y / height, w / width, h / height)

    @property
    def box(self) -> Tuple[float, float, float, float]:
        return self.x, self.y, self.w, self.h

    def to_bbox(self, width: int, height: int, box_format: str = "xywh") -> Tuple[int, int, int, int]:
        """Pixel rectangle ``(x, y, w, h)`` on a ``width x height`` canvas."""
        if box_format not in BOX_FORMATS:
            raise ValueError(f"Unknown box format: {box_format}")
        w, h = self.w * width, self.h * height
        x, y = self.x * width, self.y * height
        if box_format == "cxcywh":
            x, y = x - w / 2, y - h / 2
        return round(x), round(y), round(w), round(h)

    def to_line(self) -> str:
        return " ".join([str(self.class_id)] + [format_float(v) for v in self.box])

    @classmethod
    def parse(cls, line: str) -> "LabelRecord":
        """Parse one label line.

        Raises:
            ValueError: If the line does not hold an id and four floats.
        """
        parts = line.split()
        if len(parts) != 5:
            raise ValueError(f"Expected 5 label fields, got {len(parts)}: {line!r}")
        return cls(int(parts[0]), *(float(p) for p in parts[1:]))


def write_label(record: LabelRecord, path: Union[str, Path]) -> None:
    """Write a single-line label file, without a trailing newline."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(record.to_line())


def read_label(path: Union[str, Path]) -> List[LabelRecord]:
    """Read every non-empty line of a label file."""
    records = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            records.append(LabelRecord.parse(line))
    return records
