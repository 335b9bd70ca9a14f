#!/usr/bin/env python3
"""Draw saved labels onto their generated images.

Reads ``<index>.<ext>`` / ``<index>.txt`` pairs from a generated dataset
folder and writes copies with the label box drawn, one color per class, for
checking that boxes line up with the markers.

Usage:
    python tools/visualize.py --folder dataset/positive --output vis --limit 50
"""

import argparse
import colorsys
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from markergen.data.labels import read_label
from markergen.data.transforms.sinks import draw_selection


def create_color_palette(num_classes: int) -> List[Tuple[int, int, int]]:
    """Generate distinct colors for each class.

    Uses HSV color space with evenly distributed hues for maximum distinction.

    Returns:
        List of RGB color tuples (R, G, B) with values in [0, 255].
    """
    colors = []
    for i in range(num_classes):
        hue = i / num_classes
        rgb = colorsys.hsv_to_rgb(hue, 0.75, 0.95)
        colors.append(tuple(int(c * 255) for c in rgb))
    return colors


def visualize_pair(
    image_path: Path,
    label_path: Path,
    box_format: str = "xywh",
    palette: Optional[List[Tuple[int, int, int]]] = None,
) -> Image.Image:
    """Return the image with every box of its label file drawn.

    Args:
        image_path: Saved variant image.
        label_path: Matching label file.
        box_format: Layout the labels were written in.
        palette: Colors indexed by class id.
    """
    if palette is None:
        palette = create_color_palette(16)

    image = Image.open(image_path).convert("RGB")
    width, height = image.size
    for record in read_label(label_path):
        bbox = record.to_bbox(width, height, box_format)
        image = draw_selection(image, bbox, color=palette[record.class_id % len(palette)])
    return image


def find_pairs(folder: Path, image_ext: str = "jpg") -> List[Tuple[Path, Path]]:
    """Image/label pairs in ``folder``, sorted by numeric index."""
    pairs = []
    for label_path in folder.glob("*.txt"):
        image_path = label_path.with_suffix(f".{image_ext}")
        if label_path.stem.isdigit() and image_path.exists():
            pairs.append((image_path, label_path))
    return sorted(pairs, key=lambda pair: int(pair[1].stem))


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Draw saved labels onto generated images.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--folder", type=str, default="dataset/positive", help="Generated dataset folder.")
    parser.add_argument("--output", type=str, default="vis", help="Output directory for annotated copies.")
    parser.add_argument("--image-ext", type=str, default="jpg", help="Image extension of the dataset.")
    parser.add_argument("--box-format", type=str, default="xywh", choices=["xywh", "cxcywh"])
    parser.add_argument("--limit", type=int, default=0, help="Maximum pairs to draw (0 = all).")
    return parser.parse_args()


def main() -> None:
    """Main entry point."""
    args = parse_args()

    pairs = find_pairs(Path(args.folder), args.image_ext)
    if args.limit > 0:
        pairs = pairs[:args.limit]

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    palette = create_color_palette(16)
    for image_path, label_path in pairs:
        image = visualize_pair(image_path, label_path, args.box_format, palette)
        image.save(output_dir / image_path.name)

    print(f"Drew {len(pairs)} labels into {output_dir}")


if __name__ == "__main__":
    main()
