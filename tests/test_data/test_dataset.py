"""
Tests for marker discovery and the image codec.

This module tests recursive source discovery, class id assignment,
decoding into canvases and encoding with 8-bit saturation.
"""

import pytest
import torch
from PIL import Image

from markergen.data.datasets import MarkerDataset, MarkerSource, discover_markers
from markergen.data.io import DecodeError, canvas_to_pil, decode_image, encode_image
from markergen.data.transforms import AnnotationContext


class TestDiscovery:
    """Tests for discover_markers."""

    def test_recursive_discovery(self, marker_tree):
        sources = discover_markers(marker_tree)

        assert [s.path.name for s in sources] == ["a.png", "b.png"]
        assert all(isinstance(s, MarkerSource) for s in sources)

    def test_class_ids_follow_sorted_order(self, marker_tree):
        sources = discover_markers(marker_tree)
        assert [s.class_id for s in sources] == [0, 1]

    def test_non_images_ignored(self, marker_tree):
        assert all(s.path.suffix == ".png" for s in discover_markers(marker_tree))

    def test_extension_case_insensitive(self, tmp_path, marker_writer):
        marker_writer(tmp_path / "markers" / "UPPER.PNG")
        assert len(discover_markers(tmp_path)) == 1

    def test_stable_across_calls(self, marker_tree):
        assert discover_markers(marker_tree) == discover_markers(marker_tree)

    def test_custom_markers_dir(self, tmp_path, marker_writer):
        marker_writer(tmp_path / "logos" / "x.jpg")
        assert len(discover_markers(tmp_path, markers_dir="logos")) == 1

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            discover_markers(tmp_path / "nowhere")

    def test_empty_directory(self, tmp_path):
        (tmp_path / "markers").mkdir()
        assert discover_markers(tmp_path) == []


class TestMarkerDataset:
    """Tests for MarkerDataset item access."""

    def test_length(self, marker_tree):
        assert len(MarkerDataset(marker_tree)) == 2

    def test_getitem_returns_canvas_and_context(self, marker_tree):
        canvas, context = MarkerDataset(marker_tree)[1]

        assert canvas.shape == (3, 60, 60)
        assert canvas.dtype == torch.float32
        assert context == AnnotationContext(class_id=1)
        assert context.bbox is None

    def test_canvas_on_byte_scale(self, marker_tree):
        canvas, _ = MarkerDataset(marker_tree)[0]
        # a.png is pure red
        assert canvas[0].min().item() == 255.0
        assert canvas[1].max().item() == 0.0

    def test_fresh_context_per_item(self, marker_tree):
        dataset = MarkerDataset(marker_tree)
        _, first = dataset[0]
        _, again = dataset[0]
        assert first == again
        assert first.bbox is None

    def test_corrupt_source_keeps_later_ids(self, marker_tree):
        (marker_tree / "markers" / "aa.png").write_bytes(b"not an image")
        dataset = MarkerDataset(marker_tree)

        assert [s.path.name for s in dataset.sources] == ["a.png", "aa.png", "b.png"]
        with pytest.raises(DecodeError):
            dataset[1]
        _, context = dataset[2]
        assert context.class_id == 2


class TestCodec:
    """Tests for decode_image and encode_image."""

    def test_grayscale_becomes_rgb(self, tmp_path):
        path = tmp_path / "gray.png"
        Image.new("L", (12, 8), color=90).save(path)

        canvas = decode_image(path)
        assert canvas.shape == (3, 8, 12)
        assert torch.all(canvas == 90.0)

    def test_rgba_drops_alpha(self, tmp_path):
        path = tmp_path / "rgba.png"
        Image.new("RGBA", (5, 5), color=(10, 20, 30, 40)).save(path)
        assert decode_image(path).shape == (3, 5, 5)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(DecodeError):
            decode_image(tmp_path / "missing.png")

    def test_decode_error_is_value_error(self):
        assert issubclass(DecodeError, ValueError)

    def test_encode_saturates(self):
        canvas = torch.tensor([[[-40.0, 300.0]], [[127.4, 127.6]], [[0.0, 255.0]]])
        image = canvas_to_pil(canvas)

        assert image.getpixel((0, 0)) == (0, 127, 0)
        assert image.getpixel((1, 0)) == (255, 128, 255)

    def test_png_is_lossless(self, tmp_path):
        canvas = torch.randint(0, 256, (3, 16, 16)).float()
        encode_image(canvas, tmp_path / "out.png")
        assert torch.equal(decode_image(tmp_path / "out.png"), canvas)

    def test_jpeg_written(self, tmp_path):
        encode_image(torch.full((3, 16, 24), 127.0), tmp_path / "out.jpg", quality=100)

        with Image.open(tmp_path / "out.jpg") as img:
            assert img.format == "JPEG"
            assert img.size == (24, 16)
