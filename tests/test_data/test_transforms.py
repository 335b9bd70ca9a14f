"""
Tests for the stage base types.

This module tests parameter ranges, annotation contexts, stage linking and
the depth-first fan-out of chains.
"""

import dataclasses

import pytest
import torch

from markergen.data.transforms import (
    AnnotationContext,
    BBox,
    Blur,
    Brightness,
    Chain,
    DegenerateRangeError,
    Identity,
    Noise,
    Pad,
    ParameterRange,
    Resize,
    Rotate,
    Shear,
    Stage,
)


class TestParameterRange:
    """Tests for ParameterRange enumeration and validation."""

    def test_exclusive_range_stops_before_end(self):
        """[30, 208) step 40 yields exactly five sizes."""
        assert list(ParameterRange(30, 208, 40)) == [30, 70, 110, 150, 190]

    def test_inclusive_range_reaches_end(self):
        """Inclusive ranges include the end value when the step lands on it."""
        values = list(ParameterRange(-45, 45, 15, inclusive=True))
        assert values == [-45, -30, -15, 0, 15, 30, 45]

    def test_float_range(self):
        values = list(ParameterRange(0.0, 1.0, 0.5, inclusive=True))
        assert values == [0.0, 0.5, 1.0]

    def test_float_steps_do_not_drift(self):
        """0.1 steps must reach 1.0 exactly eleven times, never ten or twelve."""
        sweep = ParameterRange(0.0, 1.0, 0.1, inclusive=True)
        values = list(sweep)
        assert len(values) == 11
        assert values[-1] == pytest.approx(1.0)

    def test_step_not_dividing_span(self):
        values = list(ParameterRange(0.0, 1.0, 0.3, inclusive=True))
        assert values == pytest.approx([0.0, 0.3, 0.6, 0.9])

    def test_negative_step(self):
        assert list(ParameterRange(10, 0, -5)) == [10, 5]

    def test_empty_span(self):
        """start == stop: one value if inclusive, none otherwise."""
        assert list(ParameterRange(5, 5, 1)) == []
        assert list(ParameterRange(5, 5, 1, inclusive=True)) == [5]

    def test_last_value(self):
        assert ParameterRange(30, 208, 40).last == 190
        assert ParameterRange(-45, 45, 15, inclusive=True).last == 45
        assert ParameterRange(5, 5, 1).last is None

    def test_len_matches_iteration(self):
        sweep = ParameterRange(-32.0, 160.0, 64.0, inclusive=True)
        assert len(sweep) == len(list(sweep)) == 4

    def test_zero_step_raises(self):
        with pytest.raises(DegenerateRangeError):
            ParameterRange(0, 10, 0)

    def test_wrong_sign_step_raises(self):
        """A step pointing away from stop would never terminate."""
        with pytest.raises(DegenerateRangeError):
            ParameterRange(0, 10, -1)

    def test_non_finite_raises(self):
        with pytest.raises(DegenerateRangeError):
            ParameterRange(0.0, float("inf"), 1.0)
        with pytest.raises(DegenerateRangeError):
            ParameterRange(0.0, 1.0, float("nan"))

    def test_degenerate_is_value_error(self):
        """Callers may catch configuration errors as ValueError."""
        with pytest.raises(ValueError):
            ParameterRange(0, 10, 0)

    def test_stage_construction_detects_degenerate_range(self):
        """Misconfigured stages fail before any sweep starts."""
        with pytest.raises(DegenerateRangeError):
            Rotate(-45, 45, 0)
        with pytest.raises(DegenerateRangeError):
            Shear(1.0, 0.0, 0.5)
        with pytest.raises(DegenerateRangeError):
            Resize(30, 10, 40)


class TestAnnotationContext:
    """Tests for the context threaded through a chain."""

    def test_bbox_starts_undefined(self):
        assert AnnotationContext(class_id=1).bbox is None

    def test_with_bbox_returns_new_context(self):
        context = AnnotationContext(class_id=1)
        updated = context.with_bbox((1, 2, 3, 4))

        assert updated.bbox == BBox(1, 2, 3, 4)
        assert updated.class_id == 1
        assert context.bbox is None

    def test_context_is_immutable(self):
        context = AnnotationContext(class_id=1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            context.class_id = 2


class TestChain:
    """Tests for stage linking and fan-out."""

    def test_default_downstream_is_identity(self):
        stage = Brightness(0, 0, 1)
        assert isinstance(stage.downstream, Identity)

    def test_then_links_and_returns_next(self, recorder):
        stage = Brightness(0, 0, 1)
        assert stage.then(recorder) is recorder
        assert stage.downstream is recorder

    def test_chain_links_in_order(self, recorder):
        first, second = Brightness(0, 0, 1), Blur(0, 0, 1)
        chain = Chain([first, second, recorder])

        assert first.downstream is second
        assert second.downstream is recorder
        assert chain.head is first
        assert len(chain) == 3

    def test_empty_chain_raises(self):
        with pytest.raises(ValueError):
            Chain([])

    def test_depth_first_order(self, flat_canvas, context, recorder):
        """Each value's whole subtree runs before the next value starts."""
        chain = Chain([Resize(10, 30, 10), Brightness(0, 100, 100), recorder])
        chain(flat_canvas, context)

        assert recorder.sizes == [(10, 10), (10, 10), (20, 20), (20, 20)]
        means = [canvas.mean().item() for canvas in recorder.canvases]
        assert means[0] == pytest.approx(200.0, abs=0.5)
        assert means[1] == pytest.approx(300.0, abs=0.5)

    def test_fan_out_is_product_of_sweeps(self, marker_canvas, context, recorder):
        chain = Chain([
            Resize(10, 30, 10),
            Shear(0.0, 0.5, 0.5),
            Brightness(0, 20, 10),
            recorder,
        ])
        chain(marker_canvas, context)

        assert len(recorder.calls) == 2 * 2 * 3
        assert chain.num_variants() == 12

    def test_num_variants_default_policy(self):
        chain = Chain([
            Resize(30, 208, 40),
            Shear(0.0, 1.0, 0.5),
            Rotate(-45, 45, 15),
            Pad(416, 416),
            Brightness(-32, 160, 64),
            Blur(0, 1, 1),
            Noise(10, 10),
        ])
        assert chain.num_variants() == 5 * 3 * 7 * 4 * 2

    def test_find_stages_by_type(self):
        pad = Pad(416, 416)
        chain = Chain([Resize(30, 70, 40), pad])
        assert chain.find(Pad) == [pad]

    def test_empty_canvas_not_forwarded(self, marker_canvas, context, recorder):
        """A stage never forwards a canvas with zero width or height."""

        class CropAll(Stage):
            def apply(self, canvas, context):
                self.emit(canvas[:, :0, :], context)

        Chain([CropAll(), recorder])(marker_canvas, context)
        assert recorder.calls == []

    def test_chain_repr_lists_stages(self):
        text = repr(Chain([Resize(30, 70, 40), Pad(416, 416)]))
        assert "Resize" in text
        assert "Pad(width=416, height=416)" in text
