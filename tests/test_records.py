"""Tests for display records and paints.

This module tests scene/records.py:
- Color formatting and parsing
- Paint validation
- Geometry validation for paths
- DisplayRecord tag/geometry/paint consistency
"""

import pytest


class TestColors:
    """Test color helpers."""

    @pytest.mark.parametrize(
        "color, expected",
        [
            (0x0000FF, "#0000ff"),
            (0x000000, "#000000"),
            (0xFF00FF, "#ff00ff"),
            (0x00000A, "#00000a"),
        ],
    )
    def test_color_to_hex_zero_pads(self, color, expected):
        """Test six-digit zero-padded formatting."""
        from src.flatscene.scene.records import color_to_hex

        assert color_to_hex(color) == expected

    def test_hex_to_rgb(self):
        """Test component extraction in [0, 1]."""
        from src.flatscene.scene.records import hex_to_rgb

        assert hex_to_rgb("#ff8000") == pytest.approx((1.0, 128 / 255, 0.0))

    def test_hex_to_rgb_rejects_short_strings(self):
        """Test that only six-digit strings parse."""
        from src.flatscene.scene.records import hex_to_rgb

        with pytest.raises(ValueError):
            hex_to_rgb("#fff")


class TestPaint:
    """Test Paint validation."""

    def test_defaults_to_fill(self):
        """Test the default style."""
        from src.flatscene.scene.records import Paint, PaintStyle

        paint = Paint(0x00FF00)

        assert paint.style == PaintStyle.FILL
        assert paint.hex_color == "#00ff00"

    @pytest.mark.parametrize("color", [-1, 0x1000000])
    def test_out_of_range_color_rejected(self, color):
        """Test that colors outside 24 bits raise."""
        from src.flatscene.scene.records import Paint

        with pytest.raises(ValueError, match="24-bit"):
            Paint(color)

    def test_negative_width_rejected(self):
        """Test that stroke widths cannot be negative."""
        from src.flatscene.scene.records import Paint, PaintStyle

        with pytest.raises(ValueError):
            Paint(0, PaintStyle.STROKE, -1.0)

    def test_style_accepts_strings(self):
        """Test that 'stroke' coerces to PaintStyle.STROKE."""
        from src.flatscene.scene.records import Paint, PaintStyle

        assert Paint(0, "stroke", 2.0).style is PaintStyle.STROKE


class TestPathGeometry:
    """Test path coordinate validation."""

    def test_pairs(self):
        """Test grouping coordinates into points."""
        from src.flatscene.scene.records import PathGeometry

        path = PathGeometry((0, 0, 10, 0, 10, 10))

        assert path.point_count == 3
        assert path.pairs() == [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0)]

    @pytest.mark.parametrize("points", [(), (1, 2), (1, 2, 3), (1, 2, 3, 4, 5)])
    def test_short_or_odd_paths_rejected(self, points):
        """Test that fewer than two points or odd lengths raise."""
        from src.flatscene.scene.records import PathGeometry

        with pytest.raises(ValueError):
            PathGeometry(points)


class TestDisplayRecord:
    """Test DisplayRecord consistency checks."""

    def test_transform_normalized_to_nine(self, make_rect):
        """Test that 6-element transforms are stored as 9 elements."""
        record = make_rect(transform=(1, 0, 5, 0, 1, 6))

        assert record.transform == (1.0, 0.0, 5.0, 0.0, 1.0, 6.0, 0.0, 0.0, 1.0)

    def test_tag_geometry_mismatch_rejected(self):
        """Test that a RECT tag with circle geometry raises."""
        from src.flatscene.scene.records import (
            CircleGeometry,
            DisplayRecord,
            Paint,
            RecordTag,
        )

        with pytest.raises(ValueError, match="RectGeometry"):
            DisplayRecord(
                tag=RecordTag.RECT,
                geometry=CircleGeometry(0, 0, 5),
                paint=Paint(0),
            )

    def test_vector_record_requires_paint(self):
        """Test that non-image records need a paint."""
        from src.flatscene.scene.records import CircleGeometry, DisplayRecord, RecordTag

        with pytest.raises(ValueError, match="paint"):
            DisplayRecord(tag=RecordTag.CIRCLE, geometry=CircleGeometry(0, 0, 5))

    def test_image_record_requires_bytes_and_rejects_paint(self, png_bytes):
        """Test image record constraints."""
        from src.flatscene.scene.records import (
            DisplayRecord,
            ImageGeometry,
            Paint,
            RecordTag,
        )

        with pytest.raises(ValueError, match="image_bytes"):
            DisplayRecord(tag=RecordTag.IMAGE, geometry=ImageGeometry(0, 0, 1, 1))
        with pytest.raises(ValueError, match="no paint"):
            DisplayRecord(
                tag=RecordTag.IMAGE,
                geometry=ImageGeometry(0, 0, 1, 1),
                image_bytes=png_bytes,
                paint=Paint(0),
            )

    def test_events_are_read_only(self, make_rect):
        """Test that handlers are exposed through a read-only mapping."""
        from src.flatscene.scene.records import PointerEvent

        handler = lambda event, point: None  # noqa: E731
        record = make_rect(events={"pointerdown": handler})

        assert record.handler_for(PointerEvent.POINTER_DOWN) is handler
        assert record.handler_for("pointerup") is None
        with pytest.raises(TypeError):
            record.events[PointerEvent.POINTER_UP] = handler

    def test_every_tag_has_a_geometry(self):
        """Test that the tag/geometry table is exhaustive."""
        from src.flatscene.scene.records import GEOMETRY_FOR_TAG, RecordTag

        assert set(GEOMETRY_FOR_TAG) == set(RecordTag)
