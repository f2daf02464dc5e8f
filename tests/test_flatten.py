"""Tests for scene flattening.

This module tests scene/flatten.py:
- Traversal order and group handling
- Record construction per shape kind
- Line/polygon paint selection
- Image records, fetch failures and sizes read from image headers
- Skipped leaves
"""

import asyncio

import pytest


def _flatten(root, fetch_bytes=None):
    from src.flatscene.scene.flatten import flatten_scene

    return asyncio.run(flatten_scene(root, fetch_bytes))


class TestTraversal:
    """Test depth-first pre-order traversal."""

    def test_leaves_in_preorder(self):
        """Test that records follow leaf order and groups emit nothing."""
        from src.flatscene.scene.graph import Container, Graphics

        root = Container()
        a = Graphics().begin_fill(0xFF0000).draw_rect(0, 0, 1, 1)
        group = Container()
        b = Graphics().begin_fill(0x00FF00).draw_rect(0, 0, 1, 1)
        c = Graphics().begin_fill(0x0000FF).draw_rect(0, 0, 1, 1)
        group.add_child(b, c)
        d = Graphics().begin_fill(0xFFFFFF).draw_rect(0, 0, 1, 1)
        root.add_child(a, group, d)

        records = _flatten(root)

        assert [r.paint.color for r in records] == [0xFF0000, 0x00FF00, 0x0000FF, 0xFFFFFF]

    def test_childless_root_is_a_leaf(self):
        """Test that a lone Graphics root produces its own record."""
        from src.flatscene.scene.graph import Graphics

        root = Graphics().begin_fill(0).draw_circle(0, 0, 5)

        assert len(_flatten(root)) == 1

    def test_empty_container_yields_nothing(self):
        """Test that an empty container is an undrawable leaf."""
        from src.flatscene.scene.graph import Container

        assert _flatten(Container()) == []

    def test_skipped_leaf_does_not_stop_siblings(self):
        """Test that undrawable leaves are skipped, not fatal."""
        from src.flatscene.scene.graph import Container, Graphics, Sprite

        root = Container()
        root.add_child(
            Graphics(),
            Sprite(None),
            Graphics().begin_fill(0).draw_rect(0, 0, 1, 1),
        )

        records = _flatten(root)

        assert len(records) == 1

    def test_records_carry_world_transform_and_events(self):
        """Test the stored transform and copied handlers."""
        from src.flatscene.scene.graph import Container, Graphics
        from src.flatscene.scene.records import PointerEvent

        root = Container(10, 20)
        handler = lambda event, point: None  # noqa: E731
        g = Graphics(5, 5).begin_fill(0).draw_rect(0, 0, 1, 1)
        g.on("pointerdown", handler)
        root.add_child(g)

        (record,) = _flatten(root)

        assert record.transform == pytest.approx(g.world_transform)
        assert record.transform[2] == pytest.approx(15)
        assert record.transform[5] == pytest.approx(25)
        assert record.handler_for(PointerEvent.POINTER_DOWN) is handler


class TestVectorRecords:
    """Test records built from shape descriptors."""

    def test_rect(self):
        """Test a plain rectangle maps to RECT without radius."""
        from src.flatscene.scene.graph import Graphics
        from src.flatscene.scene.records import PaintStyle, RecordTag, RectGeometry

        (record,) = _flatten(Graphics().begin_fill(0x0000FF).draw_rect(50, 50, 50, 50))

        assert record.tag == RecordTag.RECT
        assert record.geometry == RectGeometry(50, 50, 50, 50)
        assert record.paint.style == PaintStyle.FILL
        assert record.paint.color == 0x0000FF

    def test_rounded_rect(self):
        """Test a rounded rectangle maps to RECT with its radius."""
        from src.flatscene.scene.graph import Graphics, RoundedRectangle
        from src.flatscene.scene.records import RecordTag

        (record,) = _flatten(
            Graphics().begin_fill("#ff0000").draw_shape(RoundedRectangle(5, 7, 50, 50, 10))
        )

        assert record.tag == RecordTag.RECT
        assert record.geometry.radius == 10

    def test_circle(self):
        """Test circles map to CIRCLE."""
        from src.flatscene.scene.graph import Graphics
        from src.flatscene.scene.records import CircleGeometry, RecordTag

        (record,) = _flatten(Graphics().begin_fill(0).draw_circle(3, 4, 5))

        assert record.tag == RecordTag.CIRCLE
        assert record.geometry == CircleGeometry(3, 4, 5)

    def test_ellipse_radii_stored_as_given(self):
        """Test that ellipse width/height are stored unchanged."""
        from src.flatscene.scene.graph import Ellipse, Graphics
        from src.flatscene.scene.records import OvalGeometry, RecordTag

        (record,) = _flatten(
            Graphics().begin_fill("#00ff00").draw_shape(Ellipse(10, 20, 50, 40))
        )

        assert record.tag == RecordTag.OVAL
        assert record.geometry == OvalGeometry(10, 20, 50, 40)

    def test_two_point_path_is_stroked_in_line_color(self):
        """Test that four coordinates become a stroke."""
        from src.flatscene.scene.graph import Graphics
        from src.flatscene.scene.records import PaintStyle, RecordTag

        g = Graphics().line_style(10, "#ff00ff").move_to(0, 0).line_to(150, 100)
        (record,) = _flatten(g)

        assert record.tag == RecordTag.PATH
        assert record.paint.style == PaintStyle.STROKE
        assert record.paint.color == 0xFF00FF
        assert record.paint.width == 10

    def test_polygon_is_filled_in_fill_color(self):
        """Test that more than four coordinates become a fill."""
        from src.flatscene.scene.graph import Graphics
        from src.flatscene.scene.records import PaintStyle

        g = Graphics().line_style(3, 0x111111).begin_fill(0x222222)
        g.draw_polygon([0, 0, 10, 0, 10, 10])
        (record,) = _flatten(g)

        assert record.paint.style == PaintStyle.FILL
        assert record.paint.color == 0x222222
        assert record.paint.width == 3

    def test_single_point_path_skipped(self):
        """Test that a one-point path yields no record."""
        from src.flatscene.scene.graph import Graphics

        assert _flatten(Graphics().move_to(1, 1)) == []

    def test_only_first_shape_used(self):
        """Test that a Graphics node yields one record for its first shape."""
        from src.flatscene.scene.graph import Graphics
        from src.flatscene.scene.records import RecordTag

        g = Graphics().begin_fill(0).draw_circle(0, 0, 5).draw_rect(0, 0, 1, 1)
        records = _flatten(g)

        assert [r.tag for r in records] == [RecordTag.CIRCLE]

    def test_every_shape_kind_has_a_builder(self):
        """Test that the builder table is exhaustive."""
        from src.flatscene.scene.flatten import SHAPE_BUILDERS
        from src.flatscene.scene.graph import ShapeKind

        assert set(SHAPE_BUILDERS) == set(ShapeKind)


class TestImageRecords:
    """Test records built from sprites."""

    def test_image_record_from_store(self, asset_store, png_bytes):
        """Test bytes, size and local origin of an image record."""
        from src.flatscene.scene.graph import Container, Sprite
        from src.flatscene.scene.records import ImageGeometry, RecordTag

        root = Container()
        root.add_child(Sprite("red.png", 40, 40, width=30, height=20, anchor=(0.5, 0.5)))

        (record,) = _flatten(root, asset_store.fetch)

        assert record.tag == RecordTag.IMAGE
        assert record.image_bytes == png_bytes
        assert record.paint is None
        assert record.geometry == ImageGeometry(-15, -10, 30, 20)

    def test_missing_size_read_from_header(self, asset_store):
        """Test that width and height default to the image's own size."""
        from src.flatscene.scene.graph import Sprite

        (record,) = _flatten(Sprite("red.png"), asset_store.fetch)

        assert (record.geometry.width, record.geometry.height) == (20, 10)

    def test_fetch_failure_omits_only_that_record(self, asset_store, caplog):
        """Test that a failing fetch is logged and siblings survive."""
        from src.flatscene.scene.graph import Container, Graphics, Sprite
        from src.flatscene.scene.records import RecordTag

        root = Container()
        root.add_child(
            Sprite("missing.png"),
            Graphics().begin_fill(0).draw_rect(0, 0, 1, 1),
            Sprite("red.png"),
        )

        with caplog.at_level("WARNING"):
            records = _flatten(root, asset_store.fetch)

        assert [r.tag for r in records] == [RecordTag.RECT, RecordTag.IMAGE]
        assert "missing.png" in caplog.text

    def test_fetches_run_in_traversal_order(self, png_bytes):
        """Test sequential fetching in leaf order."""
        from src.flatscene.scene.graph import Container, Sprite

        seen = []

        async def fetch(identifier):
            seen.append(identifier)
            await asyncio.sleep(0)
            return png_bytes

        root = Container()
        root.add_child(Sprite("a"), Sprite("b"), Sprite("c"))
        _flatten(root, fetch)

        assert seen == ["a", "b", "c"]

    def test_default_fetcher_reads_files(self, tmp_path, png_bytes):
        """Test that file paths resolve through the default fetcher."""
        from src.flatscene.scene.graph import Sprite

        path = tmp_path / "image.png"
        path.write_bytes(png_bytes)

        (record,) = _flatten(Sprite(str(path)))

        assert record.image_bytes == png_bytes
