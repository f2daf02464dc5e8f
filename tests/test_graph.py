"""Tests for the scene graph input model.

This module tests scene/graph.py:
- Color parsing
- Drawing calls and captured styles
- Parent/child bookkeeping
- World transform composition
- Pointer handler registration
"""

import math

import numpy as np
import pytest


class TestParseColor:
    """Test color parsing."""

    def test_accepts_int_and_hex_string(self):
        """Test both accepted color forms."""
        from src.flatscene.scene.graph import parse_color

        assert parse_color(0xFF0000) == 0xFF0000
        assert parse_color("#00ff00") == 0x00FF00
        assert parse_color("0000ff") == 0x0000FF

    @pytest.mark.parametrize("value", ["#fff", "#1234567", -1, 0x1000000])
    def test_rejects_invalid_colors(self, value):
        """Test that malformed or out-of-range colors raise."""
        from src.flatscene.scene.graph import parse_color

        with pytest.raises(ValueError):
            parse_color(value)


class TestGraphicsDrawing:
    """Test Graphics drawing calls."""

    def test_styles_captured_at_draw_time(self):
        """Test that end_fill does not alter an already drawn shape."""
        from src.flatscene.scene.graph import Graphics, Rectangle

        g = Graphics().begin_fill("#0000ff").draw_rect(50, 50, 50, 50).end_fill()

        data = g.graphics_data[0]
        assert data.shape == Rectangle(50, 50, 50, 50)
        assert data.fill_style.color == 0x0000FF
        assert data.fill_style.visible

    def test_move_to_line_to_builds_open_polyline(self):
        """Test that a line is recorded as an open two-point polygon."""
        from src.flatscene.scene.graph import Graphics, ShapeKind

        g = Graphics().line_style(10, "#ff00ff").move_to(0, 0).line_to(150, 100)

        assert len(g.graphics_data) == 1
        data = g.graphics_data[0]
        assert data.shape.kind == ShapeKind.POLYGON
        assert data.shape.points == [0.0, 0.0, 150.0, 100.0]
        assert not data.shape.closed
        assert data.line_style.width == 10
        assert data.line_style.color == 0xFF00FF

    def test_line_to_without_move_to_starts_at_origin(self):
        """Test the implicit move to (0, 0)."""
        from src.flatscene.scene.graph import Graphics

        g = Graphics().line_to(5, 5)

        assert g.graphics_data[0].shape.points == [0.0, 0.0, 5.0, 5.0]

    def test_negative_line_width_rejected(self):
        """Test line width validation."""
        from src.flatscene.scene.graph import Graphics

        with pytest.raises(ValueError):
            Graphics().line_style(-1)

    def test_clear(self):
        """Test that clear drops every shape."""
        from src.flatscene.scene.graph import Graphics

        g = Graphics().begin_fill(0).draw_circle(0, 0, 5).draw_rect(0, 0, 1, 1)
        g.clear()

        assert g.graphics_data == []


class TestNodeTree:
    """Test parent/child bookkeeping."""

    def test_add_child_keeps_order_and_sets_parent(self):
        """Test ordered insertion."""
        from src.flatscene.scene.graph import Container, Graphics

        root = Container()
        a, b = Graphics(), Graphics()
        first = root.add_child(a, b)

        assert first is a
        assert root.children == [a, b]
        assert a.parent is root and b.parent is root

    def test_reparenting_detaches_from_old_parent(self):
        """Test that a node has at most one parent."""
        from src.flatscene.scene.graph import Container, Graphics

        old, new = Container(), Container()
        g = Graphics()
        old.add_child(g)
        new.add_child(g)

        assert old.children == []
        assert new.children == [g]
        assert g.parent is new

    def test_cycles_rejected(self):
        """Test that a node cannot be added below itself."""
        from src.flatscene.scene.graph import Container

        root = Container()
        child = Container()
        root.add_child(child)

        with pytest.raises(ValueError):
            child.add_child(root)
        with pytest.raises(ValueError):
            root.add_child(root)

    def test_remove_child(self):
        """Test detaching children."""
        from src.flatscene.scene.graph import Container

        root = Container()
        child = root.add_child(Container())
        root.remove_child(child)

        assert child.parent is None
        with pytest.raises(ValueError):
            root.remove_child(child)

    def test_walk_is_preorder(self):
        """Test depth-first pre-order iteration."""
        from src.flatscene.scene.graph import Container

        root = Container()
        a = root.add_child(Container())
        a1 = a.add_child(Container())
        b = root.add_child(Container())

        assert list(root.walk()) == [root, a, a1, b]


class TestWorldTransform:
    """Test world transform composition."""

    def test_angle_is_degrees(self):
        """Test the degree/radian views of rotation."""
        from src.flatscene.scene.graph import Graphics

        g = Graphics()
        g.angle = 30

        assert g.rotation == pytest.approx(math.radians(30))
        assert g.angle == pytest.approx(30)

    def test_world_composes_parent_first(self):
        """Test parent * child composition."""
        from src.flatscene.scene.graph import Container, Graphics

        parent = Container(75, 50)
        parent.angle = 45
        child = Graphics()
        child.angle = -20
        parent.add_child(child)

        expected = parent.local_matrix() @ child.local_matrix()
        assert np.allclose(child.world_matrix(), expected)
        assert len(child.world_transform) == 9

    def test_root_world_equals_local(self):
        """Test that a parentless node's world matrix is its local matrix."""
        from src.flatscene.scene.graph import Graphics

        g = Graphics(100, 30, scale=(1.5, 1.7))

        assert np.allclose(g.world_matrix(), g.local_matrix())
        assert g.world_transform[2] == pytest.approx(100)
        assert g.world_transform[5] == pytest.approx(30)


class TestPointerHandlers:
    """Test pointer handler registration."""

    def test_on_and_off(self):
        """Test registering and removing handlers."""
        from src.flatscene.scene.graph import Graphics
        from src.flatscene.scene.records import PointerEvent

        handler = lambda event, point: None  # noqa: E731
        g = Graphics().on("pointerdown", handler)

        assert g.events == {PointerEvent.POINTER_DOWN: handler}
        g.off("pointerdown")
        assert g.events == {}

    def test_unknown_event_rejected(self):
        """Test that only pointer events are accepted."""
        from src.flatscene.scene.graph import Graphics

        with pytest.raises(ValueError):
            Graphics().on("click", lambda event, point: None)
