"""Minimal retained-mode scene graph used as flattener input.

The graph mirrors the usual retained-mode 2D model: every node has a local
position, scale and rotation, an ordered child list and a parent link, and
exposes its fully composed world transform. Three node types exist:

- Container: a pure grouping node.
- Graphics: a vector drawing holding one or more shape descriptors, each
  recorded together with the fill and line style active when it was drawn.
- Sprite: a bitmap referenced by an image identifier (path or URL).

Shape descriptors follow the common convention where an Ellipse stores its
half extents as width/height, and a Polygon stores flat x,y coordinates.

Example:
    >>> from src.flatscene.scene.graph import Container, Graphics, RoundedRectangle
    >>> stage = Container()
    >>> g = Graphics(100, 30)
    >>> _ = g.begin_fill("#ff0000").draw_shape(RoundedRectangle(5, 7, 50, 50, 10))
    >>> g.angle = 30
    >>> _ = stage.add_child(g)
    >>> len(g.world_transform)
    9
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, ClassVar

import numpy as np
import numpy.typing as npt

from src.flatscene.geometry.transform import TransformCoefficients, local_matrix
from src.flatscene.scene.records import MAX_COLOR, PointerEvent

# Colors accepted by the drawing API: 0xRRGGBB integers or "#rrggbb" strings
ColorLike = int | str


def parse_color(value: ColorLike) -> int:
    """Convert an integer or ``#rrggbb`` string to a 24-bit RGB integer.

    Raises:
        ValueError: If the value is not a valid 24-bit color.
    """
    if isinstance(value, str):
        digits = value.strip().lstrip("#")
        if len(digits) != 6:
            raise ValueError(f"Expected a #rrggbb color, got {value!r}")
        color = int(digits, 16)
    else:
        color = int(value)
    if not 0 <= color <= MAX_COLOR:
        raise ValueError(f"Color must be a 24-bit RGB value, got {value!r}")
    return color


# =============================================================================
# Shape Descriptors
# =============================================================================


class ShapeKind(IntEnum):
    """Discriminant of a Graphics shape descriptor."""

    POLYGON = 0
    RECTANGLE = 1
    CIRCLE = 2
    ELLIPSE = 3
    ROUNDED_RECTANGLE = 4


@dataclass
class Polygon:
    """Polygon or open polyline as a flat list of x,y coordinates."""

    points: list[float] = field(default_factory=list)
    closed: bool = True
    kind: ClassVar[ShapeKind] = ShapeKind.POLYGON


@dataclass
class Rectangle:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    kind: ClassVar[ShapeKind] = ShapeKind.RECTANGLE


@dataclass
class Circle:
    x: float = 0.0
    y: float = 0.0
    radius: float = 0.0
    kind: ClassVar[ShapeKind] = ShapeKind.CIRCLE


@dataclass
class Ellipse:
    """Ellipse centered on (x, y); width and height are half extents."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    kind: ClassVar[ShapeKind] = ShapeKind.ELLIPSE


@dataclass
class RoundedRectangle:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    radius: float = 20.0
    kind: ClassVar[ShapeKind] = ShapeKind.ROUNDED_RECTANGLE


Shape = Polygon | Rectangle | Circle | Ellipse | RoundedRectangle


@dataclass(frozen=True)
class FillStyle:
    color: int = 0xFFFFFF
    visible: bool = False


@dataclass(frozen=True)
class LineStyle:
    width: float = 0.0
    color: int = 0x000000


@dataclass
class GraphicsData:
    """One drawn shape with the styles active when it was drawn."""

    shape: Shape
    fill_style: FillStyle
    line_style: LineStyle


# =============================================================================
# Nodes
# =============================================================================


class Node:
    """Base scene node with a local transform and ordered children.

    Attributes:
        x: Local x position.
        y: Local y position.
        scale_x: Local scale along x.
        scale_y: Local scale along y.
        rotation: Local rotation in radians.
        children: Ordered child nodes (draw order).
        parent: The parent node, or None for a root.
        events: Pointer handlers registered with on().
    """

    is_sprite: ClassVar[bool] = False

    def __init__(
        self,
        x: float = 0.0,
        y: float = 0.0,
        *,
        scale: tuple[float, float] = (1.0, 1.0),
        rotation: float = 0.0,
    ) -> None:
        self.x = float(x)
        self.y = float(y)
        self.scale_x, self.scale_y = (float(s) for s in scale)
        self.rotation = float(rotation)
        self.children: list[Node] = []
        self.parent: Node | None = None
        self.events: dict[PointerEvent, Callable[..., Any]] = {}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(x={self.x:g}, y={self.y:g}, "
            f"children={len(self.children)})"
        )

    @property
    def angle(self) -> float:
        """Local rotation in degrees."""
        return math.degrees(self.rotation)

    @angle.setter
    def angle(self, degrees: float) -> None:
        self.rotation = math.radians(degrees)

    def set_position(self, x: float, y: float) -> Node:
        self.x = float(x)
        self.y = float(y)
        return self

    def set_scale(self, scale_x: float, scale_y: float | None = None) -> Node:
        self.scale_x = float(scale_x)
        self.scale_y = float(scale_x if scale_y is None else scale_y)
        return self

    def add_child(self, *children: Node) -> Node:
        """Append children in order, detaching them from any previous parent.

        Returns:
            The first child added.

        Raises:
            ValueError: If no child is given or a node would become its own
                ancestor.
        """
        if not children:
            raise ValueError("add_child() needs at least one node")
        for child in children:
            ancestor: Node | None = self
            while ancestor is not None:
                if ancestor is child:
                    raise ValueError("A node cannot be added to its own subtree")
                ancestor = ancestor.parent
            if child.parent is not None:
                child.parent.remove_child(child)
            child.parent = self
            self.children.append(child)
        return children[0]

    def remove_child(self, child: Node) -> Node:
        """Detach a child.

        Raises:
            ValueError: If the node is not a child of this node.
        """
        if child not in self.children:
            raise ValueError("Node is not a child of this node")
        self.children.remove(child)
        child.parent = None
        return child

    def on(self, event: PointerEvent | str, handler: Callable[..., Any]) -> Node:
        """Register a pointer handler; it is copied onto flattened records."""
        self.events[PointerEvent(event)] = handler
        return self

    def off(self, event: PointerEvent | str) -> Node:
        self.events.pop(PointerEvent(event), None)
        return self

    def local_matrix(self) -> npt.NDArray[np.float64]:
        return local_matrix(
            self.x, self.y, self.rotation, self.scale_x, self.scale_y
        )

    def world_matrix(self) -> npt.NDArray[np.float64]:
        """Compose this node's local matrix with every ancestor's."""
        matrix = self.local_matrix()
        ancestor = self.parent
        while ancestor is not None:
            matrix = ancestor.local_matrix() @ matrix
            ancestor = ancestor.parent
        return matrix

    @property
    def world_transform(self) -> TransformCoefficients:
        """The composed world transform as 9 row-major coefficients."""
        return tuple(float(v) for v in self.world_matrix().ravel())

    def walk(self) -> Iterator[Node]:
        """Yield this node and its descendants in depth-first pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


class Container(Node):
    """Grouping node; draws nothing itself."""


class Graphics(Node):
    """Vector drawing node.

    Drawing calls record shape descriptors in order together with the
    current fill and line styles, and return self so calls chain.
    """

    def __init__(self, x: float = 0.0, y: float = 0.0, **kwargs: Any) -> None:
        super().__init__(x, y, **kwargs)
        self.graphics_data: list[GraphicsData] = []
        self._fill = FillStyle()
        self._line = LineStyle()
        self._open_path: Polygon | None = None

    def begin_fill(self, color: ColorLike = 0x000000) -> Graphics:
        self._open_path = None
        self._fill = FillStyle(color=parse_color(color), visible=True)
        return self

    def end_fill(self) -> Graphics:
        self._open_path = None
        self._fill = FillStyle()
        return self

    def line_style(self, width: float = 0.0, color: ColorLike = 0x000000) -> Graphics:
        if width < 0:
            raise ValueError(f"Line width must be non-negative, got {width}")
        self._line = LineStyle(width=float(width), color=parse_color(color))
        return self

    def draw_shape(self, shape: Shape) -> Graphics:
        self.graphics_data.append(
            GraphicsData(
                shape=shape,
                fill_style=self._fill,
                line_style=self._line,
            )
        )
        return self

    def draw_rect(self, x: float, y: float, width: float, height: float) -> Graphics:
        return self.draw_shape(Rectangle(x, y, width, height))

    def draw_rounded_rect(
        self, x: float, y: float, width: float, height: float, radius: float
    ) -> Graphics:
        return self.draw_shape(RoundedRectangle(x, y, width, height, radius))

    def draw_circle(self, x: float, y: float, radius: float) -> Graphics:
        return self.draw_shape(Circle(x, y, radius))

    def draw_ellipse(self, x: float, y: float, width: float, height: float) -> Graphics:
        return self.draw_shape(Ellipse(x, y, width, height))

    def draw_polygon(self, points: list[float]) -> Graphics:
        return self.draw_shape(Polygon(list(points)))

    def move_to(self, x: float, y: float) -> Graphics:
        """Start a new open polyline at (x, y)."""
        self._open_path = Polygon([float(x), float(y)], closed=False)
        return self.draw_shape(self._open_path)

    def line_to(self, x: float, y: float) -> Graphics:
        """Extend the open polyline, starting one at the origin if needed."""
        if self._open_path is None:
            self.move_to(0.0, 0.0)
        path = self._open_path
        path.points.extend((float(x), float(y)))
        return self

    def clear(self) -> Graphics:
        self.graphics_data.clear()
        self._open_path = None
        self._fill = FillStyle()
        self._line = LineStyle()
        return self


class Sprite(Node):
    """Bitmap node.

    Attributes:
        image_id: Identifier (file path or URL) resolved to bytes when the
            scene is flattened. None leaves the sprite undrawable.
        width: Local (unscaled) width, or None to use the image's own width.
        height: Local (unscaled) height, or None to use the image's height.
        anchor: Fraction of the size used as the local origin.
    """

    is_sprite: ClassVar[bool] = True

    def __init__(
        self,
        image_id: str | None = None,
        x: float = 0.0,
        y: float = 0.0,
        *,
        width: float | None = None,
        height: float | None = None,
        anchor: tuple[float, float] = (0.0, 0.0),
        **kwargs: Any,
    ) -> None:
        super().__init__(x, y, **kwargs)
        self.image_id = image_id
        self.width = width
        self.height = height
        self.anchor = anchor
