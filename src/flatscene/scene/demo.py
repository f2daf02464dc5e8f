"""Demo scene and random shape generation.

The demo scene is a small composition that exercises every record kind: a
rotated rounded rectangle, a rotated rectangle, two stroked lines inside a
rotated sub-container, a scaled ellipse and an optional bitmap inside its
own rotated container. Two of the shapes carry pointer handlers.

Example:
    >>> from src.flatscene.scene.demo import create_demo_scene
    >>> stage = create_demo_scene()
    >>> len(stage.children)
    5
"""

from __future__ import annotations

import logging
import math

import numpy as np

from src.flatscene.scene.graph import (
    Circle,
    Container,
    Ellipse,
    Graphics,
    Polygon,
    Rectangle,
    RoundedRectangle,
    ShapeKind,
    Sprite,
)
from src.flatscene.scene.records import MAX_COLOR, color_to_hex

logger = logging.getLogger(__name__)

# =============================================================================
# Demo Scene Constants
# =============================================================================

RED = "#ff0000"
BLUE = "#0000ff"
GREEN = "#00ff00"
MAGENTA = "#ff00ff"
YELLOW = "#ffff00"

LINE_WIDTH = 10


def _log_pointer(name: str):
    def handler(event, point) -> None:
        logger.info("%s %s at (%g, %g)", name, event.value, point[0], point[1])

    return handler


# =============================================================================
# Demo Scene Factory
# =============================================================================


def create_demo_scene(image_id: str | None = None) -> Container:
    """Create the demo composition on a 300x300 canvas.

    Args:
        image_id: Identifier of the bitmap shown in the image container.
            With None the sprite is still added but flattens to nothing.

    Returns:
        The root container.
    """
    g1 = Graphics()
    g1.begin_fill(RED).draw_shape(RoundedRectangle(5, 7, 50, 50, 10)).end_fill()
    g1.set_scale(1.5, 1.7)
    g1.set_position(100, 30)
    g1.angle = 30
    g1.on("pointerdown", _log_pointer("g1"))

    g2 = Graphics()
    g2.begin_fill(BLUE).draw_rect(50, 50, 50, 50).end_fill()
    g2.set_position(50, 60)
    g2.angle = 5
    g2.set_scale(1.5, 1.7)
    g2.on("pointerup", _log_pointer("g2"))

    g3 = Graphics()
    g3.line_style(LINE_WIDTH, MAGENTA).move_to(0, 0).line_to(150, 100)
    g3.angle = -20

    g4 = Graphics()
    g4.line_style(LINE_WIDTH, YELLOW).move_to(0, 70).line_to(150, -30)
    g4.angle = 20

    g5 = Graphics()
    g5.begin_fill(GREEN).draw_shape(Ellipse(10, 20, 50, 40)).end_fill()
    g5.set_scale(1.5, 1.7)

    image_container = Container()
    image_container.add_child(Sprite(image_id))
    image_container.set_scale(0.9, 0.9)
    image_container.set_position(100, 0)
    image_container.angle = -4

    sub_container = Container()
    sub_container.set_position(75, 50)
    sub_container.angle = 45
    sub_container.add_child(g3, g4)

    stage = Container()
    stage.add_child(g1, g2, g5, sub_container)
    stage.add_child(image_container)
    return stage


# =============================================================================
# Random Shapes
# =============================================================================


def random_int(rng: np.random.Generator, low: float, high: float) -> int:
    """Random integer in [ceil(low), floor(high)), or ceil(low) if empty."""
    low_int = math.ceil(low)
    high_int = math.floor(high)
    if high_int <= low_int:
        return low_int
    return int(rng.integers(low_int, high_int))


def generate_random_graphics(
    width: int,
    height: int,
    rng: np.random.Generator | None = None,
) -> Graphics:
    """Create a Graphics node holding one random filled shape.

    The shape kind, position, size, corner radius and color are drawn
    uniformly; everything fits in the square of the smaller canvas side.
    Ellipses use half of the drawn width and height as their radii, and
    polygons get three or four random vertices.

    Args:
        width: Canvas width.
        height: Canvas height.
        rng: Random generator (default: a fresh unseeded generator).

    Returns:
        The new Graphics node.
    """
    if rng is None:
        rng = np.random.default_rng()

    extent = min(width, height)
    kind = ShapeKind(random_int(rng, 0, len(ShapeKind)))

    x = random_int(rng, 0, extent)
    y = random_int(rng, 0, extent)
    shape_width = random_int(rng, 0, extent)
    shape_height = random_int(rng, 0, extent)
    radius = random_int(rng, 0, extent / 2)
    color = color_to_hex(random_int(rng, 0, MAX_COLOR))

    if kind == ShapeKind.RECTANGLE:
        shape = Rectangle(x, y, shape_width, shape_height)
    elif kind == ShapeKind.CIRCLE:
        shape = Circle(x, y, radius)
    elif kind == ShapeKind.ELLIPSE:
        shape = Ellipse(x, y, shape_width / 2, shape_height / 2)
    elif kind == ShapeKind.ROUNDED_RECTANGLE:
        shape = RoundedRectangle(x, y, shape_width, shape_height, radius)
    else:
        point_count = random_int(rng, 3, 5) * 2
        shape = Polygon([random_int(rng, 0, extent) for _ in range(point_count)])

    return Graphics().begin_fill(color).draw_shape(shape).end_fill()
