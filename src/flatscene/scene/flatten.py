"""Scene flattening: scene graph -> ordered display records.

The flattener walks a scene graph depth-first in pre-order and emits one
DisplayRecord per drawable leaf. Record order is draw order: a record later
in the list is painted on top of earlier ones.

Traversal rules:
    - A node with children is a group. Its children are visited in order
      and the group itself produces no record.
    - A childless node is a leaf and produces at most one record.
    - Leaves that cannot be described (no shape, no image identifier,
      unsupported shape kind) are skipped and traversal continues.

Every record stores the node's precomposed world transform as read at
flatten time; matrices are never concatenated here.

Image bytes are fetched with an awaited fetcher, one image at a time in
traversal order. A failing fetch drops that single record.

Example:
    >>> import asyncio
    >>> from src.flatscene.scene.graph import Container, Graphics
    >>> from src.flatscene.scene.flatten import flatten_scene
    >>> stage = Container()
    >>> _ = stage.add_child(Graphics().begin_fill(0x0000FF).draw_rect(50, 50, 50, 50))
    >>> records = asyncio.run(flatten_scene(stage))
    >>> [r.tag.name for r in records]
    ['RECT']
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from src.flatscene.scene.assets import FetchBytes, fetch_image_bytes, image_size
from src.flatscene.scene.graph import GraphicsData, ShapeKind
from src.flatscene.scene.records import (
    CircleGeometry,
    DisplayRecord,
    ImageGeometry,
    OvalGeometry,
    Paint,
    PaintStyle,
    PathGeometry,
    RecordTag,
    RectGeometry,
)

logger = logging.getLogger(__name__)

# A path with at most this many coordinates (two points) is a stroked line
LINE_COORDINATE_LIMIT = 4


def _fill_paint(data: GraphicsData) -> Paint:
    return Paint(color=data.fill_style.color, style=PaintStyle.FILL, width=0.0)


def _path_record(data: GraphicsData, **common: Any) -> DisplayRecord | None:
    points = list(data.shape.points)
    if len(points) < LINE_COORDINATE_LIMIT or len(points) % 2:
        logger.debug("Skipping path with %d coordinates", len(points))
        return None

    # Two points draw a line in the line style; more points fill a polygon
    is_line = len(points) <= LINE_COORDINATE_LIMIT
    paint = Paint(
        color=data.line_style.color if is_line else data.fill_style.color,
        style=PaintStyle.STROKE if is_line else PaintStyle.FILL,
        width=data.line_style.width,
    )
    return DisplayRecord(
        tag=RecordTag.PATH,
        geometry=PathGeometry(tuple(points)),
        paint=paint,
        **common,
    )


def _rect_record(data: GraphicsData, **common: Any) -> DisplayRecord:
    shape = data.shape
    return DisplayRecord(
        tag=RecordTag.RECT,
        geometry=RectGeometry(shape.x, shape.y, shape.width, shape.height),
        paint=_fill_paint(data),
        **common,
    )


def _rounded_rect_record(data: GraphicsData, **common: Any) -> DisplayRecord:
    shape = data.shape
    return DisplayRecord(
        tag=RecordTag.RECT,
        geometry=RectGeometry(
            shape.x, shape.y, shape.width, shape.height, radius=shape.radius
        ),
        paint=_fill_paint(data),
        **common,
    )


def _circle_record(data: GraphicsData, **common: Any) -> DisplayRecord:
    shape = data.shape
    return DisplayRecord(
        tag=RecordTag.CIRCLE,
        geometry=CircleGeometry(shape.x, shape.y, shape.radius),
        paint=_fill_paint(data),
        **common,
    )


def _oval_record(data: GraphicsData, **common: Any) -> DisplayRecord:
    # Radii are stored as given; the renderer doubles them
    shape = data.shape
    return DisplayRecord(
        tag=RecordTag.OVAL,
        geometry=OvalGeometry(shape.x, shape.y, shape.width, shape.height),
        paint=_fill_paint(data),
        **common,
    )


# One record builder per shape kind
SHAPE_BUILDERS: Mapping[ShapeKind, Callable[..., DisplayRecord | None]] = (
    MappingProxyType(
        {
            ShapeKind.POLYGON: _path_record,
            ShapeKind.RECTANGLE: _rect_record,
            ShapeKind.CIRCLE: _circle_record,
            ShapeKind.ELLIPSE: _oval_record,
            ShapeKind.ROUNDED_RECTANGLE: _rounded_rect_record,
        }
    )
)


def _vector_record(node: Any, **common: Any) -> DisplayRecord | None:
    graphics_data = getattr(node, "graphics_data", None) or ()
    data = graphics_data[0] if graphics_data else None
    if data is None or data.shape is None:
        logger.debug("Skipping %r: no shape descriptor", node)
        return None

    builder = SHAPE_BUILDERS.get(getattr(data.shape, "kind", None))
    if builder is None:
        logger.debug("Skipping %r: unsupported shape %r", node, data.shape)
        return None
    return builder(data, **common)


async def _image_record(
    node: Any,
    fetch_bytes: FetchBytes,
    **common: Any,
) -> DisplayRecord | None:
    image_id = getattr(node, "image_id", None)
    if not image_id:
        logger.debug("Skipping %r: no image identifier", node)
        return None

    try:
        image_bytes = await fetch_bytes(image_id)
    except Exception as exc:
        logger.warning("Skipping image %r: fetch failed: %s", image_id, exc)
        return None

    width = getattr(node, "width", None)
    height = getattr(node, "height", None)
    if width is None or height is None:
        try:
            natural_width, natural_height = image_size(image_bytes)
        except OSError as exc:
            logger.warning("Cannot read size of image %r: %s", image_id, exc)
        else:
            width = natural_width if width is None else width
            height = natural_height if height is None else height

    anchor_x, anchor_y = getattr(node, "anchor", (0.0, 0.0))
    origin_x = -anchor_x * width if width else 0.0
    origin_y = -anchor_y * height if height else 0.0

    return DisplayRecord(
        tag=RecordTag.IMAGE,
        geometry=ImageGeometry(origin_x, origin_y, width, height),
        image_bytes=bytes(image_bytes),
        **common,
    )


async def _leaf_record(node: Any, fetch_bytes: FetchBytes) -> DisplayRecord | None:
    common = {
        "transform": node.world_transform,
        "events": dict(getattr(node, "events", None) or {}),
    }
    if getattr(node, "is_sprite", False):
        return await _image_record(node, fetch_bytes, **common)
    return _vector_record(node, **common)


async def _flatten_node(
    node: Any,
    records: list[DisplayRecord],
    fetch_bytes: FetchBytes,
) -> None:
    children = list(getattr(node, "children", None) or ())
    if children:
        for child in children:
            await _flatten_node(child, records, fetch_bytes)
        return

    record = await _leaf_record(node, fetch_bytes)
    if record is not None:
        records.append(record)


async def flatten_scene(
    root: Any,
    fetch_bytes: FetchBytes | None = None,
) -> list[DisplayRecord]:
    """Flatten a scene graph into display records in draw order.

    Args:
        root: The root node. Any object exposing ``children``,
            ``world_transform`` and either ``graphics_data`` or
            ``is_sprite``/``image_id`` is accepted.
        fetch_bytes: Async callable resolving an image identifier to bytes.
            Defaults to fetch_image_bytes (local files and http(s) URLs).

    Returns:
        The records in depth-first pre-order of their leaves.
    """
    fetch = fetch_bytes if fetch_bytes is not None else fetch_image_bytes
    records: list[DisplayRecord] = []
    await _flatten_node(root, records, fetch)
    logger.debug("Flattened scene into %d records", len(records))
    return records
