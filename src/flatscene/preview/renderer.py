"""Replay display records on an immediate-mode cairo context.

render_records() draws records in list order, so the first record ends up
at the bottom of the stack. The same routine drives the raster canvas
(cairo.ImageSurface) and the PDF page (cairo.PDFSurface).

Per-record drawing:
    PATH    move-to the first pair, line-to the rest
    RECT    rectangle, or rounded rectangle when a radius is present
    OVAL    oval inscribed in [x - w, y - h, 2w, 2h]
    CIRCLE  full circle at the local center
    IMAGE   decoded bitmap drawn at its local origin

Vector paths are built under the record's world transform and then painted
in device space, so the transform moves, scales and skews the path while a
stroke keeps its configured width. Images are painted with the transform
applied to the image space.

Every record is drawn inside its own acquire/use/release scope: the context
state is saved and restored, the current path is discarded, and a decoded
image surface is finished, on every exit path.

Example:
    >>> import cairo
    >>> from src.flatscene.preview.renderer import render_records
    >>> surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, 300, 300)
    >>> ctx = cairo.Context(surface)
    >>> render_records(ctx, records)  # records from flatten_scene()
"""

from __future__ import annotations

import io
import logging
import math
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from types import MappingProxyType
from typing import Literal

import cairo
import numpy as np
from PIL import Image as PILImage

from src.flatscene.geometry.transform import invert_matrix, parse_transform, to_cairo_matrix
from src.flatscene.scene.records import (
    DisplayRecord,
    Paint,
    PaintStyle,
    RecordTag,
    color_to_hex,
    hex_to_rgb,
)

logger = logging.getLogger(__name__)

# Sampling filter used when painting transformed bitmaps
ImageFilterMode = Literal["nearest", "linear"]

CAIRO_FILTERS = {
    "nearest": cairo.FILTER_NEAREST,
    "linear": cairo.FILTER_BILINEAR,
}


# =============================================================================
# Resource Scopes
# =============================================================================


@contextmanager
def record_scope(ctx: cairo.Context) -> Iterator[cairo.Context]:
    """Isolate one record's drawing state.

    Saves the context state on entry; on exit, whatever happened, drops the
    current path and restores the state (source pattern, line width, matrix,
    antialias mode) so nothing leaks into the next record.
    """
    ctx.save()
    try:
        yield ctx
    finally:
        ctx.new_path()
        ctx.restore()


def decode_image(data: bytes) -> cairo.ImageSurface:
    """Decode encoded image bytes into a cairo image surface.

    Raises:
        OSError: If Pillow cannot identify or decode the bytes.
    """
    with PILImage.open(io.BytesIO(data)) as image:
        rgba = np.asarray(image.convert("RGBA"), dtype=np.uint16)

    # cairo ARGB32 is premultiplied, stored as B, G, R, A on little-endian hosts
    alpha = rgba[..., 3:]
    premultiplied = (rgba[..., :3] * alpha + 127) // 255
    pixels = np.concatenate([premultiplied[..., ::-1], alpha], axis=-1).astype(np.uint8)
    height, width = pixels.shape[:2]
    stride = cairo.ImageSurface.format_stride_for_width(cairo.FORMAT_ARGB32, width)
    buffer = np.zeros((height, stride), dtype=np.uint8)
    buffer[:, : width * 4] = pixels.reshape(height, width * 4)

    return cairo.ImageSurface.create_for_data(
        buffer, cairo.FORMAT_ARGB32, width, height, stride
    )


@contextmanager
def finished_after_use(
    ctx: cairo.Context, surface: cairo.ImageSurface
) -> Iterator[cairo.ImageSurface]:
    """Finish an image surface on exit, releasing its pixel memory."""
    try:
        yield surface
    finally:
        # Drop the source pattern's reference before finishing
        ctx.set_source_rgb(0.0, 0.0, 0.0)
        surface.finish()


# =============================================================================
# Paint
# =============================================================================


def apply_paint(ctx: cairo.Context, paint: Paint, *, antialias: bool = True) -> None:
    """Fill or stroke the current path with a paint.

    The color goes through its ``#rrggbb`` form, zero-padded to six digits.
    """
    ctx.set_source_rgb(*hex_to_rgb(color_to_hex(paint.color)))
    ctx.set_antialias(cairo.ANTIALIAS_DEFAULT if antialias else cairo.ANTIALIAS_NONE)
    if paint.style == PaintStyle.STROKE:
        ctx.set_line_width(paint.width)
        ctx.stroke()
    else:
        ctx.fill()


@contextmanager
def transformed_path(ctx: cairo.Context, record: DisplayRecord) -> Iterator[None]:
    """Build a path under the record transform, then return to device space."""
    ctx.save()
    try:
        if record.transform is not None:
            ctx.transform(to_cairo_matrix(record.transform))
        yield
    finally:
        # cairo keeps the current path across restore()
        ctx.restore()


# =============================================================================
# Per-Tag Drawing
# =============================================================================


def _add_rounded_rect(
    ctx: cairo.Context, x: float, y: float, width: float, height: float, radius: float
) -> None:
    radius = max(0.0, min(radius, width / 2, height / 2))
    ctx.new_sub_path()
    ctx.arc(x + width - radius, y + radius, radius, -math.pi / 2, 0)
    ctx.arc(x + width - radius, y + height - radius, radius, 0, math.pi / 2)
    ctx.arc(x + radius, y + height - radius, radius, math.pi / 2, math.pi)
    ctx.arc(x + radius, y + radius, radius, math.pi, 3 * math.pi / 2)
    ctx.close_path()


def _add_oval(
    ctx: cairo.Context, x: float, y: float, width: float, height: float
) -> None:
    # Scale a unit circle into the bounding box without touching the path
    # built so far
    ctx.save()
    ctx.translate(x + width / 2, y + height / 2)
    ctx.scale(width / 2, height / 2)
    ctx.new_sub_path()
    ctx.arc(0.0, 0.0, 1.0, 0.0, 2 * math.pi)
    ctx.close_path()
    ctx.restore()


def draw_path(ctx: cairo.Context, record: DisplayRecord, *, antialias: bool = True) -> bool:
    path = record.geometry.points
    if not path or record.paint is None:
        return False

    with transformed_path(ctx, record):
        ctx.move_to(path[0], path[1])
        for i in range(2, len(path) - 1, 2):
            ctx.line_to(path[i], path[i + 1])
    apply_paint(ctx, record.paint, antialias=antialias)
    return True


def draw_rect(ctx: cairo.Context, record: DisplayRecord, *, antialias: bool = True) -> bool:
    shape = record.geometry
    if record.paint is None or not shape.width or not shape.height:
        return False

    with transformed_path(ctx, record):
        if shape.radius is not None:
            _add_rounded_rect(ctx, shape.x, shape.y, shape.width, shape.height, shape.radius)
        else:
            ctx.rectangle(shape.x, shape.y, shape.width, shape.height)
    apply_paint(ctx, record.paint, antialias=antialias)
    return True


def draw_oval(ctx: cairo.Context, record: DisplayRecord, *, antialias: bool = True) -> bool:
    shape = record.geometry
    if record.paint is None or not shape.width or not shape.height:
        return False

    # Stored radii are half extents around (x, y): double and re-center
    with transformed_path(ctx, record):
        _add_oval(
            ctx,
            shape.x - shape.width,
            shape.y - shape.height,
            shape.width * 2,
            shape.height * 2,
        )
    apply_paint(ctx, record.paint, antialias=antialias)
    return True


def draw_circle(ctx: cairo.Context, record: DisplayRecord, *, antialias: bool = True) -> bool:
    shape = record.geometry
    if record.paint is None or not shape.radius:
        return False

    with transformed_path(ctx, record):
        ctx.new_sub_path()
        ctx.arc(shape.x, shape.y, shape.radius, 0.0, 2 * math.pi)
        ctx.close_path()
    apply_paint(ctx, record.paint, antialias=antialias)
    return True


def draw_image(
    ctx: cairo.Context,
    record: DisplayRecord,
    *,
    antialias: bool = True,
    image_filter: ImageFilterMode = "linear",
) -> bool:
    if not record.image_bytes:
        return False

    try:
        decoded = decode_image(record.image_bytes)
    except (OSError, ValueError) as exc:
        logger.warning("Skipping undecodable image record: %s", exc)
        return False

    with finished_after_use(ctx, decoded) as image:
        image_width = image.get_width()
        image_height = image.get_height()
        shape = record.geometry
        width = shape.width or image_width
        height = shape.height or image_height

        # Image space: world transform, then local origin, then local size
        if record.transform is not None:
            ctx.transform(to_cairo_matrix(record.transform))
        ctx.translate(shape.x, shape.y)
        ctx.scale(width / image_width, height / image_height)

        ctx.set_source_surface(image, 0.0, 0.0)
        ctx.get_source().set_filter(CAIRO_FILTERS[image_filter])
        ctx.set_antialias(cairo.ANTIALIAS_DEFAULT if antialias else cairo.ANTIALIAS_NONE)
        ctx.rectangle(0.0, 0.0, image_width, image_height)
        ctx.fill()
    return True


# One drawing routine per record tag
RECORD_PAINTERS: Mapping[RecordTag, Callable[..., bool]] = MappingProxyType(
    {
        RecordTag.PATH: draw_path,
        RecordTag.RECT: draw_rect,
        RecordTag.OVAL: draw_oval,
        RecordTag.CIRCLE: draw_circle,
        RecordTag.IMAGE: draw_image,
    }
)


def render_record(
    ctx: cairo.Context,
    record: DisplayRecord,
    *,
    antialias: bool = True,
    image_filter: ImageFilterMode = "linear",
) -> bool:
    """Draw one record inside its own resource scope.

    Returns:
        True if the record was drawn, False if it was skipped because
        required geometry, paint or image data was missing, or because its
        transform collapses the shape (zero determinant).

    Raises:
        ValueError: If the record tag has no drawing routine or the image
            filter is unknown.
    """
    painter = RECORD_PAINTERS.get(record.tag)
    if painter is None:
        raise ValueError(f"No drawing routine for record tag: {record.tag!r}")
    if image_filter not in CAIRO_FILTERS:
        raise ValueError(f"Unknown image filter: {image_filter}")

    # cairo refuses non-invertible matrices and poisons the context
    if (
        record.transform is not None
        and invert_matrix(parse_transform(record.transform)) is None
    ):
        logger.debug("Skipped %s record with a singular transform", record.tag.name)
        return False

    with record_scope(ctx):
        if record.tag == RecordTag.IMAGE:
            drawn = painter(ctx, record, antialias=antialias, image_filter=image_filter)
        else:
            drawn = painter(ctx, record, antialias=antialias)

    if not drawn:
        logger.debug("Skipped %s record with missing data", record.tag.name)
    return drawn


def render_records(
    ctx: cairo.Context,
    records: Sequence[DisplayRecord],
    *,
    antialias: bool = True,
    image_filter: ImageFilterMode = "linear",
) -> int:
    """Replay records in list order (first record at the bottom).

    Args:
        ctx: Target cairo context (raster or PDF).
        records: Records from the flattener.
        antialias: Whether shapes are antialiased.
        image_filter: Sampling filter for transformed images.

    Returns:
        The number of records actually drawn.
    """
    drawn = 0
    for record in records:
        if render_record(ctx, record, antialias=antialias, image_filter=image_filter):
            drawn += 1
    return drawn
