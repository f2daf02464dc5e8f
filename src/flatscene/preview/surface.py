"""Raster drawing surface owned by the caller.

A RasterSurface wraps a cairo ARGB32 image surface. Callers create it and
pass it explicitly to whatever draws on it; nothing looks surfaces up by
name. Drawing happens through draw_once(), which hands a fresh context to a
callback after clearing the canvas.

Example:
    >>> from src.flatscene.preview.surface import RasterSurface
    >>> surface = RasterSurface(300, 300, background=0xFFFFFF)
    >>> surface.draw_once(lambda ctx: None)
    >>> surface.to_numpy().shape
    (300, 300, 4)
"""

from __future__ import annotations

from collections.abc import Callable

import cairo
import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.flatscene.scene.records import MAX_COLOR, color_to_hex, hex_to_rgb

# Largest canvas edge accepted, in pixels
MAX_CANVAS_SIZE = 16384


def validate_canvas_size(width: int, height: int) -> None:
    """Check canvas dimensions.

    Raises:
        ValueError: If either dimension is not in [1, MAX_CANVAS_SIZE].
    """
    for name, value in (("width", width), ("height", height)):
        if not 1 <= value <= MAX_CANVAS_SIZE:
            raise ValueError(
                f"Canvas {name} must be in [1, {MAX_CANVAS_SIZE}], got {value}"
            )


class RasterSurface:
    """An on-screen style raster canvas backed by cairo.

    Attributes:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        background: Clear color as a 24-bit RGB integer, or None for a
            transparent canvas.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        background: int | None = None,
    ) -> None:
        validate_canvas_size(width, height)
        if background is not None and not 0 <= background <= MAX_COLOR:
            raise ValueError(f"Background must be a 24-bit RGB value, got {background}")
        self._width = width
        self._height = height
        self.background = background
        self._surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, width, height)
        self._draw_count = 0

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def draw_count(self) -> int:
        """Number of completed draw_once() calls."""
        return self._draw_count

    def clear(self) -> None:
        """Reset every pixel to the background (or transparent)."""
        ctx = cairo.Context(self._surface)
        ctx.set_operator(cairo.OPERATOR_SOURCE)
        if self.background is None:
            ctx.set_source_rgba(0.0, 0.0, 0.0, 0.0)
        else:
            ctx.set_source_rgb(*hex_to_rgb(color_to_hex(self.background)))
        ctx.paint()
        self._surface.flush()

    def draw_once(self, callback: Callable[[cairo.Context], object]) -> None:
        """Clear the canvas and replay one frame through the callback.

        Args:
            callback: Called with a fresh cairo.Context for this surface.
        """
        self.clear()
        ctx = cairo.Context(self._surface)
        try:
            callback(ctx)
        finally:
            self._surface.flush()
        self._draw_count += 1

    def to_image(self) -> PILImage.Image:
        """Return the canvas as an un-premultiplied RGBA Pillow image."""
        self._surface.flush()
        return PILImage.frombuffer(
            "RGBA",
            (self._width, self._height),
            bytes(self._surface.get_data()),
            "raw",
            "BGRa",
            self._surface.get_stride(),
            1,
        )

    def to_numpy(self) -> npt.NDArray[np.uint8]:
        """Return the canvas as a (H, W, 4) uint8 RGBA array."""
        return np.asarray(self.to_image(), dtype=np.uint8)
