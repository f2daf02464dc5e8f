"""Stateful scene conversion session.

SceneConverter owns the current display records of one canvas. It flattens
a scene graph into records, replays them on a raster surface or a PDF page,
and answers pointer queries against them.

Conversion is single-flight: starting a new conversion cancels the one in
flight and waits for it to unwind before flattening again. The superseded
call raises asyncio.CancelledError and never touches the stored records.
While a conversion is in flight, drawing and exporting are refused, so a
frame is never built from a half-replaced record list.

Example:
    >>> import asyncio
    >>> from src.flatscene.core.converter import SceneConverter
    >>> from src.flatscene.preview.surface import RasterSurface
    >>> from src.flatscene.scene.demo import create_demo_scene
    >>>
    >>> converter = SceneConverter(300, 300)
    >>> surface = RasterSurface(300, 300)
    >>> asyncio.run(converter.convert_and_draw(create_demo_scene(), surface))
    >>> download = converter.export_pdf("export.pdf")
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import cairo

from src.flatscene.core.config import ConverterConfig
from src.flatscene.geometry.transform import Point
from src.flatscene.preview.export import PDF_MIME_TYPE, Download, export_pdf
from src.flatscene.preview.renderer import render_records
from src.flatscene.preview.surface import RasterSurface
from src.flatscene.scene.assets import FetchBytes
from src.flatscene.scene.flatten import flatten_scene
from src.flatscene.scene.intersection import hit_records, pick
from src.flatscene.scene.records import DisplayRecord, PointerEvent

logger = logging.getLogger(__name__)


class SceneConverter:
    """Converts scene graphs to display records and draws them.

    Attributes:
        config: Rendering settings (canvas size, antialiasing, filters).
    """

    def __init__(
        self,
        width: int | None = None,
        height: int | None = None,
        *,
        config: ConverterConfig | None = None,
        fetch_bytes: FetchBytes | None = None,
    ) -> None:
        """Initialize the converter.

        Args:
            width: Canvas width; overrides config.width when given.
            height: Canvas height; overrides config.height when given.
            config: Rendering settings (default: ConverterConfig()).
            fetch_bytes: Async image fetcher passed to the flattener.

        Raises:
            ValueError: If the canvas size is invalid.
        """
        base = config if config is not None else ConverterConfig()
        overrides = base.to_dict()
        if width is not None:
            overrides["width"] = width
        if height is not None:
            overrides["height"] = height
        self.config = ConverterConfig.from_dict(overrides)

        self._fetch_bytes = fetch_bytes
        self._objects: tuple[DisplayRecord, ...] = ()
        self._pending: asyncio.Task[list[DisplayRecord]] | None = None

    def __repr__(self) -> str:
        return (
            f"SceneConverter({self.config.width}x{self.config.height}, "
            f"objects={len(self._objects)}, converting={self.converting})"
        )

    # =========================================================================
    # State
    # =========================================================================

    def get_resolution(self) -> tuple[int, int]:
        """Get the canvas size as (width, height)."""
        return self.config.get_resolution()

    @property
    def objects(self) -> tuple[DisplayRecord, ...]:
        """Records from the last completed conversion, bottom first."""
        return self._objects

    @property
    def converting(self) -> bool:
        """True while a flatten pass is in flight."""
        return self._pending is not None and not self._pending.done()

    def clear(self) -> None:
        """Drop all stored records.

        Raises:
            RuntimeError: If a conversion is in flight.
        """
        self._require_idle("clear")
        self._objects = ()

    def _require_idle(self, action: str) -> None:
        if self.converting:
            raise RuntimeError(f"Cannot {action} while a conversion is in flight")

    # =========================================================================
    # Conversion
    # =========================================================================

    async def cancel_pending(self) -> bool:
        """Cancel the in-flight conversion and wait for it to unwind.

        Returns:
            True if a conversion was cancelled.
        """
        task = self._pending
        if task is None or task.done():
            return False
        task.cancel()
        await asyncio.wait({task})
        logger.debug("Cancelled superseded conversion")
        return True

    async def convert(self, root: Any) -> tuple[DisplayRecord, ...]:
        """Flatten a scene graph and store the resulting records.

        Args:
            root: Root node of the scene graph.

        Returns:
            The new records.

        Raises:
            asyncio.CancelledError: If a newer convert() call superseded
                this one. The stored records are left untouched.
        """
        # Another caller may start a pass while this one waits
        while await self.cancel_pending():
            pass

        task = asyncio.create_task(flatten_scene(root, self._fetch_bytes))
        self._pending = task
        try:
            records = await task
        finally:
            if self._pending is task:
                self._pending = None

        self._objects = tuple(records)
        logger.info("Converted scene into %d records", len(self._objects))
        return self._objects

    async def convert_and_draw(self, root: Any, surface: RasterSurface) -> int:
        """Convert a scene graph, then draw it once on a surface.

        Returns:
            The number of records drawn.
        """
        await self.convert(root)
        return self.draw_once(surface)

    # =========================================================================
    # Drawing and Export
    # =========================================================================

    def render(self, ctx: cairo.Context) -> int:
        """Replay the stored records on a cairo context.

        Returns:
            The number of records drawn.

        Raises:
            RuntimeError: If a conversion is in flight.
        """
        self._require_idle("render")
        return render_records(
            ctx,
            self._objects,
            antialias=self.config.antialias,
            image_filter=self.config.image_filter,
        )

    def draw_once(self, surface: RasterSurface) -> int:
        """Clear a raster surface and draw the stored records on it.

        Args:
            surface: Target surface, passed explicitly by the caller.

        Returns:
            The number of records drawn.

        Raises:
            RuntimeError: If a conversion is in flight.
        """
        self._require_idle("draw")
        drawn = 0

        def draw(ctx: cairo.Context) -> None:
            nonlocal drawn
            drawn = self.render(ctx)

        surface.draw_once(draw)
        logger.debug("Drew %d of %d records", drawn, len(self._objects))
        return drawn

    def export_pdf(self, file_name: str = "export.pdf") -> Download:
        """Export the stored records as a single-page PDF download.

        Args:
            file_name: Suggested file name of the download.

        Returns:
            The PDF wrapped in a Download.

        Raises:
            RuntimeError: If a conversion is in flight.
        """
        self._require_idle("export")
        width, height = self.get_resolution()
        data = export_pdf(
            self._objects,
            width,
            height,
            antialias=self.config.antialias,
            image_filter=self.config.image_filter,
            pdf_version=self.config.pdf_version,
        )
        return Download(file_name=file_name, data=data, mime_type=PDF_MIME_TYPE)

    # =========================================================================
    # Pointer Queries
    # =========================================================================

    def pick(self, x: float, y: float) -> DisplayRecord | None:
        """Return the topmost record under a canvas point."""
        return pick((x, y), self._objects)

    def hits(self, x: float, y: float) -> list[DisplayRecord]:
        """Return every record under a canvas point, bottom first."""
        return hit_records((x, y), self._objects)

    def dispatch_pointer(self, event: PointerEvent | str, x: float, y: float) -> bool:
        """Deliver a pointer event to the topmost record that handles it.

        Records without a handler for the event are transparent to it.

        Args:
            event: The pointer event.
            x: Canvas-local x coordinate.
            y: Canvas-local y coordinate.

        Returns:
            True if a handler was called.
        """
        event = PointerEvent(event)
        point = Point(float(x), float(y))
        candidates: Sequence[DisplayRecord] = [
            record
            for record in self._objects
            if record.handler_for(event) is not None
        ]
        target = pick(point, candidates)
        if target is None:
            return False

        logger.debug(
            "Dispatching %s at (%g, %g) to %s record",
            event.value, x, y, target.tag.name,
        )
        target.handler_for(event)(event, point)
        return True
