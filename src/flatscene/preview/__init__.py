"""Preview module for rendering and output.

Components:
    renderer: Replays display records on a cairo context
    surface: Caller-owned raster canvas
    export: Single-page PDF export and PNG snapshots
    display: Matplotlib-based preview window

Example:
    >>> from src.flatscene.preview import RasterSurface, render_records, save_png
    >>>
    >>> surface = RasterSurface(300, 300, background=0xFFFFFF)
    >>> surface.draw_once(lambda ctx: render_records(ctx, records))
    >>> save_png(surface, "canvas.png")
"""

from src.flatscene.preview.display import show_preview
from src.flatscene.preview.export import (
    PDF_MIME_TYPE,
    Download,
    export_pdf,
    save_png,
)
from src.flatscene.preview.renderer import (
    RECORD_PAINTERS,
    ImageFilterMode,
    render_record,
    render_records,
)
from src.flatscene.preview.surface import RasterSurface

__all__ = [
    # Drawing
    "RECORD_PAINTERS",
    "ImageFilterMode",
    "render_record",
    "render_records",
    "RasterSurface",
    # Display
    "show_preview",
    # Export
    "PDF_MIME_TYPE",
    "Download",
    "export_pdf",
    "save_png",
]
