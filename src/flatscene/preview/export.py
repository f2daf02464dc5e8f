"""Export utilities for flattened scenes.

This module writes display records to files: a single-page PDF document
rendered with cairo's PDF backend, and PNG snapshots of a raster surface.

Supported formats:
    - PDF (vector, one page the size of the canvas, via cairo.PDFSurface)
    - PNG (8-bit RGBA via Pillow, from a raster surface)

Example:
    >>> from src.flatscene.preview.export import Download, export_pdf
    >>> data = export_pdf(records, 300, 300)  # records from flatten_scene()
    >>> Download("export.pdf", data).save(".")
"""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import cairo

from src.flatscene.preview.renderer import ImageFilterMode, render_records
from src.flatscene.preview.surface import RasterSurface, validate_canvas_size
from src.flatscene.scene.records import DisplayRecord

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"

# PDF versions cairo can be restricted to
PdfVersion = Literal["1.4", "1.5"]

PDF_VERSIONS = {
    "1.4": cairo.PDF_VERSION_1_4,
    "1.5": cairo.PDF_VERSION_1_5,
}


@dataclass(frozen=True)
class Download:
    """A finished file handed to the caller for download.

    Attributes:
        file_name: Suggested file name.
        data: File contents.
        mime_type: MIME type of the contents.
    """

    file_name: str
    data: bytes
    mime_type: str = PDF_MIME_TYPE

    def __post_init__(self) -> None:
        if not self.file_name or Path(self.file_name).name != self.file_name:
            raise ValueError(f"Download needs a plain file name, got {self.file_name!r}")

    @property
    def size(self) -> int:
        return len(self.data)

    def save(self, directory: str | Path = ".") -> Path:
        """Write the file into a directory and return its path."""
        target = Path(directory) / self.file_name
        target.write_bytes(self.data)
        logger.info("Saved %s (%d bytes)", target, self.size)
        return target


def export_pdf(
    records: Sequence[DisplayRecord],
    width: int,
    height: int,
    *,
    antialias: bool = True,
    image_filter: ImageFilterMode = "linear",
    pdf_version: PdfVersion = "1.5",
) -> bytes:
    """Render records into a fresh single-page PDF document.

    The page has the canvas size in points. The document is created, drawn,
    its only page is ended and the document is closed on every call, so
    calls never share state.

    Args:
        records: Records to draw, bottom first.
        width: Page width (canvas width).
        height: Page height (canvas height).
        antialias: Whether shapes are antialiased.
        image_filter: Sampling filter for transformed images.
        pdf_version: PDF version the output is restricted to.

    Returns:
        The complete PDF file contents.

    Raises:
        ValueError: If the size or PDF version is invalid.
    """
    validate_canvas_size(width, height)
    if pdf_version not in PDF_VERSIONS:
        raise ValueError(f"Unknown PDF version: {pdf_version}")

    buffer = io.BytesIO()
    surface = cairo.PDFSurface(buffer, width, height)
    try:
        surface.restrict_to_version(PDF_VERSIONS[pdf_version])
        ctx = cairo.Context(surface)
        drawn = render_records(
            ctx, records, antialias=antialias, image_filter=image_filter
        )
        ctx.show_page()
    finally:
        surface.finish()

    logger.debug("Exported %d of %d records to PDF", drawn, len(records))
    return buffer.getvalue()


def save_png(surface: RasterSurface, filepath: str | Path) -> Path:
    """Save the current contents of a raster surface as a PNG file.

    Args:
        surface: The surface to save.
        filepath: Output file path (should end in .png).

    Returns:
        The output path.
    """
    output = Path(filepath)
    surface.to_image().save(output, format="PNG")
    return output

