"""Converter configuration.

ConverterConfig bundles the settings shared by the raster canvas and the PDF
export: canvas size, clear color, antialiasing, the image sampling filter
and the PDF version. Values are validated on construction and can be
round-tripped through plain dictionaries (for JSON files).

Example:
    >>> from src.flatscene.core.config import ConverterConfig
    >>> config = ConverterConfig(width=640, height=480, background=0xFFFFFF)
    >>> ConverterConfig.from_dict(config.to_dict()) == config
    True
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any

from src.flatscene.preview.export import PDF_VERSIONS, PdfVersion
from src.flatscene.preview.renderer import CAIRO_FILTERS, ImageFilterMode
from src.flatscene.preview.surface import validate_canvas_size
from src.flatscene.scene.records import MAX_COLOR

# Canvas size used when nothing else is configured
DEFAULT_WIDTH = 300
DEFAULT_HEIGHT = 300


@dataclass
class ConverterConfig:
    """Settings for a SceneConverter.

    Attributes:
        width: Canvas width in pixels (also the PDF page width).
        height: Canvas height in pixels (also the PDF page height).
        background: Raster clear color as a 24-bit RGB integer, or None for
            a transparent canvas. PDF pages are never filled.
        antialias: Whether shapes are antialiased.
        image_filter: "linear" (smooth) or "nearest" sampling for images.
        pdf_version: PDF version the export is restricted to.

    Example:
        >>> ConverterConfig().get_resolution()
        (300, 300)
        >>> ConverterConfig(image_filter="cubic")
        Traceback (most recent call last):
        ...
        ValueError: Unknown image filter: cubic
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    background: int | None = None
    antialias: bool = True
    image_filter: ImageFilterMode = "linear"
    pdf_version: PdfVersion = "1.5"

    def __post_init__(self) -> None:
        validate_canvas_size(self.width, self.height)
        if self.background is not None and not 0 <= self.background <= MAX_COLOR:
            raise ValueError(
                f"Background must be a 24-bit RGB value, got {self.background}"
            )
        if self.image_filter not in CAIRO_FILTERS:
            raise ValueError(f"Unknown image filter: {self.image_filter}")
        if self.pdf_version not in PDF_VERSIONS:
            raise ValueError(f"Unknown PDF version: {self.pdf_version}")

    def get_resolution(self) -> tuple[int, int]:
        return (self.width, self.height)

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration to a dictionary (for JSON serialization)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConverterConfig:
        """Build a configuration from a dictionary.

        Missing keys keep their defaults.

        Raises:
            ValueError: If the dictionary has unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)
