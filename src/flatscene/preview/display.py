"""Matplotlib-based preview display for raster surfaces.

Example:
    >>> from src.flatscene.preview.display import show_preview
    >>> from src.flatscene.preview.surface import RasterSurface
    >>>
    >>> surface = RasterSurface(300, 300, background=0xFFFFFF)
    >>> converter.draw_once(surface)
    >>> show_preview(surface)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.flatscene.preview.surface import RasterSurface


def show_preview(
    surface: RasterSurface,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (6, 6),
    block: bool = True,
) -> None:
    """Display the surface contents in a Matplotlib figure.

    Args:
        surface: The surface to display.
        title: Custom title (default shows the canvas size and draw count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    # Canvas pixel coordinates: origin top-left, y down
    ax.imshow(surface.to_numpy(), interpolation="nearest")
    ax.axis("off")

    if title is None:
        title = (
            f"Canvas {surface.width}x{surface.height} - "
            f"frame {surface.draw_count}"
        )
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
