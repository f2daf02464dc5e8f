"""Pytest configuration for flatscene tests.

This module provides shared fixtures: small encoded images, an in-memory
asset store and record factories.
"""

import io

import pytest
from PIL import Image as PILImage


def encode_png(width, height, color=(255, 0, 0, 255)):
    """Encode a solid-color RGBA image as PNG bytes."""
    image = PILImage.new("RGBA", (width, height), color)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    """A 20x10 solid red PNG."""
    return encode_png(20, 10)


@pytest.fixture
def asset_store(png_bytes):
    """An asset store holding the red PNG under 'red.png'."""
    from src.flatscene.scene.assets import AssetStore

    return AssetStore({"red.png": png_bytes})


@pytest.fixture
def make_rect():
    """Factory for RECT records."""
    from src.flatscene.scene.records import (
        DisplayRecord,
        Paint,
        RecordTag,
        RectGeometry,
    )

    def _make(x=50, y=50, width=50, height=50, *, radius=None, color=0x0000FF,
              transform=None, events=None):
        return DisplayRecord(
            tag=RecordTag.RECT,
            geometry=RectGeometry(x, y, width, height, radius=radius),
            transform=transform,
            paint=Paint(color),
            events=events or {},
        )

    return _make
