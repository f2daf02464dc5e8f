"""Asynchronous byte fetching for image identifiers.

The flattener resolves every Sprite's image identifier to raw encoded bytes
through a fetcher: any ``async (identifier) -> bytes`` callable. Two are
provided:

- fetch_image_bytes: reads local paths and http(s) URLs, off the event loop.
- AssetStore: an in-memory identifier -> bytes map, useful for tests and for
  scenes whose images are already loaded.

Example:
    >>> import asyncio
    >>> from src.flatscene.scene.assets import AssetStore
    >>> store = AssetStore({"logo.png": b"..."})
    >>> asyncio.run(store.fetch("logo.png"))
    b'...'
"""

from __future__ import annotations

import asyncio
import io
import urllib.request
from collections.abc import Awaitable, Callable, Mapping
from functools import partial
from pathlib import Path

from PIL import Image as PILImage

# Type alias for a fetcher: fetch(identifier) -> encoded bytes
FetchBytes = Callable[[str], Awaitable[bytes]]

DEFAULT_FETCH_TIMEOUT = 10.0

_URL_SCHEMES = ("http://", "https://")


def _read_url(url: str, timeout: float) -> bytes:
    with urllib.request.urlopen(url, timeout=timeout) as response:
        return response.read()


async def fetch_image_bytes(
    identifier: str,
    *,
    base_dir: Path | None = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> bytes:
    """Fetch the raw bytes behind an image identifier.

    Blocking I/O runs in a worker thread so the event loop keeps going.

    Args:
        identifier: A file path (relative paths resolve against base_dir)
            or an http(s) URL.
        base_dir: Directory for relative paths (default: current directory).
        timeout: Network timeout in seconds for URLs.

    Returns:
        The encoded image bytes.

    Raises:
        OSError: If the file or URL cannot be read.
    """
    if identifier.startswith(_URL_SCHEMES):
        return await asyncio.to_thread(_read_url, identifier, timeout)

    path = Path(identifier)
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return await asyncio.to_thread(path.read_bytes)


def make_fetcher(
    base_dir: Path | None = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
) -> FetchBytes:
    """Bind fetch_image_bytes to a base directory and timeout."""
    return partial(fetch_image_bytes, base_dir=base_dir, timeout=timeout)


class AssetStore:
    """In-memory image bytes keyed by identifier."""

    def __init__(self, assets: Mapping[str, bytes] | None = None) -> None:
        self._assets: dict[str, bytes] = dict(assets or {})

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._assets

    def __len__(self) -> int:
        return len(self._assets)

    def add(self, identifier: str, data: bytes) -> None:
        self._assets[identifier] = bytes(data)

    async def fetch(self, identifier: str) -> bytes:
        """Return the stored bytes.

        Raises:
            KeyError: If nothing is stored under the identifier.
        """
        try:
            return self._assets[identifier]
        except KeyError:
            raise KeyError(f"No asset stored for {identifier!r}") from None


def image_size(data: bytes) -> tuple[int, int]:
    """Read (width, height) from an encoded image header.

    Raises:
        OSError: If Pillow cannot identify the image format.
    """
    with PILImage.open(io.BytesIO(data)) as image:
        return image.size
