#!/usr/bin/env python3
"""Flatten a scene, render it and export it.

This script converts a scene graph (the built-in demo composition, or a JSON
scene description) into display records, draws them on a raster canvas and
optionally writes a PNG snapshot and a single-page PDF.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene PATH          JSON scene description (default: demo scene)
    --image ID            Image shown by the demo scene's sprite
    --width WIDTH         Canvas width in pixels (default: 300)
    --height HEIGHT       Canvas height in pixels (default: 300)
    --random-shapes N     Add N random shapes to the scene (default: 0)
    --seed SEED           Seed for the random shapes
    --png PATH            Write the canvas as a PNG file
    --pdf PATH            Write the scene as a single-page PDF
    --show                Open a Matplotlib preview window
    --quiet               Suppress progress output
    --verbose             Enable debug logging

Example:
    python -m examples.render_scene --random-shapes 5 --seed 7 --png out.png --pdf out.pdf
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path

import numpy as np

from src.flatscene.core.config import ConverterConfig
from src.flatscene.core.converter import SceneConverter
from src.flatscene.preview.display import show_preview
from src.flatscene.preview.export import save_png
from src.flatscene.preview.surface import RasterSurface
from src.flatscene.scene.assets import make_fetcher
from src.flatscene.scene.demo import create_demo_scene, generate_random_graphics
from src.flatscene.scene.serialization import scene_from_dict


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Flatten a scene, render it and export it.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene description (default: demo scene)",
    )
    parser.add_argument(
        "--image",
        type=str,
        default=None,
        help="Image shown by the demo scene's sprite",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=300,
        help="Canvas width in pixels (default: 300)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=300,
        help="Canvas height in pixels (default: 300)",
    )
    parser.add_argument(
        "--random-shapes",
        type=int,
        default=0,
        help="Add N random shapes to the scene (default: 0)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the random shapes",
    )
    parser.add_argument(
        "--png",
        type=str,
        default=None,
        help="Write the canvas as a PNG file",
    )
    parser.add_argument(
        "--pdf",
        type=str,
        default=None,
        help="Write the scene as a single-page PDF",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Open a Matplotlib preview window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def load_scene(scene_path: str | None, image_id: str | None):
    """Load a JSON scene description, or build the demo scene."""
    if scene_path is None:
        return create_demo_scene(image_id)
    data = json.loads(Path(scene_path).read_text())
    return scene_from_dict(data)


async def render_scene(
    scene_path: str | None = None,
    image_id: str | None = None,
    width: int = 300,
    height: int = 300,
    random_shapes: int = 0,
    seed: int | None = None,
    png_path: str | None = None,
    pdf_path: str | None = None,
    show: bool = False,
    quiet: bool = False,
) -> SceneConverter:
    """Convert, draw and export a scene.

    Args:
        scene_path: JSON scene description, or None for the demo scene.
        image_id: Image for the demo scene's sprite.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        random_shapes: Number of random shapes appended to the root.
        seed: Seed for the random shapes.
        png_path: Output PNG path, or None.
        pdf_path: Output PDF path, or None.
        show: Whether to open a preview window.
        quiet: If True, suppress progress output.

    Returns:
        The converter holding the final records.
    """
    base_dir = Path(scene_path).parent if scene_path else Path.cwd()
    config = ConverterConfig(width=width, height=height)
    converter = SceneConverter(config=config, fetch_bytes=make_fetcher(base_dir))
    surface = RasterSurface(width, height, background=0xFFFFFF)

    root = load_scene(scene_path, image_id)

    rng = np.random.default_rng(seed)
    for _ in range(random_shapes):
        root.add_child(generate_random_graphics(width, height, rng))

    if not quiet:
        print(f"Converting scene ({width}x{height})...")

    start_time = time.time()
    drawn = await converter.convert_and_draw(root, surface)

    if not quiet:
        elapsed = time.time() - start_time
        print(f"  {len(converter.objects)} records, {drawn} drawn in {elapsed:.3f}s")

    if png_path is not None:
        output_file = save_png(surface, png_path)
        if not quiet:
            print(f"Saved PNG to: {output_file.absolute()}")

    if pdf_path is not None:
        pdf_file = Path(pdf_path)
        download = converter.export_pdf(pdf_file.name)
        output_file = download.save(pdf_file.parent)
        if not quiet:
            print(f"Saved PDF to: {output_file.absolute()} ({download.size} bytes)")

    if show:
        show_preview(surface)

    return converter


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(
            render_scene(
                scene_path=args.scene,
                image_id=args.image,
                width=args.width,
                height=args.height,
                random_shapes=args.random_shapes,
                seed=args.seed,
                png_path=args.png,
                pdf_path=args.pdf,
                show=args.show,
                quiet=args.quiet,
            )
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
