"""Scene graph flattening, rendering and hit-testing on pycairo.

This package converts a retained-mode 2D scene graph into a flat,
paint-ordered list of display records, replays those records on an
immediate-mode cairo context (raster canvas or single-page PDF), and
answers pointer hit-tests against the records alone.

Subpackages:
    geometry: Affine transform parsing, inversion and point mapping
    scene: Scene graph input, display records, flattening and hit-testing
    preview: Record rendering, raster surfaces, PDF/PNG export and preview
    core: Converter session and its configuration
"""

__version__ = "0.1.0"
