"""Scene module: scene graph input, display records and queries.

Components:
    records: Display records, paints and geometry variants
    intersection: Point-in-record hit-testing and picking
    graph: Container, Graphics and Sprite nodes with shape descriptors
    assets: Asynchronous image byte fetchers
    flatten: Scene graph to display record conversion
    demo: Demo composition and random shape generation
    serialization: JSON-compatible scene descriptions

Records are the only thing the renderer and the hit tester see; the scene
graph is consulted once, by the flattener.
"""

# Records first: every other scene module builds on them
from .records import (
    GEOMETRY_FOR_TAG,
    CircleGeometry,
    DisplayRecord,
    ImageGeometry,
    OvalGeometry,
    Paint,
    PaintStyle,
    PathGeometry,
    PointerEvent,
    RecordTag,
    RectGeometry,
    color_to_hex,
    hex_to_rgb,
)
from .intersection import (
    HIT_TESTERS,
    hit_records,
    is_point_in_record,
    pick,
)
from .graph import (
    Circle,
    Container,
    Ellipse,
    Graphics,
    Node,
    Polygon,
    Rectangle,
    RoundedRectangle,
    ShapeKind,
    Sprite,
)
from .assets import AssetStore, fetch_image_bytes, image_size, make_fetcher
from .flatten import SHAPE_BUILDERS, flatten_scene
from .demo import create_demo_scene, generate_random_graphics
from .serialization import scene_from_dict, scene_to_dict

__all__ = [
    # Records
    "GEOMETRY_FOR_TAG",
    "CircleGeometry",
    "DisplayRecord",
    "ImageGeometry",
    "OvalGeometry",
    "Paint",
    "PaintStyle",
    "PathGeometry",
    "PointerEvent",
    "RecordTag",
    "RectGeometry",
    "color_to_hex",
    "hex_to_rgb",
    # Hit-testing
    "HIT_TESTERS",
    "hit_records",
    "is_point_in_record",
    "pick",
    # Scene graph
    "Circle",
    "Container",
    "Ellipse",
    "Graphics",
    "Node",
    "Polygon",
    "Rectangle",
    "RoundedRectangle",
    "ShapeKind",
    "Sprite",
    # Assets
    "AssetStore",
    "fetch_image_bytes",
    "image_size",
    "make_fetcher",
    # Flattening
    "SHAPE_BUILDERS",
    "flatten_scene",
    # Demo and serialization
    "create_demo_scene",
    "generate_random_graphics",
    "scene_from_dict",
    "scene_to_dict",
]
