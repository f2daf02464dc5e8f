"""JSON-compatible scene descriptions.

scene_to_dict() turns a scene graph into nested dictionaries and lists of
plain numbers and strings; scene_from_dict() rebuilds the graph. Pointer
handlers are code and are not serialized.

Node dictionaries look like::

    {
        "type": "graphics",
        "x": 100, "y": 30, "scale": [1.5, 1.7], "angle": 30,
        "shapes": [
            {
                "kind": "rounded_rectangle",
                "x": 5, "y": 7, "width": 50, "height": 50, "radius": 10,
                "fill": {"color": "#ff0000", "visible": true},
                "line": {"width": 0, "color": "#000000"}
            }
        ],
        "children": []
    }

Example:
    >>> import json
    >>> from src.flatscene.scene.demo import create_demo_scene
    >>> from src.flatscene.scene.serialization import scene_from_dict, scene_to_dict
    >>> text = json.dumps(scene_to_dict(create_demo_scene()))
    >>> stage = scene_from_dict(json.loads(text))
"""

from __future__ import annotations

from dataclasses import fields
from typing import Any

from src.flatscene.scene.graph import (
    Circle,
    Container,
    Ellipse,
    FillStyle,
    Graphics,
    GraphicsData,
    LineStyle,
    Node,
    Polygon,
    Rectangle,
    RoundedRectangle,
    Shape,
    Sprite,
    parse_color,
)
from src.flatscene.scene.records import color_to_hex

# Shape class for each serialized kind name
SHAPE_TYPES: dict[str, type] = {
    "polygon": Polygon,
    "rectangle": Rectangle,
    "circle": Circle,
    "ellipse": Ellipse,
    "rounded_rectangle": RoundedRectangle,
}

NODE_TYPES: dict[str, type[Node]] = {
    "container": Container,
    "graphics": Graphics,
    "sprite": Sprite,
}


# =============================================================================
# Export
# =============================================================================


def shape_to_dict(shape: Shape) -> dict[str, Any]:
    data: dict[str, Any] = {"kind": shape.kind.name.lower()}
    for f in fields(shape):
        value = getattr(shape, f.name)
        data[f.name] = list(value) if isinstance(value, list) else value
    return data


def _graphics_data_to_dict(item: GraphicsData) -> dict[str, Any]:
    data = shape_to_dict(item.shape)
    data["fill"] = {
        "color": color_to_hex(item.fill_style.color),
        "visible": item.fill_style.visible,
    }
    data["line"] = {
        "width": item.line_style.width,
        "color": color_to_hex(item.line_style.color),
    }
    return data


def scene_to_dict(node: Node) -> dict[str, Any]:
    """Export a node and its subtree to a dictionary.

    Raises:
        ValueError: If the subtree contains a node type with no serialized
            form.
    """
    type_name = next(
        (name for name, cls in NODE_TYPES.items() if type(node) is cls), None
    )
    if type_name is None:
        raise ValueError(f"Cannot serialize node type: {type(node).__name__}")

    data: dict[str, Any] = {
        "type": type_name,
        "x": node.x,
        "y": node.y,
        "scale": [node.scale_x, node.scale_y],
        "angle": node.angle,
    }
    if isinstance(node, Graphics):
        data["shapes"] = [_graphics_data_to_dict(item) for item in node.graphics_data]
    elif isinstance(node, Sprite):
        data["image_id"] = node.image_id
        data["width"] = node.width
        data["height"] = node.height
        data["anchor"] = list(node.anchor)

    data["children"] = [scene_to_dict(child) for child in node.children]
    return data


# =============================================================================
# Import
# =============================================================================


def shape_from_dict(data: dict[str, Any]) -> Shape:
    """Build a shape descriptor from its dictionary form.

    Raises:
        ValueError: If the shape kind is unknown.
    """
    kind = str(data.get("kind", "")).lower()
    shape_type = SHAPE_TYPES.get(kind)
    if shape_type is None:
        raise ValueError(f"Unknown shape kind: {kind!r}")

    params = {f.name: data[f.name] for f in fields(shape_type) if f.name in data}
    if "points" in params:
        params["points"] = [float(v) for v in params["points"]]
    return shape_type(**params)


def _load_graphics_data(graphics: Graphics, data: dict[str, Any]) -> None:
    fill = data.get("fill", {})
    line = data.get("line", {})
    graphics.graphics_data.append(
        GraphicsData(
            shape=shape_from_dict(data),
            fill_style=FillStyle(
                color=parse_color(fill.get("color", 0xFFFFFF)),
                visible=bool(fill.get("visible", False)),
            ),
            line_style=LineStyle(
                width=float(line.get("width", 0.0)),
                color=parse_color(line.get("color", 0x000000)),
            ),
        )
    )


def scene_from_dict(data: dict[str, Any]) -> Node:
    """Rebuild a node and its subtree from a dictionary.

    Raises:
        ValueError: If a node type or shape kind is unknown.
    """
    type_name = str(data.get("type", "")).lower()
    node_type = NODE_TYPES.get(type_name)
    if node_type is None:
        raise ValueError(f"Unknown node type: {type_name!r}")

    scale_x, scale_y = data.get("scale", [1.0, 1.0])
    if node_type is Sprite:
        node: Node = Sprite(
            data.get("image_id"),
            width=data.get("width"),
            height=data.get("height"),
            anchor=tuple(data.get("anchor", (0.0, 0.0))),
        )
    else:
        node = node_type()

    node.set_position(data.get("x", 0.0), data.get("y", 0.0))
    node.set_scale(scale_x, scale_y)
    node.angle = data.get("angle", 0.0)

    if isinstance(node, Graphics):
        for shape_data in data.get("shapes", []):
            _load_graphics_data(node, shape_data)

    children = [scene_from_dict(child) for child in data.get("children", [])]
    if children:
        node.add_child(*children)
    return node
