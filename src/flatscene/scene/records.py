"""Display records: the flattened, engine-agnostic drawable primitives.

A DisplayRecord is produced for every drawable leaf of a scene graph and is
consumed read-only by the renderer and the hit tester. Each record pairs a
RecordTag with exactly one geometry variant:

    PATH   -> PathGeometry    (flat x,y coordinate list)
    RECT   -> RectGeometry    (rectangle, or rounded rectangle with radius)
    OVAL   -> OvalGeometry    (center plus radii)
    CIRCLE -> CircleGeometry  (center plus radius)
    IMAGE  -> ImageGeometry   (local origin plus local size)

Every non-image record carries exactly one Paint. Image records carry the
raw encoded image bytes instead.

Example:
    >>> from src.flatscene.scene.records import (
    ...     DisplayRecord, Paint, PaintStyle, RecordTag, RectGeometry, color_to_hex
    ... )
    >>> record = DisplayRecord(
    ...     tag=RecordTag.RECT,
    ...     geometry=RectGeometry(x=50, y=50, width=50, height=50),
    ...     paint=Paint(color=0x0000FF, style=PaintStyle.FILL),
    ... )
    >>> color_to_hex(record.paint.color)
    '#0000ff'
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Union

from src.flatscene.geometry.transform import TransformCoefficients, normalize_transform

MAX_COLOR = 0xFFFFFF


class RecordTag(IntEnum):
    """Kind of drawable primitive a record describes."""

    PATH = 0
    RECT = 1
    OVAL = 2
    CIRCLE = 3
    IMAGE = 4


class PaintStyle(str, Enum):
    """Whether a paint fills the shape interior or strokes its outline."""

    FILL = "fill"
    STROKE = "stroke"


class PointerEvent(str, Enum):
    """Pointer events a record can respond to."""

    POINTER_DOWN = "pointerdown"
    POINTER_UP = "pointerup"


# Handler signature: handler(event, point)
PointerHandler = Callable[..., Any]


def color_to_hex(color: int) -> str:
    """Format a 24-bit RGB integer as a ``#rrggbb`` string."""
    return "#" + format(color, "x").zfill(6)


def hex_to_rgb(value: str) -> tuple[float, float, float]:
    """Parse a ``#rrggbb`` string into (r, g, b) components in [0, 1].

    Raises:
        ValueError: If the string is not a 6-digit hex color.
    """
    digits = value.lstrip("#")
    if len(digits) != 6:
        raise ValueError(f"Expected a #rrggbb color, got {value!r}")
    number = int(digits, 16)
    return (
        ((number >> 16) & 0xFF) / 255.0,
        ((number >> 8) & 0xFF) / 255.0,
        (number & 0xFF) / 255.0,
    )


@dataclass(frozen=True)
class Paint:
    """Fill or stroke style for a vector primitive.

    Attributes:
        color: 24-bit RGB color as an integer (0x000000 to 0xFFFFFF).
        style: FILL or STROKE.
        width: Stroke width. Only meaningful for STROKE paints.
    """

    color: int
    style: PaintStyle = PaintStyle.FILL
    width: float = 0.0

    def __post_init__(self) -> None:
        if not 0 <= self.color <= MAX_COLOR:
            raise ValueError(
                f"Color must be a 24-bit RGB value, got {self.color:#x}"
            )
        if self.width < 0:
            raise ValueError(f"Stroke width must be non-negative, got {self.width}")
        object.__setattr__(self, "style", PaintStyle(self.style))

    @property
    def hex_color(self) -> str:
        """The color as a ``#rrggbb`` string."""
        return color_to_hex(self.color)


@dataclass(frozen=True)
class PathGeometry:
    """Polyline or polygon given as a flat sequence of x,y coordinates."""

    points: tuple[float, ...]

    def __post_init__(self) -> None:
        points = tuple(float(v) for v in self.points)
        if len(points) < 4 or len(points) % 2:
            raise ValueError(
                "Path needs an even number of coordinates and at least two "
                f"points, got {len(points)} coordinates"
            )
        object.__setattr__(self, "points", points)

    @property
    def point_count(self) -> int:
        return len(self.points) // 2

    def pairs(self) -> list[tuple[float, float]]:
        """The coordinates grouped into (x, y) pairs."""
        return list(zip(self.points[0::2], self.points[1::2]))


@dataclass(frozen=True)
class RectGeometry:
    """Axis-aligned rectangle; a radius makes it a rounded rectangle."""

    x: float
    y: float
    width: float | None
    height: float | None
    radius: float | None = None


@dataclass(frozen=True)
class OvalGeometry:
    """Ellipse centered on (x, y) with radii (width, height).

    The radii are stored exactly as the source ellipse gives them; the
    renderer doubles them to build the bounding rectangle.
    """

    x: float
    y: float
    width: float | None
    height: float | None


@dataclass(frozen=True)
class CircleGeometry:
    x: float
    y: float
    radius: float | None


@dataclass(frozen=True)
class ImageGeometry:
    """Local origin and local size of a bitmap."""

    x: float
    y: float
    width: float | None
    height: float | None


ShapeGeometry = Union[
    PathGeometry, RectGeometry, OvalGeometry, CircleGeometry, ImageGeometry
]

# Geometry variant expected for each tag
GEOMETRY_FOR_TAG: Mapping[RecordTag, type] = MappingProxyType(
    {
        RecordTag.PATH: PathGeometry,
        RecordTag.RECT: RectGeometry,
        RecordTag.OVAL: OvalGeometry,
        RecordTag.CIRCLE: CircleGeometry,
        RecordTag.IMAGE: ImageGeometry,
    }
)


@dataclass(frozen=True)
class DisplayRecord:
    """One drawable primitive in paint order.

    Attributes:
        tag: The primitive kind.
        geometry: The geometry variant matching the tag.
        transform: Accumulated world transform as flat row-major
            coefficients (normalized to 9 elements), or None for identity.
        paint: Fill/stroke paint. Required for every tag except IMAGE.
        image_bytes: Raw encoded bitmap. Required for IMAGE only.
        events: Pointer handlers copied from the source node.
    """

    tag: RecordTag
    geometry: ShapeGeometry
    transform: TransformCoefficients | None = None
    paint: Paint | None = None
    image_bytes: bytes | None = None
    events: Mapping[PointerEvent, PointerHandler] = field(
        default_factory=dict, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        tag = RecordTag(self.tag)
        object.__setattr__(self, "tag", tag)

        expected = GEOMETRY_FOR_TAG[tag]
        if not isinstance(self.geometry, expected):
            raise ValueError(
                f"{tag.name} record needs {expected.__name__}, "
                f"got {type(self.geometry).__name__}"
            )

        if tag == RecordTag.IMAGE:
            if self.paint is not None:
                raise ValueError("IMAGE records take no paint")
            if self.image_bytes is None:
                raise ValueError("IMAGE records need image_bytes")
        elif self.paint is None:
            raise ValueError(f"{tag.name} records need a paint")

        object.__setattr__(self, "transform", normalize_transform(self.transform))
        object.__setattr__(
            self,
            "events",
            MappingProxyType({PointerEvent(k): v for k, v in self.events.items()}),
        )

    def handler_for(self, event: PointerEvent | str) -> PointerHandler | None:
        """Return the handler registered for a pointer event, if any."""
        return self.events.get(PointerEvent(event))
