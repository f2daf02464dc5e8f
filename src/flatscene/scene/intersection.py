"""Pointer hit-testing against display records.

Hit-testing works on the flattened records alone; the source scene graph is
not consulted. For each record the query point is first mapped into the
record's local space by inverting its world transform, then tested against
the record's untransformed geometry:

    PATH    ray-casting parity test over the polygon vertices
    RECT    inset rectangle plus four corner circles (rounded rectangles)
    OVAL    normalized ellipse equation
    CIRCLE  squared distance to the center
    IMAGE   bounding rectangle (RECT test with radius 0)

Missing geometry fields never raise; the test simply reports a miss.

Example:
    >>> from src.flatscene.scene.intersection import is_point_in_record
    >>> from src.flatscene.scene.records import (
    ...     DisplayRecord, Paint, RecordTag, RectGeometry
    ... )
    >>> rect = DisplayRecord(
    ...     tag=RecordTag.RECT,
    ...     geometry=RectGeometry(50, 50, 50, 50),
    ...     paint=Paint(0x0000FF),
    ... )
    >>> is_point_in_record((60, 60), rect)
    True
    >>> is_point_in_record((10, 10), rect)
    False
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType

from src.flatscene.geometry.transform import Point, inverse_transform_point
from src.flatscene.scene.records import (
    CircleGeometry,
    DisplayRecord,
    ImageGeometry,
    OvalGeometry,
    PathGeometry,
    RecordTag,
    RectGeometry,
    ShapeGeometry,
)


def is_point_in_path(point: tuple[float, float], geometry: PathGeometry) -> bool:
    """Ray-casting point-in-polygon test.

    Walks every edge (i, j), with j the previous vertex, and toggles the
    result each time a horizontal ray from the point crosses the edge.
    """
    path = getattr(geometry, "points", None)
    if not path or len(path) < 4:
        return False

    x, y = point
    inside = False
    j = len(path) - 2
    for i in range(0, len(path) - 1, 2):
        xi, yi = path[i], path[i + 1]
        xj, yj = path[j], path[j + 1]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def is_point_in_rect(
    point: tuple[float, float],
    geometry: RectGeometry | ImageGeometry,
) -> bool:
    """Rectangle and rounded-rectangle containment.

    A point is inside if it lies in the rectangle shrunk by the corner
    radius on every side, or within the radius of one of the four corner
    circle centers. The radius is clamped to half the width and height, as
    the renderer does. A radius of 0 reduces to the plain rectangle test.

    The band along each edge between two corner circles belongs to neither
    region, so with a radius those points are misses.
    """
    if not geometry.width or not geometry.height:
        return False

    x, y = point
    radius = getattr(geometry, "radius", None) or 0.0
    # Corner circles never reach past the rectangle
    radius = max(0.0, min(radius, geometry.width / 2, geometry.height / 2))
    left = geometry.x
    top = geometry.y
    right = geometry.x + geometry.width
    bottom = geometry.y + geometry.height

    if (
        left + radius <= x <= right - radius
        and top + radius <= y <= bottom - radius
    ):
        return True

    corners = (
        (left + radius, top + radius),
        (right - radius, top + radius),
        (left + radius, bottom - radius),
        (right - radius, bottom - radius),
    )
    for cx, cy in corners:
        dx = x - cx
        dy = y - cy
        if dx * dx + dy * dy <= radius * radius:
            return True

    return False


def is_point_in_oval(point: tuple[float, float], geometry: OvalGeometry) -> bool:
    """Normalized ellipse test using the stored radii directly."""
    if not geometry.width or not geometry.height:
        return False

    dx = point[0] - geometry.x
    dy = point[1] - geometry.y
    rx = geometry.width
    ry = geometry.height
    return (dx * dx) / (rx * rx) + (dy * dy) / (ry * ry) <= 1.0


def is_point_in_circle(point: tuple[float, float], geometry: CircleGeometry) -> bool:
    if not geometry.radius:
        return False

    dx = point[0] - geometry.x
    dy = point[1] - geometry.y
    return dx * dx + dy * dy <= geometry.radius * geometry.radius


# One geometric test per record tag
HIT_TESTERS: Mapping[RecordTag, Callable[[tuple[float, float], ShapeGeometry], bool]] = (
    MappingProxyType(
        {
            RecordTag.PATH: is_point_in_path,
            RecordTag.RECT: is_point_in_rect,
            RecordTag.OVAL: is_point_in_oval,
            RecordTag.CIRCLE: is_point_in_circle,
            RecordTag.IMAGE: is_point_in_rect,
        }
    )
)


def to_local_point(point: tuple[float, float], record: DisplayRecord) -> Point:
    """Map a canvas point into the record's local coordinate space."""
    if record.transform is None:
        return Point(float(point[0]), float(point[1]))
    return inverse_transform_point(point, record.transform)


def is_point_in_record(point: tuple[float, float], record: DisplayRecord) -> bool:
    """Determine whether a canvas point lies within a display record.

    Args:
        point: The (x, y) query point in canvas coordinates.
        record: The record to test.

    Returns:
        True if the point is inside the record's shape.

    Raises:
        ValueError: If the record tag has no geometric test.
    """
    tester = HIT_TESTERS.get(record.tag)
    if tester is None:
        raise ValueError(f"No hit test for record tag: {record.tag!r}")
    return bool(tester(to_local_point(point, record), record.geometry))


def hit_records(
    point: tuple[float, float],
    records: Sequence[DisplayRecord],
) -> list[DisplayRecord]:
    """Return every record containing the point, bottom to top."""
    return [record for record in records if is_point_in_record(point, record)]


def pick(
    point: tuple[float, float],
    records: Sequence[DisplayRecord],
) -> DisplayRecord | None:
    """Return the topmost (last drawn) record containing the point."""
    for record in reversed(records):
        if is_point_in_record(point, record):
            return record
    return None
