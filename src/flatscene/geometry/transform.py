"""2D affine transforms stored as flat coefficient arrays.

Display records carry the accumulated world transform of their source node
as a flat, row-major coefficient tuple. Both the 6-element form
``(a, b, c, d, e, f)`` and the full 9-element form
``(a, b, c, d, e, f, g, h, i)`` are accepted; the implied matrix is:

    | a  b  c |
    | d  e  f |
    | g  h  i |      (g, h, i default to 0, 0, 1)

so that a point maps as ``x' = a*x + b*y + c`` and ``y' = d*x + e*y + f``.

Example:
    >>> from src.flatscene.geometry.transform import (
    ...     apply_transform, invert_matrix, parse_transform
    ... )
    >>> m = parse_transform((2, 0, 10, 0, 2, 20))
    >>> apply_transform(m, (1.0, 1.0))
    Point(x=12.0, y=22.0)
    >>> inverse = invert_matrix(m)
    >>> apply_transform(inverse, (12.0, 22.0))
    Point(x=1.0, y=1.0)
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import NamedTuple

import cairo
import numpy as np
import numpy.typing as npt

# Type alias for a flat coefficient array (6 or 9 numbers)
TransformCoefficients = tuple[float, ...]

IDENTITY: TransformCoefficients = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)


class Point(NamedTuple):
    """A point in canvas or local coordinates."""

    x: float
    y: float


def parse_transform(coefficients: Sequence[float]) -> npt.NDArray[np.float64]:
    """Build a 3x3 matrix from a flat 6- or 9-element coefficient array.

    Args:
        coefficients: Row-major coefficients. Six elements describe the first
            two rows; the third row is then ``(0, 0, 1)``.

    Returns:
        A (3, 3) float64 matrix.

    Raises:
        ValueError: If the array does not have 6 or 9 elements.
    """
    values = np.asarray(coefficients, dtype=np.float64).ravel()
    if values.size == 6:
        values = np.concatenate([values, [0.0, 0.0, 1.0]])
    elif values.size != 9:
        raise ValueError(
            f"Transform must have 6 or 9 coefficients, got {values.size}"
        )
    return values.reshape(3, 3)


def normalize_transform(
    coefficients: Sequence[float] | None,
) -> TransformCoefficients | None:
    """Return the coefficients as a 9-element tuple of floats (None stays None)."""
    if coefficients is None:
        return None
    return tuple(float(v) for v in parse_transform(coefficients).ravel())


def invert_matrix(
    matrix: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64] | None:
    """Invert a 3x3 matrix with the adjugate / determinant method.

    Args:
        matrix: The (3, 3) matrix to invert.

    Returns:
        The inverse matrix, or None if the determinant is exactly zero.
    """
    (a, b, c), (d, e, f), (g, h, i) = matrix.tolist()

    x = e * i - h * f
    y = f * g - d * i
    z = d * h - g * e
    det = a * x + b * y + c * z

    if det == 0:
        return None

    adjugate = np.array(
        [
            [x, c * h - b * i, b * f - c * e],
            [y, a * i - c * g, d * c - a * f],
            [z, g * b - a * h, a * e - d * b],
        ],
        dtype=np.float64,
    )
    return adjugate / det


def apply_transform(
    matrix: npt.NDArray[np.float64],
    point: tuple[float, float],
) -> Point:
    """Map a point through the affine part of a 3x3 matrix."""
    (a, b, c), (d, e, f) = matrix[0].tolist(), matrix[1].tolist()
    x, y = point
    return Point(a * x + b * y + c, d * x + e * y + f)


def inverse_transform_point(
    point: tuple[float, float],
    coefficients: Sequence[float],
) -> Point:
    """Map a canvas point into the local space of a transform.

    If the transform is singular, the point is returned untransformed.
    This fallback can produce surprising hits for degenerate transforms
    such as a zero scale.
    """
    inverse = invert_matrix(parse_transform(coefficients))
    if inverse is None:
        return Point(float(point[0]), float(point[1]))
    return apply_transform(inverse, point)


def to_cairo_matrix(coefficients: Sequence[float]) -> cairo.Matrix:
    """Convert row-major coefficients to a cairo.Matrix.

    cairo maps ``x' = xx*x + xy*y + x0`` and ``y' = yx*x + yy*y + y0``;
    the perspective row is ignored.
    """
    (a, b, c), (d, e, f) = parse_transform(coefficients)[:2].tolist()
    return cairo.Matrix(xx=a, yx=d, xy=b, yy=e, x0=c, y0=f)


def local_matrix(
    x: float = 0.0,
    y: float = 0.0,
    rotation: float = 0.0,
    scale_x: float = 1.0,
    scale_y: float = 1.0,
) -> npt.NDArray[np.float64]:
    """Build a translate * rotate * scale matrix for a scene node.

    Args:
        x: Translation along x.
        y: Translation along y.
        rotation: Rotation in radians (clockwise on a y-down canvas).
        scale_x: Scale along the local x axis.
        scale_y: Scale along the local y axis.
    """
    cos_r = math.cos(rotation)
    sin_r = math.sin(rotation)
    return np.array(
        [
            [cos_r * scale_x, -sin_r * scale_y, x],
            [sin_r * scale_x, cos_r * scale_y, y],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )
