"""Geometry module for 2D affine transforms.

Components:
    transform: Flat coefficient parsing, adjugate inversion, point mapping,
        cairo matrix conversion and local transform construction
"""

from src.flatscene.geometry.transform import (
    IDENTITY,
    Point,
    TransformCoefficients,
    apply_transform,
    inverse_transform_point,
    invert_matrix,
    local_matrix,
    normalize_transform,
    parse_transform,
    to_cairo_matrix,
)

__all__ = [
    "IDENTITY",
    "Point",
    "TransformCoefficients",
    "apply_transform",
    "inverse_transform_point",
    "invert_matrix",
    "local_matrix",
    "normalize_transform",
    "parse_transform",
    "to_cairo_matrix",
]
