"""
shapes/transform.py

Builds the affine transforms that place a canonical path in world space.
"""

from __future__ import annotations

import math
from typing import Optional

from PyQt6.QtCore import QPointF
from PyQt6.QtGui import QTransform

from models import DegenerateTransformError, TransformParameters


class TransformBuilder:
    """Forward and inverse transforms for a set of TransformParameters.

    The forward transform applies, in order: offset translation, scale,
    rotation, translation to the location. The inverse applies the inverse
    steps in the reverse order. It is composed from those steps, not
    obtained by inverting the forward matrix.
    """

    def __init__(self, params: TransformParameters):
        self.params = params

    def transform(self) -> QTransform:
        """Return the transform converting the canonical path to its final form.

        Raises:
            DegenerateTransformError: if either scale component is zero.
        """
        p = self.params
        if p.is_degenerate():
            raise DegenerateTransformError(
                f"Scale {p.scale.width()}x{p.scale.height()} has no transform"
            )
        xform = QTransform()
        xform.translate(p.location.x(), p.location.y())
        xform.rotateRadians(p.angle)
        xform.scale(p.scale.width(), p.scale.height())
        xform.translate(-p.offset.x(), -p.offset.y())
        return xform

    def inverse_transform(self) -> QTransform:
        """Return the transform converting a final path back to canonical form.

        Raises:
            DegenerateTransformError: if either scale component is zero.
        """
        p = self.params
        if p.is_degenerate():
            raise DegenerateTransformError(
                f"Scale {p.scale.width()}x{p.scale.height()} has no inverse transform"
            )
        xform = QTransform()
        xform.translate(p.offset.x(), p.offset.y())
        xform.scale(1.0 / p.scale.width(), 1.0 / p.scale.height())
        xform.rotateRadians(-p.angle)
        xform.translate(-p.location.x(), -p.location.y())
        return xform

    def transform_including_parent(self, parent: Optional[QTransform] = None) -> QTransform:
        """Return the forward transform followed by an ancestor's transform."""
        if parent is None:
            return self.transform()
        return self.transform() * parent

    def map_point(self, point: QPointF) -> QPointF:
        return self.transform().map(point)

    def unmap_point(self, point: QPointF) -> QPointF:
        return self.inverse_transform().map(point)


def rotate_vector(dx: float, dy: float, angle: float):
    """Rotate the vector (dx, dy) by *angle* radians."""
    c = math.cos(angle)
    s = math.sin(angle)
    return dx * c - dy * s, dx * s + dy * c
