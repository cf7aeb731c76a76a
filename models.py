"""
models.py

Data models and constants for the shapekit shape engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from PyQt6.QtCore import QPointF, QRectF, QSizeF


# ----------------------------
# Error types
# ----------------------------

class ShapeGeometryError(ValueError):
    """Base class for geometry contract violations raised by the engine."""


class DegenerateTransformError(ShapeGeometryError):
    """The shape has a zero scale component, so no inverse transform exists."""


class NoValidTransformError(DegenerateTransformError):
    """A path cannot be adopted because the current transform has no inverse."""


class InvalidCanonicalPathError(ShapeGeometryError):
    """A supposedly canonical path does not have unit bounds centred at the origin."""


class EmptyPathError(ShapeGeometryError):
    """An operation was given a path with no segments."""


# ----------------------------
# Knob part codes
# ----------------------------

class Knob:
    """Part codes for the knobs of a shape.

    Codes are single bits so that masks can be built by OR-ing them
    together. Don't change these numbers, persisted knob masks rely on them.
    ``NONE`` means no part was hit, ``ENTIRE_OBJECT`` means the body of the
    shape was hit but no knob.
    """
    NONE = 0
    ENTIRE_OBJECT = -1

    LEFT = 1 << 0
    TOP = 1 << 1
    RIGHT = 1 << 2
    BOTTOM = 1 << 3
    TOP_LEFT = 1 << 4
    TOP_RIGHT = 1 << 5
    BOTTOM_LEFT = 1 << 6
    BOTTOM_RIGHT = 1 << 7
    CENTRE = 1 << 8
    ORIGIN_TARGET = 1 << 9
    ROTATION = 1 << 10
    TOP_LEFT_DISTORT = 1 << 11
    TOP_RIGHT_DISTORT = 1 << 12
    BOTTOM_RIGHT_DISTORT = 1 << 13
    BOTTOM_LEFT_DISTORT = 1 << 14

    # First part code handed out to custom hotspots
    HOTSPOT_BASE = 1 << 16


# Knob masks
ALL_KNOBS = 0xFFFFFFFF
ALL_SIZE_KNOBS = ALL_KNOBS & ~(Knob.ROTATION | Knob.ORIGIN_TARGET | Knob.CENTRE)
HORIZONTAL_SIZING_KNOBS = (Knob.LEFT | Knob.RIGHT | Knob.TOP_LEFT | Knob.TOP_RIGHT
                           | Knob.BOTTOM_LEFT | Knob.BOTTOM_RIGHT)
VERTICAL_SIZING_KNOBS = (Knob.TOP | Knob.BOTTOM | Knob.TOP_LEFT | Knob.TOP_RIGHT
                         | Knob.BOTTOM_LEFT | Knob.BOTTOM_RIGHT)
ALL_LEFT_HANDLES = Knob.LEFT | Knob.TOP_LEFT | Knob.BOTTOM_LEFT
ALL_RIGHT_HANDLES = Knob.RIGHT | Knob.TOP_RIGHT | Knob.BOTTOM_RIGHT
ALL_TOP_HANDLES = Knob.TOP | Knob.TOP_LEFT | Knob.TOP_RIGHT
ALL_BOTTOM_HANDLES = Knob.BOTTOM | Knob.BOTTOM_LEFT | Knob.BOTTOM_RIGHT
ALL_CORNER_HANDLES = Knob.TOP_LEFT | Knob.TOP_RIGHT | Knob.BOTTOM_LEFT | Knob.BOTTOM_RIGHT
NWSE_CORNERS = Knob.TOP_LEFT | Knob.BOTTOM_RIGHT
NESW_CORNERS = Knob.BOTTOM_LEFT | Knob.TOP_RIGHT
EW_HANDLES = Knob.LEFT | Knob.RIGHT
NS_HANDLES = Knob.TOP | Knob.BOTTOM
ALL_DISTORT_KNOBS = (Knob.TOP_LEFT_DISTORT | Knob.TOP_RIGHT_DISTORT
                     | Knob.BOTTOM_RIGHT_DISTORT | Knob.BOTTOM_LEFT_DISTORT)

# Knobs that make up the standard (non-distorting) handle set
STANDARD_KNOBS = (ALL_CORNER_HANDLES | EW_HANDLES | NS_HANDLES
                  | Knob.CENTRE | Knob.ORIGIN_TARGET | Knob.ROTATION)


# ----------------------------
# Operation modes
# ----------------------------

class TransformOperation:
    """Editing disciplines for a shape's knobs."""
    STANDARD = 0
    FREE_DISTORT = 1
    HORIZONTAL_SHEAR = 2
    VERTICAL_SHEAR = 3
    PERSPECTIVE = 4

    ALL = (STANDARD, FREE_DISTORT, HORIZONTAL_SHEAR, VERTICAL_SHEAR, PERSPECTIVE)
    DISTORTING = (FREE_DISTORT, HORIZONTAL_SHEAR, VERTICAL_SHEAR, PERSPECTIVE)

    @classmethod
    def is_distorting(cls, mode: int) -> bool:
        return mode in cls.DISTORTING


# ----------------------------
# Canonical space
# ----------------------------

def unit_rect_at_origin() -> QRectF:
    """Return the unit rect centred at the origin.

    This rect is the bounds of every canonical path stored by a shape.
    """
    return QRectF(-0.5, -0.5, 1.0, 1.0)


# ----------------------------
# Transform parameters
# ----------------------------

@dataclass(frozen=True)
class TransformParameters:
    """Placement of a canonical path in world space.

    Attributes:
        location: World position of the shape's datum.
        scale: Width and height factors. Negative values represent flips.
        angle: Rotation in radians about ``location``.
        offset: Canonical-space position of the datum, (0, 0) being the centre.
    """
    location: QPointF = field(default_factory=QPointF)
    scale: QSizeF = field(default_factory=lambda: QSizeF(1.0, 1.0))
    angle: float = 0.0
    offset: QPointF = field(default_factory=QPointF)

    def is_degenerate(self) -> bool:
        """True when either scale component is zero."""
        return self.scale.width() == 0.0 or self.scale.height() == 0.0

    def with_location(self, location: QPointF) -> "TransformParameters":
        return replace(self, location=QPointF(location))

    def with_scale(self, width: float, height: float) -> "TransformParameters":
        return replace(self, scale=QSizeF(width, height))

    def with_angle(self, angle: float) -> "TransformParameters":
        return replace(self, angle=float(angle))

    def with_offset(self, offset: QPointF) -> "TransformParameters":
        return replace(self, offset=QPointF(offset))

    def to_dict(self):
        """Serialize to a plain dict (unrounded, for exact round-trips)."""
        return {
            "x": self.location.x(),
            "y": self.location.y(),
            "w": self.scale.width(),
            "h": self.scale.height(),
            "angle": self.angle,
            "offset_x": self.offset.x(),
            "offset_y": self.offset.y(),
        }

    @classmethod
    def from_dict(cls, d) -> "TransformParameters":
        """Create parameters from a dict produced by ``to_dict``.

        Missing keys take the defaults of a unit, unrotated shape at the origin.
        """
        return cls(
            location=QPointF(float(d.get("x", 0.0)), float(d.get("y", 0.0))),
            scale=QSizeF(float(d.get("w", 1.0)), float(d.get("h", 1.0))),
            angle=float(d.get("angle", 0.0)),
            offset=QPointF(float(d.get("offset_x", 0.0)), float(d.get("offset_y", 0.0))),
        )
