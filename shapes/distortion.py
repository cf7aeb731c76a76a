"""
shapes/distortion.py

Four-corner distortion envelope applied to canonical points before the
shape's standard transform.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from PyQt6.QtCore import QPointF
from PyQt6.QtGui import QPainterPath

from models import Knob, TransformOperation
from shapes.canonical import map_path_points
from debug_trace import trace

# Corner order used throughout: top-left, top-right, bottom-right, bottom-left
CORNER_KNOBS = (
    Knob.TOP_LEFT_DISTORT,
    Knob.TOP_RIGHT_DISTORT,
    Knob.BOTTOM_RIGHT_DISTORT,
    Knob.BOTTOM_LEFT_DISTORT,
)

# Corner sharing the same horizontal edge (moves with it in horizontal shear)
_HORIZONTAL_PARTNER = {0: 1, 1: 0, 2: 3, 3: 2}
# Corner sharing the same vertical side (moves with it in vertical shear)
_VERTICAL_PARTNER = {0: 3, 3: 0, 1: 2, 2: 1}

# Below this the quad is treated as degenerate for a projective map
_DEGENERATE_EPSILON = 1e-12


def _identity_corners() -> Tuple[QPointF, QPointF, QPointF, QPointF]:
    return (QPointF(-0.5, -0.5), QPointF(0.5, -0.5), QPointF(0.5, 0.5), QPointF(-0.5, 0.5))


def corner_index(code: int) -> int:
    """Return the envelope index (0-3) of a distortion knob part code."""
    try:
        return CORNER_KNOBS.index(code)
    except ValueError:
        raise ValueError(f"Part code {code} is not a distortion corner") from None


@dataclass(frozen=True)
class DistortionModel:
    """Immutable four-corner envelope.

    The corners are canonical-space images of the unit rect corners. Free
    distort and both shears use a bilinear map of the unit square onto the
    envelope. Perspective uses a projective map, so straight lines stay
    straight.
    """
    corners: Tuple[QPointF, QPointF, QPointF, QPointF] = None
    mode: int = TransformOperation.FREE_DISTORT

    def __post_init__(self):
        if self.corners is None:
            object.__setattr__(self, "corners", _identity_corners())
        elif len(self.corners) != 4:
            raise ValueError("A distortion envelope needs exactly four corners")
        else:
            object.__setattr__(self, "corners", tuple(QPointF(c) for c in self.corners))

    @classmethod
    def identity(cls, mode: int = TransformOperation.FREE_DISTORT) -> "DistortionModel":
        return cls(_identity_corners(), mode)

    # ---- Queries ----

    def corner(self, code: int) -> QPointF:
        return QPointF(self.corners[corner_index(code)])

    def is_identity(self, tolerance: float = 1e-12) -> bool:
        for c, ref in zip(self.corners, _identity_corners()):
            if abs(c.x() - ref.x()) > tolerance or abs(c.y() - ref.y()) > tolerance:
                return False
        return True

    # ---- Mapping ----

    def apply(self, point: QPointF) -> QPointF:
        """Map a canonical point through the envelope."""
        u = point.x() + 0.5
        v = point.y() + 0.5
        if self.mode == TransformOperation.PERSPECTIVE:
            mapped = self._projective(u, v)
            if mapped is not None:
                return mapped
        return self._bilinear(u, v)

    def map_path(self, path: QPainterPath) -> QPainterPath:
        """Map every element point of a canonical path, control points included."""
        return map_path_points(path, self.apply)

    def _bilinear(self, u: float, v: float) -> QPointF:
        tl, tr, br, bl = self.corners
        a = (1.0 - u) * (1.0 - v)
        b = u * (1.0 - v)
        c = u * v
        d = (1.0 - u) * v
        return QPointF(
            a * tl.x() + b * tr.x() + c * br.x() + d * bl.x(),
            a * tl.y() + b * tr.y() + c * br.y() + d * bl.y(),
        )

    def _projective(self, u: float, v: float) -> Optional[QPointF]:
        """Square-to-quad homography. Returns None for a degenerate quad."""
        coeffs = self._homography()
        if coeffs is None:
            return None
        a, b, c, d, e, f, g, h = coeffs
        w = g * u + h * v + 1.0
        if abs(w) < _DEGENERATE_EPSILON:
            return None
        return QPointF((a * u + b * v + c) / w, (d * u + e * v + f) / w)

    def _homography(self):
        (x0, y0), (x1, y1), (x2, y2), (x3, y3) = ((p.x(), p.y()) for p in self.corners)
        sx = x0 - x1 + x2 - x3
        sy = y0 - y1 + y2 - y3
        if abs(sx) < _DEGENERATE_EPSILON and abs(sy) < _DEGENERATE_EPSILON:
            g = h = 0.0
        else:
            dx1, dx2 = x1 - x2, x3 - x2
            dy1, dy2 = y1 - y2, y3 - y2
            den = dx1 * dy2 - dx2 * dy1
            if abs(den) < _DEGENERATE_EPSILON:
                return None
            g = (sx * dy2 - dx2 * sy) / den
            h = (dx1 * sy - sx * dy1) / den
        return (
            x1 - x0 + g * x1, x3 - x0 + h * x3, x0,
            y1 - y0 + g * y1, y3 - y0 + h * y3, y0,
            g, h,
        )

    # ---- Editing ----

    def with_mode(self, mode: int) -> "DistortionModel":
        return replace(self, mode=mode)

    def with_corner_moved(self, code: int, point: QPointF) -> "DistortionModel":
        """Return a new envelope with a corner dragged to *point* (canonical space).

        Free distort and perspective move only that corner. Horizontal shear
        slides the corner's whole top or bottom edge sideways, vertical shear
        slides its whole left or right side up or down. The opposite edge stays
        put, so a shear keeps the envelope a parallelogram.
        """
        idx = corner_index(code)
        corners = [QPointF(c) for c in self.corners]
        if self.mode == TransformOperation.HORIZONTAL_SHEAR:
            dx = point.x() - corners[idx].x()
            for i in (idx, _HORIZONTAL_PARTNER[idx]):
                corners[i] = QPointF(corners[i].x() + dx, corners[i].y())
        elif self.mode == TransformOperation.VERTICAL_SHEAR:
            dy = point.y() - corners[idx].y()
            for i in (idx, _VERTICAL_PARTNER[idx]):
                corners[i] = QPointF(corners[i].x(), corners[i].y() + dy)
        else:
            corners[idx] = QPointF(point)
        trace(f"distortion corner {idx} -> ({point.x():.4f}, {point.y():.4f}) mode={self.mode}", "DISTORT")
        return DistortionModel(tuple(corners), self.mode)

    # ---- Persistence ----

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "corners": [[c.x(), c.y()] for c in self.corners],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DistortionModel":
        corners = tuple(QPointF(float(x), float(y)) for x, y in d["corners"])
        return cls(corners, int(d.get("mode", TransformOperation.FREE_DISTORT)))

    def __eq__(self, other) -> bool:
        if not isinstance(other, DistortionModel):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash((self.mode, tuple((c.x(), c.y()) for c in self.corners)))
