"""
shapes/canonical.py

Canonical path storage: a path whose bounds are exactly the unit rect
centred at the origin, plus helpers for walking, splitting and serializing
QPainterPath segments.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Tuple

from PyQt6.QtCore import QPointF, QRectF
from PyQt6.QtGui import QPainterPath, QTransform

from models import EmptyPathError, InvalidCanonicalPathError, unit_rect_at_origin

# Used when no tolerance is supplied. Default: 1e-6 canonical units
DEFAULT_TOLERANCE = 1e-6

Segment = Tuple[str, List[QPointF]]


# ----------------------------
# Segment helpers
# ----------------------------

def iter_segments(path: QPainterPath) -> Iterator[Segment]:
    """Yield ``(cmd, points)`` for each segment of a path.

    ``cmd`` is "M", "L" or "C". Curves carry three points: both control
    points followed by the end point.
    """
    i = 0
    count = path.elementCount()
    while i < count:
        e = path.elementAt(i)
        if e.isMoveTo():
            yield "M", [QPointF(e.x, e.y)]
            i += 1
        elif e.isLineTo():
            yield "L", [QPointF(e.x, e.y)]
            i += 1
        elif e.isCurveTo():
            c2 = path.elementAt(i + 1)
            end = path.elementAt(i + 2)
            yield "C", [QPointF(e.x, e.y), QPointF(c2.x, c2.y), QPointF(end.x, end.y)]
            i += 3
        else:
            # Stray curve data element; skip it
            i += 1


def path_from_segments(segments) -> QPainterPath:
    """Build a QPainterPath from ``(cmd, points)`` pairs."""
    path = QPainterPath()
    for cmd, pts in segments:
        if cmd == "M":
            path.moveTo(pts[0])
        elif cmd == "L":
            path.lineTo(pts[0])
        elif cmd == "C":
            path.cubicTo(pts[0], pts[1], pts[2])
        elif cmd == "Z":
            path.closeSubpath()
    return path


def map_path_points(path: QPainterPath, fn: Callable[[QPointF], QPointF]) -> QPainterPath:
    """Return a copy of *path* with every element point (control points too) mapped by *fn*."""
    result = QPainterPath(path)
    for i in range(result.elementCount()):
        e = result.elementAt(i)
        p = fn(QPointF(e.x, e.y))
        result.setElementPositionAt(i, p.x(), p.y())
    return result


def split_subpaths(path: QPainterPath) -> List[QPainterPath]:
    """Split a path into one path per sub-path. A move starts a new sub-path."""
    groups: List[List[Segment]] = []
    for cmd, pts in iter_segments(path):
        if cmd == "M" or not groups:
            groups.append([])
        groups[-1].append((cmd, pts))
    result = []
    for group in groups:
        sub = path_from_segments(group)
        if not sub.isEmpty():
            result.append(sub)
    return result


def segments_to_records(path: QPainterPath) -> List[Dict[str, Any]]:
    """Convert a path to a list of JSON-compatible node dicts.

    Values are not rounded so that records round-trip exactly.
    """
    records = []
    for cmd, pts in iter_segments(path):
        if cmd == "C":
            c1, c2, end = pts
            records.append({
                "cmd": "C",
                "c1x": c1.x(), "c1y": c1.y(),
                "c2x": c2.x(), "c2y": c2.y(),
                "x": end.x(), "y": end.y(),
            })
        else:
            records.append({"cmd": cmd, "x": pts[0].x(), "y": pts[0].y()})
    return records


def segments_from_records(records) -> QPainterPath:
    """Build a path from node dicts produced by ``segments_to_records``.

    A "Z" node closes the current sub-path.
    """
    segments = []
    for node in records:
        cmd = node.get("cmd", "L")
        if cmd == "C":
            segments.append(("C", [
                QPointF(float(node["c1x"]), float(node["c1y"])),
                QPointF(float(node["c2x"]), float(node["c2y"])),
                QPointF(float(node["x"]), float(node["y"])),
            ]))
        elif cmd == "Z":
            segments.append(("Z", []))
        else:
            segments.append((cmd, [QPointF(float(node["x"]), float(node["y"]))]))
    return path_from_segments(segments)


# ----------------------------
# Canonical form
# ----------------------------

def is_canonical(path: QPainterPath, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """Check whether a path's bounds are the unit rect centred at the origin."""
    if path.isEmpty():
        return False
    r = path.boundingRect()
    c = r.center()
    return (abs(r.width() - 1.0) <= tolerance
            and abs(r.height() - 1.0) <= tolerance
            and abs(c.x()) <= tolerance
            and abs(c.y()) <= tolerance)


def normalizing_transform(bounds: QRectF) -> QTransform:
    """Return the transform that maps *bounds* onto the unit rect at the origin.

    Raises:
        InvalidCanonicalPathError: if the bounds have zero width or height.
    """
    if bounds.width() == 0.0 or bounds.height() == 0.0:
        raise InvalidCanonicalPathError(
            f"Path bounds {bounds.width()}x{bounds.height()} cannot be normalized"
        )
    c = bounds.center()
    return QTransform().scale(1.0 / bounds.width(), 1.0 / bounds.height()).translate(-c.x(), -c.y())


class CanonicalPath:
    """A path stored in unit space, never modified once constructed.

    Every accessor hands out a copy, so holders cannot reshape the stored
    path behind the owning shape's back. Reshaping means building a new
    CanonicalPath.
    """

    def __init__(self, path: QPainterPath, tolerance: float = DEFAULT_TOLERANCE):
        if path.isEmpty():
            raise EmptyPathError("A canonical path must have at least one segment")
        if not is_canonical(path, tolerance):
            r = path.boundingRect()
            raise InvalidCanonicalPathError(
                f"Path bounds ({r.x()}, {r.y()}, {r.width()}, {r.height()}) "
                f"are not the unit rect at the origin"
            )
        self._path = QPainterPath(path)

    @classmethod
    def unit_rect(cls) -> "CanonicalPath":
        """The canonical rectangle, the path of a newly created shape."""
        path = QPainterPath()
        path.addRect(unit_rect_at_origin())
        return cls(path)

    @classmethod
    def normalized(cls, path: QPainterPath, tolerance: float = DEFAULT_TOLERANCE) -> Tuple["CanonicalPath", QRectF]:
        """Scale and centre an arbitrary path into canonical form.

        Returns:
            The canonical path and the bounds of the input path.

        Raises:
            EmptyPathError: if the path has no segments.
            InvalidCanonicalPathError: if the path has zero width or height.
        """
        if path.isEmpty():
            raise EmptyPathError("Cannot normalize an empty path")
        bounds = path.boundingRect()
        xform = normalizing_transform(bounds)
        return cls(xform.map(path), tolerance), bounds

    @classmethod
    def from_records(cls, records, tolerance: float = DEFAULT_TOLERANCE) -> "CanonicalPath":
        return cls(segments_from_records(records), tolerance)

    def path(self) -> QPainterPath:
        """Return a copy of the stored path."""
        return QPainterPath(self._path)

    def mapped(self, transform: QTransform) -> QPainterPath:
        """Return the stored path mapped by *transform*."""
        return transform.map(self._path)

    def subpaths(self) -> List[QPainterPath]:
        return split_subpaths(self._path)

    def subpath_count(self) -> int:
        return len(self.subpaths())

    def to_records(self) -> List[Dict[str, Any]]:
        return segments_to_records(self._path)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CanonicalPath):
            return NotImplemented
        return self.to_records() == other.to_records()

    def __repr__(self) -> str:
        return f"CanonicalPath(elements={self._path.elementCount()}, subpaths={self.subpath_count()})"
