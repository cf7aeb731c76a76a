"""
shapes/knobs.py

Knob geometry and drag handling.

HandleController turns a knob part code plus a proposed drag point into new
TransformParameters (or a new distortion envelope). It keeps no state of its
own: the drag anchor recorded at the start of a drag is returned to the
caller and passed back in on every move.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from PyQt6.QtCore import QPointF, QSizeF

from models import (
    ALL_CORNER_HANDLES,
    ALL_DISTORT_KNOBS,
    HORIZONTAL_SIZING_KNOBS,
    STANDARD_KNOBS,
    VERTICAL_SIZING_KNOBS,
    Knob,
    TransformOperation,
    TransformParameters,
)
from shapes.config import HandleAppearanceConfig, default_config
from shapes.distortion import DistortionModel
from shapes.transform import TransformBuilder, rotate_vector
from debug_trace import trace


# Unit-rect positions of the fixed knobs (y grows downward, so top is -0.5)
_UNIT_POINTS = {
    Knob.LEFT: (-0.5, 0.0),
    Knob.TOP: (0.0, -0.5),
    Knob.RIGHT: (0.5, 0.0),
    Knob.BOTTOM: (0.0, 0.5),
    Knob.TOP_LEFT: (-0.5, -0.5),
    Knob.TOP_RIGHT: (0.5, -0.5),
    Knob.BOTTOM_LEFT: (-0.5, 0.5),
    Knob.BOTTOM_RIGHT: (0.5, 0.5),
    Knob.CENTRE: (0.0, 0.0),
}

_OPPOSITE = {
    Knob.LEFT: Knob.RIGHT,
    Knob.RIGHT: Knob.LEFT,
    Knob.TOP: Knob.BOTTOM,
    Knob.BOTTOM: Knob.TOP,
    Knob.TOP_LEFT: Knob.BOTTOM_RIGHT,
    Knob.BOTTOM_RIGHT: Knob.TOP_LEFT,
    Knob.TOP_RIGHT: Knob.BOTTOM_LEFT,
    Knob.BOTTOM_LEFT: Knob.TOP_RIGHT,
}

_TWO_PI = 2.0 * math.pi


def is_size_knob(code: int) -> bool:
    """True for the eight edge and corner knobs."""
    return code in _OPPOSITE


def is_distortion_knob(code: int) -> bool:
    return code > 0 and (code & ALL_DISTORT_KNOBS) == code


def opposite_partcode(code: int) -> int:
    """Return the knob diagonally or directly opposite *code*.

    Knobs without an opposite (centre, origin, rotation, distortion) map to
    themselves.
    """
    return _OPPOSITE.get(code, code)


def keep_still_with_offset(params: TransformParameters, offset: QPointF) -> TransformParameters:
    """Move the datum to *offset* and shift location so the shape does not move."""
    location = TransformBuilder(params).map_point(offset)
    return TransformParameters(location=location, scale=QSizeF(params.scale),
                               angle=params.angle, offset=QPointF(offset))


def snap_angle(angle: float, constraint: float) -> float:
    """Snap to the nearest multiple of *constraint* and wrap into [0, 2pi)."""
    if constraint > 0.0:
        angle = round(angle / constraint) * constraint
    return angle % _TWO_PI


@dataclass(frozen=True)
class DragAnchor:
    """What a drag needs to remember between moves.

    Attributes:
        code: Knob being dragged.
        saved_offset: Offset in effect before the drag started.
        start_scale: Scale at the start of the drag (for aspect constraints).
    """
    code: int
    saved_offset: QPointF
    start_scale: QSizeF


@dataclass(frozen=True)
class KnobMove:
    """Result of a knob move: new parameters and the distortion envelope."""
    parameters: TransformParameters
    distortion: Optional[DistortionModel] = None

    def is_degenerate(self) -> bool:
        return self.parameters.is_degenerate()


class HandleController:
    """Maps knob drags onto TransformParameters updates."""

    def __init__(self, config: Optional[HandleAppearanceConfig] = None):
        self.config = config or default_config()

    # ---- Knob geometry ----

    def unit_point(self, code: int, params: TransformParameters) -> QPointF:
        """Return the canonical position of a standard knob.

        Raises:
            ValueError: for part codes that have no fixed position.
        """
        if code == Knob.ORIGIN_TARGET:
            return QPointF(params.offset)
        if code == Knob.ROTATION:
            return QPointF(params.offset.x() + self.config.rotation_knob_position, params.offset.y())
        try:
            x, y = _UNIT_POINTS[code]
        except KeyError:
            raise ValueError(f"Part code {code} has no unit position") from None
        return QPointF(x, y)

    def active_knobs(self, mode: int = TransformOperation.STANDARD) -> int:
        """Return the mask of knobs live in *mode*."""
        if TransformOperation.is_distorting(mode):
            return ALL_DISTORT_KNOBS
        return STANDARD_KNOBS & self.config.knob_mask

    def is_active(self, code: int, mode: int = TransformOperation.STANDARD) -> bool:
        return code > 0 and (self.active_knobs(mode) & code) == code

    def knob_point(self, params: TransformParameters, code: int,
                   distortion: Optional[DistortionModel] = None) -> QPointF:
        """Return the world position of a knob.

        Distortion knobs sit on the envelope corners. Without an envelope
        they sit on the plain unit rect corners.
        """
        builder = TransformBuilder(params)
        if is_distortion_knob(code):
            model = distortion or DistortionModel.identity()
            return builder.map_point(model.corner(code))
        return builder.map_point(self.unit_point(code, params))

    # ---- Drag anchor ----

    def anchor(self, params: TransformParameters, code: int) -> Tuple[DragAnchor, TransformParameters]:
        """Start a drag of *code*.

        Size knobs move the offset onto the opposite knob so the resize pivots
        there. The location is moved with it so the shape stays where it is.
        """
        drag = DragAnchor(code=code, saved_offset=QPointF(params.offset),
                          start_scale=QSizeF(params.scale))
        if is_size_knob(code) and not params.is_degenerate():
            pivot = self.unit_point(opposite_partcode(code), params)
            params = keep_still_with_offset(params, pivot)
            trace(f"anchor code={code} pivot=({pivot.x():.3f}, {pivot.y():.3f})", "KNOB")
        return drag, params

    def release(self, params: TransformParameters, drag: DragAnchor) -> TransformParameters:
        """End a drag, putting back the offset saved by ``anchor``."""
        if params.is_degenerate():
            return params.with_offset(drag.saved_offset)
        return keep_still_with_offset(params, drag.saved_offset)

    # ---- Knob moves ----

    def move_knob(self, params: TransformParameters, code: int, target: QPointF,
                  drag: Optional[DragAnchor] = None, allow_rotate: bool = False,
                  constrain: bool = False, distortion: Optional[DistortionModel] = None,
                  mode: int = TransformOperation.STANDARD) -> KnobMove:
        """Work out the parameters that put knob *code* at *target*.

        Args:
            params: Current parameters (after ``anchor`` for size knobs).
            code: Knob being dragged.
            target: Proposed world position of the knob.
            drag: Anchor returned by ``anchor``.
            allow_rotate: Rotate instead of resize, whatever the knob.
            constrain: Snap rotation, or keep aspect ratio for corner knobs.
            distortion: Current envelope, if any.
            mode: Current operation mode.

        Returns:
            A KnobMove. A zero-length resize gives zero scale; the caller
            decides whether that may be committed.
        """
        if not self.is_active(code, mode):
            return KnobMove(params, distortion)

        if is_distortion_knob(code):
            return KnobMove(params, self._move_distortion_corner(params, code, target, distortion, mode))

        if code == Knob.ROTATION or allow_rotate:
            angle = self.rotation_angle(params, code, target, constrain)
            return KnobMove(params.with_angle(angle), distortion)

        if code == Knob.ORIGIN_TARGET:
            offset = TransformBuilder(params).unmap_point(target)
            return KnobMove(params.with_offset(offset).with_location(target), distortion)

        if code == Knob.CENTRE:
            centre = TransformBuilder(params).map_point(QPointF(0.0, 0.0))
            location = params.location + (target - centre)
            return KnobMove(params.with_location(location), distortion)

        return KnobMove(self._resize(params, code, target, drag, constrain), distortion)

    def rotation_angle(self, params: TransformParameters, code: int, target: QPointF,
                       constrain: bool = False) -> float:
        """Return the angle that puts knob *code* on the line from location to *target*."""
        rel = self.unit_point(code, params) - params.offset
        base = math.atan2(params.scale.height() * rel.y(), params.scale.width() * rel.x())
        d = target - params.location
        angle = math.atan2(d.y(), d.x()) - base
        if constrain:
            angle = snap_angle(angle, self.config.angular_constraint)
        trace(f"rotate code={code} angle={math.degrees(angle):.2f}", "DRAG")
        return angle

    def rotate(self, params: TransformParameters, reference_point: QPointF,
               constrain: bool = False) -> TransformParameters:
        """Rotate so the rotation knob points at *reference_point*."""
        return params.with_angle(self.rotation_angle(params, Knob.ROTATION, reference_point, constrain))

    def _resize(self, params: TransformParameters, code: int, target: QPointF,
                drag: Optional[DragAnchor], constrain: bool) -> TransformParameters:
        rel = self.unit_point(code, params) - params.offset
        d = target - params.location
        lx, ly = rotate_vector(d.x(), d.y(), -params.angle)

        sx = params.scale.width()
        sy = params.scale.height()
        if code & HORIZONTAL_SIZING_KNOBS and rel.x() != 0.0:
            sx = lx / rel.x()
        if code & VERTICAL_SIZING_KNOBS and rel.y() != 0.0:
            sy = ly / rel.y()

        if constrain and code & ALL_CORNER_HANDLES:
            start = drag.start_scale if drag is not None else params.scale
            if start.width() != 0.0 and start.height() != 0.0:
                fx = sx / start.width()
                fy = sy / start.height()
                f = fx if abs(fx - 1.0) >= abs(fy - 1.0) else fy
                sx = start.width() * f
                sy = start.height() * f

        trace(f"resize code={code} scale=({sx:.3f}, {sy:.3f})", "DRAG")
        return params.with_scale(sx, sy)

    def _move_distortion_corner(self, params: TransformParameters, code: int, target: QPointF,
                                distortion: Optional[DistortionModel], mode: int) -> DistortionModel:
        model = distortion or DistortionModel.identity(mode)
        if model.mode != mode:
            model = model.with_mode(mode)
        canonical = TransformBuilder(params).unmap_point(target)
        return model.with_corner_moved(code, canonical)
