"""
shapes/shape.py

ShapeState: the aggregate that owns a shape's canonical path, transform
parameters, distortion envelope and operation mode, plus every lifecycle
operation that re-derives the canonical path without changing what the
shape looks like.
"""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Optional, Union

from PyQt6.QtCore import QPointF, QRectF, QSizeF
from PyQt6.QtGui import QPainterPath, QTransform

from models import (
    DegenerateTransformError,
    EmptyPathError,
    InvalidCanonicalPathError,
    Knob,
    NoValidTransformError,
    TransformOperation,
    TransformParameters,
)
from shapes.canonical import CanonicalPath, segments_from_records, split_subpaths
from shapes.config import HandleAppearanceConfig, default_config
from shapes.distortion import DistortionModel
from shapes.hotspots import Hotspot, HotspotCallback, HotspotPhase, HotspotRegistry
from shapes.knobs import DragAnchor, HandleController, is_size_knob, keep_still_with_offset
from shapes.reshaper import PathReshaper
from shapes.transform import TransformBuilder
from debug_trace import trace, trace_call, trace_exception

RECORD_KIND = "shape"

# Hit-test order; breaks ties between knobs at the same distance
_HIT_ORDER = (
    Knob.TOP_LEFT_DISTORT, Knob.TOP_RIGHT_DISTORT,
    Knob.BOTTOM_RIGHT_DISTORT, Knob.BOTTOM_LEFT_DISTORT,
    Knob.ROTATION, Knob.ORIGIN_TARGET,
    Knob.TOP_LEFT, Knob.TOP_RIGHT, Knob.BOTTOM_LEFT, Knob.BOTTOM_RIGHT,
    Knob.LEFT, Knob.TOP, Knob.RIGHT, Knob.BOTTOM,
    Knob.CENTRE,
)

_UNSET = object()

DragFinishedCallback = Callable[["ShapeState", Dict[str, Any], Dict[str, Any]], None]


def _has_extent(rect: QRectF) -> bool:
    return rect.width() != 0.0 and rect.height() != 0.0


class ShapeState:
    """A path-based shape that can be moved, resized, rotated and distorted.

    The path is stored in canonical form (bounds exactly the unit rect at the
    origin) and mapped into world space by the transform parameters. Every
    operation either commits completely or raises before touching state.

    Args:
        canonical: Canonical path (the unit rect if omitted).
        params: Placement (unit size at the origin if omitted).
        style: Opaque style reference for the rendering collaborator.
        config: Handle configuration (built from settings if omitted).
        reshaper: Optional PathReshaper run whenever the scale changes.
        on_change: Called with the shape after every committed change.
        on_drag_finished: Called as (shape, old_record, new_record) when a
            drag that changed the geometry ends.
    """

    def __init__(self, canonical: Optional[CanonicalPath] = None,
                 params: Optional[TransformParameters] = None,
                 style: Any = None,
                 config: Optional[HandleAppearanceConfig] = None,
                 reshaper: Optional[PathReshaper] = None,
                 on_change: Optional[Callable[["ShapeState"], None]] = None,
                 on_drag_finished: Optional[DragFinishedCallback] = None):
        self.config = config or default_config()
        self.controller = HandleController(self.config)
        self.style = style
        self.reshaper = reshaper
        self.on_change = on_change
        self.on_drag_finished = on_drag_finished
        self.container_transform: Optional[QTransform] = None
        self.hotspots = HotspotRegistry()

        self._canonical = canonical if canonical is not None else CanonicalPath.unit_rect()
        self._params = params if params is not None else TransformParameters()
        self._distortion: Optional[DistortionModel] = None
        self._mode = TransformOperation.STANDARD
        self._drag: Optional[DragAnchor] = None
        self._geometry_before_drag: Optional[Dict[str, Any]] = None
        self._bounds: Optional[QRectF] = None

    # ----------------------------
    # Construction
    # ----------------------------

    @classmethod
    def from_rect(cls, rect: QRectF, style: Any = None, **kwargs) -> "ShapeState":
        """Create a rectangle occupying *rect*."""
        params = TransformParameters(location=rect.center(), scale=QSizeF(rect.width(), rect.height()))
        return cls(CanonicalPath.unit_rect(), params, style, **kwargs)

    @classmethod
    def from_canonical_path(cls, path: Union[CanonicalPath, QPainterPath],
                            params: Optional[TransformParameters] = None,
                            style: Any = None, **kwargs) -> "ShapeState":
        """Create a shape from a path that is already canonical.

        Raises:
            EmptyPathError: if the path is empty.
            InvalidCanonicalPathError: if its bounds are not the unit rect.
        """
        config = kwargs.get("config") or default_config()
        if not isinstance(path, CanonicalPath):
            path = CanonicalPath(path, config.canonical_tolerance)
        return cls(path, params, style, **kwargs)

    @classmethod
    def from_path(cls, path: QPainterPath, angle: float = 0.0, style: Any = None, **kwargs) -> "ShapeState":
        """Create a shape whose visible outline is the world-space *path*.

        *angle* is the rotation the shape should report. The path is
        unrotated by it to find the shape's size; the location is the centre
        of those unrotated bounds.

        Raises:
            EmptyPathError: if the path is empty.
            InvalidCanonicalPathError: if the unrotated path has zero width or height.
        """
        if path.isEmpty():
            raise EmptyPathError("Cannot create a shape from an empty path")
        pivot = path.boundingRect().center()
        unrotate = QTransform()
        unrotate.translate(pivot.x(), pivot.y())
        unrotate.rotateRadians(-angle)
        unrotate.translate(-pivot.x(), -pivot.y())
        bounds = unrotate.map(path).boundingRect()
        if not _has_extent(bounds):
            raise InvalidCanonicalPathError(
                f"Path bounds {bounds.width()}x{bounds.height()} have no area"
            )
        rerotate = QTransform()
        rerotate.translate(pivot.x(), pivot.y())
        rerotate.rotateRadians(angle)
        rerotate.translate(-pivot.x(), -pivot.y())
        params = TransformParameters(location=rerotate.map(bounds.center()),
                                     scale=QSizeF(bounds.width(), bounds.height()),
                                     angle=float(angle))
        shape = cls(None, params, style, **kwargs)
        shape.adopt_path(path)
        return shape

    @classmethod
    def from_record(cls, record: Dict[str, Any], **kwargs) -> "ShapeState":
        """Rebuild a shape from a dict produced by ``to_record``.

        Raises:
            ValueError: if the record names an unknown operation mode.
            EmptyPathError, InvalidCanonicalPathError: if the stored path is not canonical.
        """
        config = kwargs.get("config") or default_config()
        mode = int(record.get("operation_mode", TransformOperation.STANDARD))
        if mode not in TransformOperation.ALL:
            trace(f"record has unknown operation mode {mode}", "ERROR")
            raise ValueError(f"Unknown operation mode {mode}")
        canonical = CanonicalPath(segments_from_records(record.get("path", [])), config.canonical_tolerance)
        params = TransformParameters.from_dict(record.get("geom", {}))
        shape = cls(canonical, params, record.get("style"), **kwargs)
        shape._mode = mode
        d = record.get("distortion")
        shape._distortion = DistortionModel.from_dict(d) if d else None
        return shape

    def copy(self) -> "ShapeState":
        """Return an independent shape with the same geometry and style.

        Hotspots and drag state are not copied.
        """
        other = ShapeState(self._canonical, self._params, self.style, self.config,
                           self.reshaper, self.on_change, self.on_drag_finished)
        other._distortion = self._distortion
        other._mode = self._mode
        other.container_transform = self.container_transform
        return other

    # ----------------------------
    # Accessors
    # ----------------------------

    @property
    def parameters(self) -> TransformParameters:
        return self._params

    @property
    def location(self) -> QPointF:
        return QPointF(self._params.location)

    @property
    def scale(self) -> QSizeF:
        return QSizeF(self._params.scale)

    @property
    def angle(self) -> float:
        return self._params.angle

    @property
    def offset(self) -> QPointF:
        return QPointF(self._params.offset)

    @property
    def distortion(self) -> Optional[DistortionModel]:
        return self._distortion

    @property
    def operation_mode(self) -> int:
        return self._mode

    @property
    def drag_anchor(self) -> Optional[DragAnchor]:
        return self._drag

    def canonical_path(self) -> CanonicalPath:
        return self._canonical

    def size(self) -> QSizeF:
        return QSizeF(self._params.scale)

    def location_ignoring_offset(self) -> QPointF:
        """World position of the shape's centre, wherever the datum is."""
        return self._builder().map_point(QPointF(0.0, 0.0))

    # ----------------------------
    # Transforms
    # ----------------------------

    def _builder(self, params: Optional[TransformParameters] = None) -> TransformBuilder:
        return TransformBuilder(params or self._params)

    def transform(self) -> QTransform:
        return self._builder().transform()

    def inverse_transform(self) -> QTransform:
        """Raises DegenerateTransformError when either scale component is zero."""
        return self._builder().inverse_transform()

    def transform_including_parent(self) -> QTransform:
        return self._builder().transform_including_parent(self.container_transform)

    def convert_point_from_relative_location(self, relative: QPointF) -> QPointF:
        """Map a canonical point to world space, container included."""
        return self.transform_including_parent().map(relative)

    def convert_point_to_relative_location(self, point: QPointF) -> QPointF:
        """Map a world point (container included) to canonical space."""
        return self.inverse_transform().map(self._from_container(point))

    def _from_container(self, point: QPointF) -> QPointF:
        """Take an ancestor-space point into the space the parameters live in."""
        if self.container_transform is None:
            return QPointF(point)
        parent_inverse, invertible = self.container_transform.inverted()
        if not invertible:
            raise DegenerateTransformError("Container transform has no inverse")
        return parent_inverse.map(point)

    # ----------------------------
    # Paths
    # ----------------------------

    def path(self) -> QPainterPath:
        """Canonical path with the distortion applied, still in unit space."""
        path = self._canonical.path()
        if self._distortion is not None:
            path = self._distortion.map_path(path)
        return path

    def transformed_path(self) -> Optional[QPainterPath]:
        """The path as drawn, or None while the shape has zero size."""
        if self._params.is_degenerate():
            return None
        return self.transform().map(self.path())

    def bounds(self) -> QRectF:
        """Axis-aligned bounds of ``transformed_path()``, cached until the next change."""
        if self._bounds is None:
            path = self.transformed_path()
            self._bounds = path.boundingRect() if path is not None else QRectF()
        return QRectF(self._bounds)

    def set_path(self, path: Union[CanonicalPath, QPainterPath]):
        """Replace the canonical path. The transform is left alone."""
        if not isinstance(path, CanonicalPath):
            path = CanonicalPath(path, self.config.canonical_tolerance)
        self._commit(canonical=path)

    def _adopted(self, world: QPainterPath, params: TransformParameters):
        """Work out the canonical path and parameters that reproduce *world*.

        The world path is taken into the local frame of *params*. Its local
        bounds become the new unit box: scale absorbs their size (keeping its
        sign), the offset goes back to the centre and the location moves to
        where that centre is in the world. The angle is kept.
        """
        if world.isEmpty():
            raise EmptyPathError("Cannot adopt an empty path")
        builder = self._builder(params)
        try:
            inverse = builder.inverse_transform()
        except DegenerateTransformError as e:
            trace_exception("adopt refused")
            raise NoValidTransformError(f"Cannot adopt a path: {e}") from e

        local = inverse.map(world)
        box = local.boundingRect()
        if not _has_extent(box):
            trace(f"adopt refused: local bounds {box.width()}x{box.height()}", "ERROR")
            raise InvalidCanonicalPathError(
                f"Path bounds {box.width()}x{box.height()} have no area"
            )
        canonical, _ = CanonicalPath.normalized(local, self.config.canonical_tolerance)
        new_params = TransformParameters(
            location=builder.map_point(box.center()),
            scale=QSizeF(params.scale.width() * box.width(), params.scale.height() * box.height()),
            angle=params.angle,
            offset=QPointF(0.0, 0.0),
        )
        return canonical, new_params

    def adopt_path(self, world: QPainterPath):
        """Make the world-space *world* path the shape's outline.

        Raises:
            EmptyPathError: if the path is empty.
            NoValidTransformError: if the current scale has a zero component.
            InvalidCanonicalPathError: if the path has no area in the shape's frame.
        """
        canonical, params = self._adopted(world, self._params)
        trace(f"adopt scale=({params.scale.width():.3f}, {params.scale.height():.3f}) "
              f"angle={math.degrees(params.angle):.2f}", "ADOPT")
        self._commit(canonical=canonical, params=params, distortion=None)

    def can_paste_path(self, path: Optional[QPainterPath]) -> bool:
        """True if *path* could replace this shape's outline."""
        return path is not None and not path.isEmpty() and _has_extent(path.boundingRect())

    def paste_path(self, path: QPainterPath):
        """Replace the outline with a pasted world-space path.

        Raises:
            EmptyPathError: if the path is empty.
            InvalidCanonicalPathError: if the path has zero width or height.
        """
        if path is None or path.isEmpty():
            raise EmptyPathError("Cannot paste an empty path")
        if not self.can_paste_path(path):
            raise InvalidCanonicalPathError("Cannot paste a path with no area")
        self.adopt_path(path)

    # ----------------------------
    # Geometry edits
    # ----------------------------

    def set_location(self, location: QPointF):
        self._commit(params=self._params.with_location(location))

    def move_by(self, dx: float, dy: float):
        loc = self._params.location
        self.set_location(QPointF(loc.x() + dx, loc.y() + dy))

    def set_scale(self, width: float, height: float):
        """Set the scale, running the reshaper if there is one."""
        params = self._params.with_scale(width, height)
        self._commit(canonical=self._reshaped(params), params=params)

    def set_size(self, size: QSizeF):
        self.set_scale(size.width(), size.height())

    def set_angle(self, angle: float):
        self._commit(params=self._params.with_angle(angle))

    def rotate_by(self, delta: float):
        self.set_angle(self._params.angle + delta)

    def unrotate(self):
        self.set_angle(0.0)

    def set_offset(self, offset: QPointF):
        """Move the datum without moving the shape."""
        if self._params.is_degenerate():
            self._commit(params=self._params.with_offset(offset))
        else:
            self._commit(params=keep_still_with_offset(self._params, offset))

    def reset_offset(self):
        self.set_offset(QPointF(0.0, 0.0))

    def flip_horizontally(self):
        p = self._params
        self._commit(params=p.with_scale(-p.scale.width(), p.scale.height()).with_angle(-p.angle))

    def flip_vertically(self):
        p = self._params
        self._commit(params=p.with_scale(p.scale.width(), -p.scale.height()).with_angle(-p.angle))

    def _reshaped(self, params: TransformParameters):
        if self.reshaper is None or params.is_degenerate():
            return _UNSET
        result = self.reshaper.reshape(self._canonical, QSizeF(params.scale))
        if result is None:
            return _UNSET
        if not isinstance(result, CanonicalPath):
            result = CanonicalPath(result, self.config.canonical_tolerance)
        return result

    # ----------------------------
    # Lifecycle
    # ----------------------------

    @trace_call("ADOPT")
    def reset_bounding_box(self):
        """Bake distortion and resize history into a fresh canonical path.

        The outline does not move. Running it twice changes nothing the
        second time.
        """
        world = self.transformed_path()
        if world is None:
            raise DegenerateTransformError("Cannot reset the bounding box of a zero-size shape")
        self.adopt_path(world)

    def reset_bounding_box_and_rotation(self):
        """As ``reset_bounding_box``, but the rotated outline becomes the unrotated path."""
        world = self.transformed_path()
        if world is None:
            raise DegenerateTransformError("Cannot reset the bounding box of a zero-size shape")
        canonical, params = self._adopted(world, self._params.with_angle(0.0))
        trace("reset bounding box and rotation", "ADOPT")
        self._commit(canonical=canonical, params=params, distortion=None)

    @trace_call("SHAPE")
    def break_apart(self) -> List["ShapeState"]:
        """Split the shape into one shape per sub-path.

        Each new shape starts from this shape's parameters and shares its
        style object, then adopts its own sub-path so its canonical path has
        its own unit bounds. Sub-paths with no area are dropped.
        """
        world = self.transformed_path()
        if world is None:
            raise DegenerateTransformError("Cannot break apart a zero-size shape")
        pieces = []
        for sub in split_subpaths(world):
            piece = ShapeState(self._canonical, self._params, self.style, self.config,
                               self.reshaper, self.on_change, self.on_drag_finished)
            piece.container_transform = self.container_transform
            try:
                piece.adopt_path(sub)
            except InvalidCanonicalPathError:
                trace("break apart: skipped a sub-path with no area", "SHAPE")
                continue
            pieces.append(piece)
        trace(f"break apart -> {len(pieces)} shapes", "SHAPE")
        return pieces

    def adjust_to_fit_grid(self, snap: Callable[[QPointF], QPointF]) -> bool:
        """Snap the shape's corners to a grid.

        The corners used are those of the unrotated frame, so a rotated shape
        only lands approximately on grid points. Returns False, changing
        nothing, if snapping would collapse the shape.
        """
        p = self._params
        sx, sy = p.scale.width(), p.scale.height()
        ox, oy = p.offset.x(), p.offset.y()
        loc = p.location
        tl = snap(QPointF(loc.x() + (-0.5 - ox) * sx, loc.y() + (-0.5 - oy) * sy))
        br = snap(QPointF(loc.x() + (0.5 - ox) * sx, loc.y() + (0.5 - oy) * sy))
        w = br.x() - tl.x()
        h = br.y() - tl.y()
        if w == 0.0 or h == 0.0:
            trace("grid fit would collapse the shape", "SHAPE")
            return False
        cx = (tl.x() + br.x()) / 2.0
        cy = (tl.y() + br.y()) / 2.0
        params = TransformParameters(location=QPointF(cx + w * ox, cy + h * oy),
                                     scale=QSizeF(w, h), angle=p.angle, offset=QPointF(p.offset))
        self._commit(canonical=self._reshaped(params), params=params)
        return True

    # ----------------------------
    # Operation mode and distortion
    # ----------------------------

    def set_operation_mode(self, mode: int):
        """Switch editing discipline.

        Going back to standard drops the distortion. Moving between
        distortion modes keeps the corners and changes how they are coupled.
        """
        if mode not in TransformOperation.ALL:
            raise ValueError(f"Unknown operation mode {mode}")
        if mode == self._mode:
            return
        distortion = self._distortion
        if mode == TransformOperation.STANDARD:
            distortion = None
        elif distortion is not None:
            distortion = distortion.with_mode(mode)
        self._mode = mode
        trace(f"operation mode -> {mode}", "DISTORT")
        self._commit(distortion=distortion)

    def set_distortion(self, model: Optional[DistortionModel]):
        """Assign an envelope directly. The shape takes on the model's mode."""
        if model is not None and TransformOperation.is_distorting(model.mode):
            self._mode = model.mode
        self._commit(distortion=model)

    # ----------------------------
    # Knobs and dragging
    # ----------------------------

    def knob_point(self, code: int) -> QPointF:
        """World position of a knob, or of a hotspot if *code* is a hotspot part code.

        Raises:
            DegenerateTransformError: while the shape has zero size.
        """
        if code in self.hotspots:
            return self.hotspot_point(code)
        point = self.controller.knob_point(self._params, code, self._distortion)
        if self.container_transform is not None:
            point = self.container_transform.map(point)
        return point

    def rotation_knob_point(self) -> QPointF:
        return self.knob_point(Knob.ROTATION)

    def active_knobs(self) -> int:
        return self.controller.active_knobs(self._mode)

    def hit_part(self, point: QPointF) -> int:
        """Return the part code under *point*.

        Knobs are tested first, then hotspots, then the body of the path.
        Among knobs within the hit distance the nearest wins. Returns
        ``Knob.ENTIRE_OBJECT`` for a hit inside the path on no knob and
        ``Knob.NONE`` for a miss. A zero-size shape has nothing to hit.
        """
        if self._params.is_degenerate():
            return Knob.NONE
        radius = self.config.hit_distance
        active = self.active_knobs()
        code = self._nearest(((c, self.knob_point(c)) for c in _HIT_ORDER if active & c),
                             point, radius)
        if code is not None:
            return code
        code = self._nearest(((h.partcode, self.hotspot_point(h.partcode)) for h in self.hotspots),
                             point, radius)
        if code is not None:
            return code
        path = self.transformed_path()
        if self.container_transform is not None:
            path = self.container_transform.map(path)
        if path.contains(point):
            return Knob.ENTIRE_OBJECT
        return Knob.NONE

    @staticmethod
    def _nearest(candidates, point: QPointF, radius: float) -> Optional[int]:
        """Part code of the closest candidate within *radius*; ties go to the earlier one."""
        best, best_distance = None, radius
        for code, at in candidates:
            distance = math.hypot(at.x() - point.x(), at.y() - point.y())
            if distance < best_distance or (best is None and distance == best_distance):
                best, best_distance = code, distance
        return best

    def set_drag_anchor(self, code: int):
        """Start dragging knob *code*. Calling it again for the same knob does nothing."""
        if self._drag is not None:
            if self._drag.code == code:
                return
            self.end_drag()
        self._geometry_before_drag = self.to_record()
        drag, params = self.controller.anchor(self._params, code)
        self._drag = drag
        if params is not self._params:
            self._commit(params=params)

    def end_drag(self):
        """Finish a drag, putting the datum back where it was before it started."""
        if self._drag is None:
            return
        params = self.controller.release(self._params, self._drag)
        self._drag = None
        self._commit(params=params)
        before, self._geometry_before_drag = self._geometry_before_drag, None
        after = self.to_record()
        if before is not None and before != after and self.on_drag_finished:
            self.on_drag_finished(self, before, after)

    def move_knob(self, code: int, target: QPointF, allow_rotate: Optional[bool] = None,
                  constrain: bool = False) -> bool:
        """Drag knob *code* to the world point *target*.

        *target* is in the same space as ``knob_point``, so the container
        transform is taken off it first. Returns False, committing nothing,
        if the knob is not active, the shape has zero size or the move would
        leave it with zero size.
        """
        if allow_rotate is None:
            allow_rotate = self.config.allow_size_knobs_to_rotate
        if not self.controller.is_active(code, self._mode):
            return False
        if self._params.is_degenerate():
            trace(f"knob {code} move rejected: shape has zero size", "KNOB")
            return False
        drag = self._drag if self._drag is not None and self._drag.code == code else None
        result = self.controller.move_knob(self._params, code, self._from_container(target),
                                           drag=drag, allow_rotate=allow_rotate, constrain=constrain,
                                           distortion=self._distortion, mode=self._mode)
        if result.is_degenerate():
            trace(f"knob {code} move rejected: zero size", "KNOB")
            return False
        canonical = _UNSET
        if is_size_knob(code) and not allow_rotate:
            canonical = self._reshaped(result.parameters)
        self._commit(canonical=canonical, params=result.parameters, distortion=result.distortion)
        return True

    def rotate_using_reference_point(self, point: QPointF, constrain: bool = False):
        """Turn the shape so its rotation knob points at *point* (container space)."""
        params = self.controller.rotate(self._params, self._from_container(point), constrain)
        self._commit(params=params)

    # ----------------------------
    # Hotspots
    # ----------------------------

    def add_hotspot(self, name: str, relative_location: QPointF,
                    callback: Optional[HotspotCallback] = None) -> Hotspot:
        return self.hotspots.add(name, relative_location, callback)

    def remove_hotspot(self, partcode: int) -> Optional[Hotspot]:
        return self.hotspots.remove(partcode)

    def hotspot_point(self, partcode: int) -> QPointF:
        hotspot = self.hotspots.get(partcode)
        if hotspot is None:
            raise KeyError(f"No hotspot with part code {partcode}")
        return self.convert_point_from_relative_location(hotspot.relative_location)

    def track_hotspot(self, partcode: int, point: QPointF, phase: str = HotspotPhase.TRACK) -> QPointF:
        """Pass a world drag point to a hotspot's owner as a canonical point."""
        hotspot = self.hotspots.get(partcode)
        if hotspot is None:
            raise KeyError(f"No hotspot with part code {partcode}")
        relative = self.convert_point_to_relative_location(point)
        if hotspot.callback is not None:
            hotspot.callback(hotspot, relative, phase)
        return relative

    # ----------------------------
    # Persistence
    # ----------------------------

    def to_record(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dict. Values are not rounded."""
        return {
            "kind": RECORD_KIND,
            "path": self._canonical.to_records(),
            "geom": self._params.to_dict(),
            "distortion": self._distortion.to_dict() if self._distortion is not None else None,
            "operation_mode": self._mode,
            "style": self.style,
        }

    # ----------------------------
    # Change handling
    # ----------------------------

    def _commit(self, canonical=_UNSET, params=_UNSET, distortion=_UNSET):
        if canonical is not _UNSET:
            self._canonical = canonical
        if params is not _UNSET:
            self._params = params
        if distortion is not _UNSET:
            self._distortion = distortion
        self._notify_changed()

    def _notify_changed(self):
        """Drop cached bounds and tell the owner this shape changed."""
        self._bounds = None
        if self.on_change:
            self.on_change(self)

    def __repr__(self) -> str:
        p = self._params
        return (f"ShapeState(location=({p.location.x():.3f}, {p.location.y():.3f}), "
                f"scale=({p.scale.width():.3f}, {p.scale.height():.3f}), "
                f"angle={math.degrees(p.angle):.2f}, mode={self._mode})")
