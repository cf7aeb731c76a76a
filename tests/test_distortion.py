"""Tests for the four-corner DistortionModel."""
from __future__ import annotations

import os
import sys

import pytest
from PyQt6.QtCore import QPointF, QRectF
from PyQt6.QtGui import QPainterPath

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from models import Knob, TransformOperation
from shapes.distortion import DistortionModel, corner_index


# ─────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────

def _xy(p: QPointF):
    return (p.x(), p.y())


def _corners(model: DistortionModel):
    return [_xy(c) for c in model.corners]


def _cross(a: QPointF, b: QPointF, c: QPointF) -> float:
    return (b.x() - a.x()) * (c.y() - a.y()) - (b.y() - a.y()) * (c.x() - a.x())


SAMPLE_POINTS = [QPointF(-0.5, -0.5), QPointF(0.25, -0.1), QPointF(0.0, 0.0), QPointF(0.5, 0.3)]


# ─────────────────────────────────────────────────────────
# Identity
# ─────────────────────────────────────────────────────────


class TestIdentity:
    @pytest.mark.parametrize("mode", TransformOperation.DISTORTING)
    def test_identity_maps_points_to_themselves(self, mode):
        model = DistortionModel.identity(mode)
        for p in SAMPLE_POINTS:
            assert _xy(model.apply(p)) == pytest.approx(_xy(p), abs=1e-12)

    def test_is_identity(self):
        assert DistortionModel.identity().is_identity()
        moved = DistortionModel.identity().with_corner_moved(Knob.TOP_LEFT_DISTORT, QPointF(-0.6, -0.5))
        assert not moved.is_identity()

    def test_wrong_corner_count(self):
        with pytest.raises(ValueError):
            DistortionModel((QPointF(), QPointF()))

    def test_corner_index_rejects_standard_knob(self):
        with pytest.raises(ValueError):
            corner_index(Knob.TOP_LEFT)


# ─────────────────────────────────────────────────────────
# Corner coupling per mode
# ─────────────────────────────────────────────────────────


class TestCornerEdits:
    def test_free_distort_moves_one_corner(self):
        model = DistortionModel.identity(TransformOperation.FREE_DISTORT)
        moved = model.with_corner_moved(Knob.TOP_LEFT_DISTORT, QPointF(-0.7, -0.6))
        assert _corners(moved) == [(-0.7, -0.6), (0.5, -0.5), (0.5, 0.5), (-0.5, 0.5)]

    def test_perspective_moves_one_corner(self):
        model = DistortionModel.identity(TransformOperation.PERSPECTIVE)
        moved = model.with_corner_moved(Knob.BOTTOM_RIGHT_DISTORT, QPointF(0.8, 0.9))
        assert _corners(moved) == [(-0.5, -0.5), (0.5, -0.5), (0.8, 0.9), (-0.5, 0.5)]

    def test_horizontal_shear_moves_top_edge(self):
        model = DistortionModel.identity(TransformOperation.HORIZONTAL_SHEAR)
        moved = model.with_corner_moved(Knob.TOP_LEFT_DISTORT, QPointF(-0.3, -0.9))
        tl, tr, br, bl = moved.corners
        assert _xy(tl) == pytest.approx((-0.3, -0.5))
        assert _xy(tr) == pytest.approx((0.7, -0.5))
        assert _xy(br) == (0.5, 0.5)
        assert _xy(bl) == (-0.5, 0.5)

    def test_vertical_shear_moves_right_side(self):
        model = DistortionModel.identity(TransformOperation.VERTICAL_SHEAR)
        moved = model.with_corner_moved(Knob.TOP_RIGHT_DISTORT, QPointF(0.9, -0.4))
        tl, tr, br, bl = moved.corners
        assert _xy(tr) == pytest.approx((0.5, -0.4))
        assert _xy(br) == pytest.approx((0.5, 0.6))
        assert _xy(tl) == (-0.5, -0.5)
        assert _xy(bl) == (-0.5, 0.5)

    @pytest.mark.parametrize("mode", [TransformOperation.HORIZONTAL_SHEAR, TransformOperation.VERTICAL_SHEAR])
    def test_shear_keeps_a_parallelogram(self, mode):
        model = DistortionModel.identity(mode)
        model = model.with_corner_moved(Knob.BOTTOM_LEFT_DISTORT, QPointF(-0.2, 0.75))
        model = model.with_corner_moved(Knob.TOP_RIGHT_DISTORT, QPointF(0.65, -0.35))
        tl, tr, br, bl = model.corners
        top = tr - tl
        bottom = br - bl
        assert (top.x(), top.y()) == pytest.approx((bottom.x(), bottom.y()))

    def test_original_is_unchanged(self):
        model = DistortionModel.identity()
        model.with_corner_moved(Knob.TOP_LEFT_DISTORT, QPointF(-1, -1))
        assert model.is_identity()


# ─────────────────────────────────────────────────────────
# Mapping
# ─────────────────────────────────────────────────────────


class TestMapping:
    def _quad(self, mode):
        return DistortionModel(
            (QPointF(-0.6, -0.4), QPointF(0.4, -0.7), QPointF(0.7, 0.5), QPointF(-0.5, 0.6)), mode)

    @pytest.mark.parametrize("mode", TransformOperation.DISTORTING)
    def test_unit_corners_land_on_envelope(self, mode):
        model = self._quad(mode)
        unit = [QPointF(-0.5, -0.5), QPointF(0.5, -0.5), QPointF(0.5, 0.5), QPointF(-0.5, 0.5)]
        for u, c in zip(unit, model.corners):
            assert _xy(model.apply(u)) == pytest.approx(_xy(c), abs=1e-9)

    def test_perspective_keeps_edges_straight(self):
        model = self._quad(TransformOperation.PERSPECTIVE)
        tl, tr, br, bl = model.corners
        for t in (0.1, 0.37, 0.8):
            top = model.apply(QPointF(t - 0.5, -0.5))
            assert _cross(tl, tr, top) == pytest.approx(0.0, abs=1e-9)
            right = model.apply(QPointF(0.5, t - 0.5))
            assert _cross(tr, br, right) == pytest.approx(0.0, abs=1e-9)

    def test_perspective_differs_from_bilinear_inside(self):
        persp = self._quad(TransformOperation.PERSPECTIVE)
        free = self._quad(TransformOperation.FREE_DISTORT)
        p = QPointF(0.1, 0.2)
        assert _xy(persp.apply(p)) != pytest.approx(_xy(free.apply(p)), abs=1e-6)

    def test_map_path_keeps_element_count(self):
        path = QPainterPath()
        path.addEllipse(QRectF(-0.5, -0.5, 1, 1))
        mapped = self._quad(TransformOperation.FREE_DISTORT).map_path(path)
        assert mapped.elementCount() == path.elementCount()


# ─────────────────────────────────────────────────────────
# Mode changes and records
# ─────────────────────────────────────────────────────────


class TestModeAndRecords:
    def test_with_mode_keeps_corners(self):
        model = DistortionModel.identity().with_corner_moved(Knob.TOP_LEFT_DISTORT, QPointF(-0.9, -0.5))
        persp = model.with_mode(TransformOperation.PERSPECTIVE)
        assert persp.mode == TransformOperation.PERSPECTIVE
        assert _corners(persp) == _corners(model)

    def test_dict_round_trip(self):
        model = DistortionModel(
            (QPointF(-0.61, -0.4), QPointF(0.4, -0.7), QPointF(0.7, 0.5), QPointF(-0.5, 0.6)),
            TransformOperation.VERTICAL_SHEAR)
        again = DistortionModel.from_dict(model.to_dict())
        assert again == model
        assert again.mode == TransformOperation.VERTICAL_SHEAR
