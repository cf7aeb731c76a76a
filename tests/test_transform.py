"""Tests for TransformBuilder: forward, algebraic inverse and parent composition."""
from __future__ import annotations

import math
import os
import sys

import pytest
from PyQt6.QtCore import QPointF, QSizeF
from PyQt6.QtGui import QTransform

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from models import DegenerateTransformError, ShapeGeometryError, TransformParameters
from shapes.transform import TransformBuilder, rotate_vector


# ─────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────

def _params(x=0.0, y=0.0, w=1.0, h=1.0, angle=0.0, ox=0.0, oy=0.0):
    return TransformParameters(QPointF(x, y), QSizeF(w, h), angle, QPointF(ox, oy))


def _xy(p: QPointF):
    return pytest.approx((p.x(), p.y()), abs=1e-9)


# ─────────────────────────────────────────────────────────
# Forward transform
# ─────────────────────────────────────────────────────────


class TestForward:
    def test_identity_parameters(self):
        t = TransformBuilder(_params()).transform()
        assert t.isIdentity()

    def test_scale_then_translate(self):
        b = TransformBuilder(_params(100, 50, 20, 10))
        assert (b.map_point(QPointF(0.5, 0.5)).x(), b.map_point(QPointF(0.5, 0.5)).y()) == _xy(QPointF(110, 55))
        assert (b.map_point(QPointF(0, 0)).x(), b.map_point(QPointF(0, 0)).y()) == _xy(QPointF(100, 50))

    def test_offset_maps_to_location(self):
        b = TransformBuilder(_params(30, 40, 20, 10, angle=0.7, ox=0.5, oy=-0.25))
        p = b.map_point(QPointF(0.5, -0.25))
        assert (p.x(), p.y()) == _xy(QPointF(30, 40))

    def test_rotation_quarter_turn(self):
        b = TransformBuilder(_params(100, 50, 20, 10, angle=math.pi / 2))
        p = b.map_point(QPointF(0.5, 0.0))
        assert (p.x(), p.y()) == _xy(QPointF(100, 60))

    def test_negative_scale_flips(self):
        b = TransformBuilder(_params(0, 0, -20, 10))
        p = b.map_point(QPointF(0.5, 0.5))
        assert (p.x(), p.y()) == _xy(QPointF(-10, 5))


# ─────────────────────────────────────────────────────────
# Inverse transform
# ─────────────────────────────────────────────────────────


class TestInverse:
    @pytest.mark.parametrize("params", [
        _params(10, 20, 3, 4, 0.3, 0.1, -0.2),
        _params(-50, 7, -2.5, 0.5, -1.2, 0.5, 0.5),
        _params(0, 0, 1e-6, 1e-6, 2.9),
        _params(1000, -1000, 400, -250, math.pi, -0.5, 0.0),
    ])
    def test_inverse_undoes_forward(self, params):
        b = TransformBuilder(params)
        combined = b.transform() * b.inverse_transform()
        for pt in (QPointF(0, 0), QPointF(0.5, -0.5), QPointF(-0.3, 0.2)):
            back = combined.map(pt)
            assert back.x() == pytest.approx(pt.x(), abs=1e-6)
            assert back.y() == pytest.approx(pt.y(), abs=1e-6)

    def test_unmap_point(self):
        b = TransformBuilder(_params(10, 20, 4, 8, 0.5))
        world = b.map_point(QPointF(0.25, -0.125))
        local = b.unmap_point(world)
        assert (local.x(), local.y()) == _xy(QPointF(0.25, -0.125))

    @pytest.mark.parametrize("w,h", [(0.0, 1.0), (1.0, 0.0), (0.0, 0.0)])
    def test_zero_scale_has_no_inverse(self, w, h):
        with pytest.raises(DegenerateTransformError):
            TransformBuilder(_params(w=w, h=h)).inverse_transform()

    def test_degenerate_error_is_a_value_error(self):
        assert issubclass(DegenerateTransformError, ShapeGeometryError)
        assert issubclass(DegenerateTransformError, ValueError)

    @pytest.mark.parametrize("w,h", [(0.0, 10.0), (10.0, 0.0)])
    def test_zero_scale_has_no_forward_transform(self, w, h):
        b = TransformBuilder(_params(5, 5, w, h))
        with pytest.raises(DegenerateTransformError):
            b.transform()
        with pytest.raises(DegenerateTransformError):
            b.map_point(QPointF(0.5, 0.5))
        with pytest.raises(DegenerateTransformError):
            b.transform_including_parent(QTransform())


# ─────────────────────────────────────────────────────────
# Parent composition
# ─────────────────────────────────────────────────────────


class TestIncludingParent:
    def test_no_parent_is_plain_transform(self):
        b = TransformBuilder(_params(1, 2, 3, 4, 0.1))
        assert b.transform_including_parent(None) == b.transform()

    def test_parent_applied_after_shape(self):
        parent = QTransform()
        parent.translate(10, 0)
        parent.scale(2, 2)
        b = TransformBuilder(_params(5, 5, 10, 10))
        p = b.transform_including_parent(parent).map(QPointF(0.5, 0.5))
        # shape puts the corner at (10, 10); parent scales then shifts
        assert (p.x(), p.y()) == _xy(QPointF(30, 20))


def test_rotate_vector():
    x, y = rotate_vector(1.0, 0.0, math.pi / 2)
    assert (x, y) == pytest.approx((0.0, 1.0), abs=1e-12)
