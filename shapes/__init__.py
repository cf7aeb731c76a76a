"""
shapes package

Canonical paths, transforms, knobs and the ShapeState aggregate.
"""

from shapes.canonical import CanonicalPath
from shapes.config import HandleAppearanceConfig
from shapes.distortion import DistortionModel
from shapes.hotspots import Hotspot, HotspotPhase, HotspotRegistry
from shapes.knobs import DragAnchor, HandleController, KnobMove
from shapes.reshaper import PathReshaper
from shapes.shape import ShapeState
from shapes.transform import TransformBuilder

__all__ = [
    "CanonicalPath",
    "HandleAppearanceConfig",
    "DistortionModel",
    "Hotspot",
    "HotspotPhase",
    "HotspotRegistry",
    "DragAnchor",
    "HandleController",
    "KnobMove",
    "PathReshaper",
    "ShapeState",
    "TransformBuilder",
]
