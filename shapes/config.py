"""
shapes/config.py

Explicit handle configuration handed to the shape engine.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from models import ALL_KNOBS
from settings import AppSettings, get_settings


@dataclass(frozen=True)
class HandleAppearanceConfig:
    """Knob appearance, hit testing and constraint values for a shape."""
    knob_size: float = 8.0
    hit_distance: float = 10.0
    border_color: str = "#0078D7"
    fill_color: str = "#FFFFFF"
    rotation_color: str = "#D35400"
    rotation_knob_position: float = 0.3
    angular_constraint: float = math.radians(45.0)
    allow_size_knobs_to_rotate: bool = False
    knob_mask: int = ALL_KNOBS
    canonical_tolerance: float = 1e-6

    @classmethod
    def from_settings(cls, settings: Optional[AppSettings] = None) -> "HandleAppearanceConfig":
        """Create a config from app settings (the global settings if omitted)."""
        if settings is None:
            settings = get_settings().settings
        return cls(
            knob_size=float(settings.handles.size),
            hit_distance=float(settings.handles.hit_distance),
            border_color=settings.handles.border_color,
            fill_color=settings.handles.fill_color,
            rotation_color=settings.handles.rotation_color,
            rotation_knob_position=float(settings.handles.rotation_knob_position),
            angular_constraint=math.radians(settings.constraints.angular_constraint_degrees),
            allow_size_knobs_to_rotate=bool(settings.constraints.allow_size_knobs_to_rotate),
            knob_mask=int(settings.constraints.knob_mask),
            canonical_tolerance=float(settings.canonical.tolerance),
        )


_default_config: Optional[HandleAppearanceConfig] = None


def default_config() -> HandleAppearanceConfig:
    """Get the config built from the global settings, created on first access."""
    global _default_config
    if _default_config is None:
        _default_config = HandleAppearanceConfig.from_settings()
    return _default_config
