"""
settings.py

Persistent settings management for shapekit.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/shapekit/settings.toml
    - macOS: ~/Library/Application Support/shapekit/settings.toml
    - Linux: ~/.config/shapekit/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from models import ALL_KNOBS

APP_NAME = "shapekit"

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


# =============================================================================
# Handle Settings
# =============================================================================

@dataclass
class HandleSettings:
    """Knob appearance and hit-testing settings.

    Defaults:
        size: 8.0
        hit_distance: 10.0
        border_color: "#0078D7"
        fill_color: "#FFFFFF"
        rotation_color: "#D35400"
        rotation_knob_position: 0.3
    """
    size: float = 8.0                     # Default: 8.0 pixels
    hit_distance: float = 10.0            # Default: 10.0 pixels
    border_color: str = "#0078D7"         # Default: blue
    fill_color: str = "#FFFFFF"           # Default: white
    rotation_color: str = "#D35400"       # Default: orange
    rotation_knob_position: float = 0.3   # Default: 0.3 canonical units right of the origin target


# =============================================================================
# Constraint Settings
# =============================================================================

@dataclass
class ConstraintSettings:
    """Interactive constraint settings.

    Defaults:
        angular_constraint_degrees: 45.0
        allow_size_knobs_to_rotate: False
        knob_mask: 0xFFFFFFFF (all knobs)
    """
    angular_constraint_degrees: float = 45.0   # Default: 45 degrees
    allow_size_knobs_to_rotate: bool = False   # Default: only the rotation knob rotates
    knob_mask: int = ALL_KNOBS                 # Default: all knobs


# =============================================================================
# Canonical Path Settings
# =============================================================================

@dataclass
class CanonicalSettings:
    """Canonical path validation settings.

    Defaults:
        tolerance: 1e-6
    """
    tolerance: float = 1e-6  # Default: 1e-6 canonical units


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Engine settings with default values.

    Attributes:
        handles: Knob appearance and hit-testing.
        constraints: Angular snapping and knob availability.
        canonical: Canonical path validation.
    """
    handles: HandleSettings = field(default_factory=HandleSettings)
    constraints: ConstraintSettings = field(default_factory=ConstraintSettings)
    canonical: CanonicalSettings = field(default_factory=CanonicalSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing engine settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
    """

    def __init__(self, app_name: str = APP_NAME):
        self.settings_dir = Path(platformdirs.user_config_dir(app_name))
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()  # Save if file didn't exist

    def ensure_file_complete(self) -> None:
        """Ensure settings file exists with all sections. Call once at startup."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)

            return self._parse_toml(data)
        except (OSError, tomllib.TOMLDecodeError, AttributeError, TypeError):
            # If file is corrupted or invalid, return defaults
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        h = data.get("handles", {})
        settings.handles.size = h.get("size", settings.handles.size)
        settings.handles.hit_distance = h.get("hit_distance", settings.handles.hit_distance)
        settings.handles.border_color = h.get("border_color", settings.handles.border_color)
        settings.handles.fill_color = h.get("fill_color", settings.handles.fill_color)
        settings.handles.rotation_color = h.get("rotation_color", settings.handles.rotation_color)
        settings.handles.rotation_knob_position = h.get("rotation_knob_position", settings.handles.rotation_knob_position)

        c = data.get("constraints", {})
        settings.constraints.angular_constraint_degrees = c.get("angular_constraint_degrees", settings.constraints.angular_constraint_degrees)
        settings.constraints.allow_size_knobs_to_rotate = c.get("allow_size_knobs_to_rotate", settings.constraints.allow_size_knobs_to_rotate)
        settings.constraints.knob_mask = c.get("knob_mask", settings.constraints.knob_mask)

        can = data.get("canonical", {})
        settings.canonical.tolerance = can.get("tolerance", settings.canonical.tolerance)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "handles": {
                "size": s.handles.size,
                "hit_distance": s.handles.hit_distance,
                "border_color": s.handles.border_color,
                "fill_color": s.handles.fill_color,
                "rotation_color": s.handles.rotation_color,
                "rotation_knob_position": s.handles.rotation_knob_position,
            },
            "constraints": {
                "angular_constraint_degrees": s.constraints.angular_constraint_degrees,
                "allow_size_knobs_to_rotate": s.constraints.allow_size_knobs_to_rotate,
                "knob_mask": s.constraints.knob_mask,
            },
            "canonical": {
                "tolerance": s.canonical.tolerance,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        data = self._to_toml_dict()
        return tomli_w.dumps(data)

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
