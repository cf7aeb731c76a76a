"""
shapes/hotspots.py

Custom interactive points attached to a shape beyond its fixed knob set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional

from PyQt6.QtCore import QPointF

from models import Knob
from debug_trace import trace


# Drag phases passed to hotspot callbacks
class HotspotPhase:
    BEGIN = "begin"
    TRACK = "track"
    END = "end"


# callback(hotspot, canonical_point, phase)
HotspotCallback = Callable[["Hotspot", QPointF, str], None]


@dataclass
class Hotspot:
    """An owner-defined point on a shape.

    Attributes:
        partcode: Part code assigned on registration (``Knob.HOTSPOT_BASE`` and up).
        name: Owner's identifier for the hotspot.
        relative_location: Canonical-space position.
        callback: Called with the canonical drag point while the hotspot is tracked.
    """
    partcode: int
    name: str
    relative_location: QPointF
    callback: Optional[HotspotCallback] = None


class HotspotRegistry:
    """Ordered set of hotspots keyed by part code."""

    def __init__(self):
        self._hotspots: Dict[int, Hotspot] = {}
        self._next_code = Knob.HOTSPOT_BASE

    def add(self, name: str, relative_location: QPointF,
            callback: Optional[HotspotCallback] = None) -> Hotspot:
        hotspot = Hotspot(self._next_code, name, QPointF(relative_location), callback)
        self._hotspots[hotspot.partcode] = hotspot
        self._next_code += 1
        trace(f"hotspot added name={name} partcode={hotspot.partcode}", "SHAPE")
        return hotspot

    def remove(self, partcode: int) -> Optional[Hotspot]:
        return self._hotspots.pop(partcode, None)

    def get(self, partcode: int) -> Optional[Hotspot]:
        return self._hotspots.get(partcode)

    def __contains__(self, partcode: int) -> bool:
        return partcode in self._hotspots

    def __iter__(self) -> Iterator[Hotspot]:
        return iter(list(self._hotspots.values()))

    def __len__(self) -> int:
        return len(self._hotspots)
