"""
shapes/reshaper.py

Hook for shapes whose outline depends on their size (fixed-radius corners,
fixed-size arrow heads and so on).
"""

from __future__ import annotations

from typing import Protocol, Union, runtime_checkable

from PyQt6.QtCore import QSizeF
from PyQt6.QtGui import QPainterPath

from shapes.canonical import CanonicalPath


@runtime_checkable
class PathReshaper(Protocol):
    """Rebuilds the canonical path after a change of scale.

    ``reshape`` may return a CanonicalPath or a plain QPainterPath, which must
    already have canonical bounds. Returning the old path leaves it unchanged.
    """

    def reshape(self, old_canonical: CanonicalPath, new_scale: QSizeF) -> Union[CanonicalPath, QPainterPath]:
        ...
