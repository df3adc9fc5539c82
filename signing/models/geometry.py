# signing/models/geometry.py
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class PageGeometry:
    """
    Size of one target container: PDF points or viewport pixels. left/bottom
    is the lower-left corner of a PDF page box, usually (0, 0).
    """
    width: float
    height: float
    left: float = 0.0
    bottom: float = 0.0


@dataclass(frozen=True)
class Box:
    """Absolute rectangle in output units; (x, y) is the corner at the origin side."""
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0


@dataclass(frozen=True)
class FitResult:
    final_width: float
    final_height: float
    offset_x: float
    offset_y: float
