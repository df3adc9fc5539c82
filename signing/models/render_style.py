from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class RenderStyle:
    """
    Fixed drawing parameters in PDF points (1 pt = 1/72 inch).
      - text/date are drawn at (x + text_inset, y + height - baseline_drop)
      - radio dot radii are width/height * radio_dot_ratio
    """
    font_name: str = "Helvetica"
    font_size: float = 10.0
    text_inset: float = 2.0
    baseline_drop: float = 12.0
    border_width: float = 1.0
    check_thickness: float = 1.5
    radio_dot_ratio: float = 1.0 / 3.0
    color_rgb: Tuple[float, float, float] = (0.0, 0.0, 0.0)  # 0..1
    date_format: str = "%Y-%m-%d"

    @classmethod
    def from_config(cls, rendering) -> "RenderStyle":
        """Build from core.config RenderingConfig."""
        return cls(
            font_name=rendering.font_name,
            font_size=float(rendering.font_size),
            text_inset=float(rendering.text_inset),
            baseline_drop=float(rendering.baseline_drop),
            border_width=float(rendering.border_width),
            check_thickness=float(rendering.check_thickness),
            radio_dot_ratio=float(rendering.radio_dot_ratio),
            date_format=rendering.date_format,
        )
