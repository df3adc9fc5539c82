"""
Percentage space -> absolute container space.

One unit-agnostic transform serves both call sites: the final burn (page size
in PDF points, origin bottom-left) and the preview (viewport size in pixels,
origin top-left). Only the origin differs; scaling is identical, so preview
and output agree. No rounding anywhere.
"""
from __future__ import annotations

from ..models.field import Field
from ..models.field_enums import Origin
from ..models.geometry import Box, PageGeometry


def transform_box(
    field: Field,
    container_width: float,
    container_height: float,
    origin: Origin = Origin.BOTTOM_LEFT,
) -> Box:
    """Map a field's percentage box into the container's absolute units."""
    width_out = (field.width / 100.0) * container_width
    height_out = (field.height / 100.0) * container_height
    x_out = (field.x / 100.0) * container_width
    if origin == Origin.BOTTOM_LEFT:
        y_out = container_height - (field.y / 100.0) * container_height - height_out
    else:
        y_out = (field.y / 100.0) * container_height
    return Box(x=x_out, y=y_out, width=width_out, height=height_out)


def to_page_box(field: Field, page: PageGeometry) -> Box:
    """Final output: PDF points, bottom-left origin."""
    return transform_box(field, page.width, page.height, Origin.BOTTOM_LEFT)


def to_viewport_box(field: Field, viewport: PageGeometry) -> Box:
    """Preview: viewport pixels, top-left origin."""
    return transform_box(field, viewport.width, viewport.height, Origin.TOP_LEFT)


def transform_point(
    x_pct: float,
    y_pct: float,
    container_width: float,
    container_height: float,
    origin: Origin = Origin.BOTTOM_LEFT,
) -> tuple[float, float]:
    """Single point variant (no height to subtract)."""
    x_out = (x_pct / 100.0) * container_width
    if origin == Origin.BOTTOM_LEFT:
        return x_out, container_height - (y_pct / 100.0) * container_height
    return x_out, (y_pct / 100.0) * container_height


def box_to_percentages(
    box: Box,
    container_width: float,
    container_height: float,
    origin: Origin = Origin.TOP_LEFT,
) -> dict[str, float]:
    """
    Inverse of transform_box, used after a drag/resize in the viewport.
    Returns x/y/width/height in percent, ready for Field.with_changes().
    """
    if container_width <= 0 or container_height <= 0:
        raise ValueError("Container dimensions must be positive")
    width_pct = box.width / container_width * 100.0
    height_pct = box.height / container_height * 100.0
    x_pct = box.x / container_width * 100.0
    if origin == Origin.BOTTOM_LEFT:
        y_pct = (container_height - box.y - box.height) / container_height * 100.0
    else:
        y_pct = box.y / container_height * 100.0
    return {"x": x_pct, "y": y_pct, "width": width_pct, "height": height_pct}
