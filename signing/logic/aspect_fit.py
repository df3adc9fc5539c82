from __future__ import annotations

from ..exceptions.errors import InvalidGeometry
from ..models.geometry import FitResult


def aspect_fit(box_width: float, box_height: float,
               img_width: float, img_height: float) -> FitResult:
    """
    Scale an image uniformly so it fits entirely inside the box and center it
    on the axis with spare room. Offsets are relative to the box corner.
    """
    if box_width <= 0 or box_height <= 0 or img_width <= 0 or img_height <= 0:
        raise InvalidGeometry(
            f"Non-positive geometry: box={box_width}x{box_height}, image={img_width}x{img_height}"
        )

    box_aspect = box_width / box_height
    img_aspect = img_width / img_height

    if img_aspect > box_aspect:
        # relatively wider: fill width
        final_width = box_width
        final_height = box_width / img_aspect
        return FitResult(final_width, final_height, 0.0, (box_height - final_height) / 2.0)

    final_height = box_height
    final_width = box_height * img_aspect
    return FitResult(final_width, final_height, (box_width - final_width) / 2.0, 0.0)
