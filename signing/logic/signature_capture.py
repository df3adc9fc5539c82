"""
Signature capture helpers (no UI).

The drawing canvas itself lives in the front end; it hands over freehand
strokes or an uploaded file, and these helpers turn either into an
ImagePayload for a signature field.
"""
from __future__ import annotations

import io
from typing import Optional, Sequence

from PIL import Image, ImageDraw, UnidentifiedImageError

from ..exceptions.errors import UnsupportedImageFormat
from ..models.field_enums import ImageFormat
from ..models.image_payload import ImagePayload

CANVAS_SIZE = (400, 200)
STROKE_WIDTH = 2
TRIM_PADDING = 4

_UPLOAD_FORMATS = {"PNG": ImageFormat.PNG, "JPEG": ImageFormat.JPEG}

Stroke = Sequence[tuple[float, float]]


def render_png_from_strokes(strokes: Sequence[Stroke],
                            size: tuple[int, int] = CANVAS_SIZE,
                            stroke_width: int = STROKE_WIDTH,
                            *, trim: bool = False) -> bytes:
    """
    Convert freehand strokes (canvas pixels, top-left origin) into a
    transparent PNG. With trim=True the image is cropped to the ink plus a
    small padding so aspect-fit uses the actual signature shape.
    """
    w, h = size
    img = Image.new("RGBA", (w, h), (0, 0, 0, 0))
    drw = ImageDraw.Draw(img)
    r = stroke_width / 2.0
    for poly in strokes:
        pts = [(float(px), float(py)) for px, py in poly]
        if len(pts) >= 2:
            drw.line(pts, fill=(0, 0, 0, 255), width=stroke_width, joint="curve")
        # round caps (and single taps)
        for px, py in (pts[:1] + pts[-1:]):
            drw.ellipse((px - r, py - r, px + r, py + r), fill=(0, 0, 0, 255))

    if trim:
        bbox = img.getchannel("A").getbbox()
        if bbox:
            x0, y0, x1, y1 = bbox
            img = img.crop((max(0, x0 - TRIM_PADDING), max(0, y0 - TRIM_PADDING),
                            min(w, x1 + TRIM_PADDING), min(h, y1 + TRIM_PADDING)))

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def payload_from_strokes(strokes: Sequence[Stroke],
                         size: tuple[int, int] = CANVAS_SIZE,
                         stroke_width: int = STROKE_WIDTH,
                         *, trim: bool = False) -> Optional[ImagePayload]:
    """None when nothing was drawn (the field stays unsigned)."""
    if not any(len(s) for s in strokes):
        return None
    return ImagePayload.from_bytes(
        render_png_from_strokes(strokes, size, stroke_width, trim=trim), ImageFormat.PNG
    )


def payload_from_upload(data: bytes) -> ImagePayload:
    """Uploaded signature/image file; the format is sniffed, not trusted."""
    try:
        with Image.open(io.BytesIO(data)) as im:
            detected = im.format
    except (UnidentifiedImageError, OSError) as exc:
        raise UnsupportedImageFormat(f"Unreadable image upload: {exc}") from exc
    fmt = _UPLOAD_FORMATS.get(detected or "")
    if fmt is None:
        raise UnsupportedImageFormat(f"Unsupported image upload format '{detected}'")
    return ImagePayload.from_bytes(data, fmt)
