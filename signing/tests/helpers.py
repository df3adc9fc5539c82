"""Builders for test documents and images (reportlab / Pillow, in memory)."""
from __future__ import annotations

from io import BytesIO
from typing import Sequence

from PIL import Image
from reportlab.lib.pagesizes import A4, letter
from reportlab.pdfgen import canvas

from signing.models.field import Field
from signing.models.field_enums import FieldType, ImageFormat
from signing.models.image_payload import ImagePayload


def make_pdf(page_sizes: Sequence[tuple[float, float]] = (letter, letter)) -> bytes:
    buf = BytesIO()
    c = canvas.Canvas(buf, invariant=1)
    for n, size in enumerate(page_sizes, start=1):
        c.setPageSize(size)
        c.setFont("Helvetica", 14)
        c.drawString(72, size[1] - 72, f"Page {n}")
        c.showPage()
    c.save()
    return buf.getvalue()


def make_image(width: int, height: int, fmt: ImageFormat = ImageFormat.PNG) -> ImagePayload:
    buf = BytesIO()
    if fmt == ImageFormat.PNG:
        Image.new("RGBA", (width, height), (0, 0, 0, 255)).save(buf, format="PNG")
    else:
        Image.new("RGB", (width, height), (20, 20, 20)).save(buf, format="JPEG")
    return ImagePayload.from_bytes(buf.getvalue(), fmt)


def field(field_id: int, ftype: FieldType, page: int = 1, x: float = 10, y: float = 10,
          width: float = 20, height: float = 10, **kw) -> Field:
    return Field(id=field_id, type=ftype, page=page, x=x, y=y, width=width, height=height, **kw)


__all__ = ["A4", "letter", "make_pdf", "make_image", "field"]
