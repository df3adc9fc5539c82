"""
Raster preview of a page with its fields.

Uses the same coordinate transform as the final burn, fed with the pixel box
of the rendered page and a top-left origin, so what the preview shows is
where the fields land in the PDF.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

import pypdfium2 as pdfium
from PIL import Image, ImageChops, ImageDraw, ImageFont

from ..exceptions.errors import InvalidGeometry, LoadError, UnsupportedImageFormat
from ..models.field import Field
from ..models.field_enums import FieldType
from ..models.geometry import Box, PageGeometry
from ..models.render_style import RenderStyle
from .aspect_fit import aspect_fit
from .coordinate_transform import to_viewport_box
from .image_decoder import decode_image
from .page_renderer import CHECKMARK_POINTS, check_page

logger = logging.getLogger(__name__)

PLACEHOLDER_FILL = (214, 235, 255, 160)
PLACEHOLDER_OUTLINE = (10, 132, 255, 255)
INK = (0, 0, 0, 255)


def _normalized(x0: float, y0: float, x1: float, y1: float) -> tuple[float, float, float, float]:
    return min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)


class PreviewRenderer:
    def __init__(self, style: Optional[RenderStyle] = None) -> None:
        self._style = style or RenderStyle()

    # ---------------- Page raster
    @staticmethod
    def rasterize_page(source: bytes, page: int, width_px: int) -> tuple[Image.Image, PageGeometry]:
        """Render a 1-based page at the given pixel width; returns image + page size in pt."""
        try:
            pdf = pdfium.PdfDocument(source)
        except pdfium.PdfiumError as exc:
            raise LoadError(f"Cannot open PDF for preview: {exc}") from exc
        try:
            index = check_page(page, len(pdf))
            pdf_page = pdf[index]
            try:
                pw, ph = pdf_page.get_size()
                bitmap = pdf_page.render(scale=width_px / pw)
                img = bitmap.to_pil().convert("RGB")
            finally:
                pdf_page.close()
        finally:
            pdf.close()
        return img, PageGeometry(float(pw), float(ph))

    def render(self, source: bytes, fields: Iterable[Field], page: int, width_px: int = 800) -> Image.Image:
        img, geometry = self.rasterize_page(source, page, width_px)
        on_page = [f for f in fields if f.page == page]
        return self.draw_fields(img, on_page, points_to_pixels=img.width / geometry.width)

    # ---------------- Fields
    def draw_fields(self, image: Image.Image, fields: Iterable[Field], *,
                    points_to_pixels: float = 1.0) -> Image.Image:
        """
        Paint fields onto a copy of *image*; the image size is the viewport.
        points_to_pixels scales the fixed point sizes (font, insets, strokes).
        """
        out = image.convert("RGBA")
        viewport = PageGeometry(out.width, out.height)
        for f in fields:
            box = to_viewport_box(f, viewport)
            try:
                self._draw_field(out, f, box, points_to_pixels)
            except (InvalidGeometry, UnsupportedImageFormat) as ex:
                logger.debug(f"Preview of field {f.id} skipped: {ex}")
        return out

    def _draw_field(self, img: Image.Image, f: Field, box: Box, k: float) -> None:
        st = self._style
        drw = ImageDraw.Draw(img)
        x0, y0, x1, y1 = _normalized(box.x, box.y, box.x + box.width, box.y + box.height)

        if f.type.carries_image:
            if f.image is None:
                # Platzhalter (falls keine Signatur)
                drw.rectangle((x0, y0, x1, y1), fill=PLACEHOLDER_FILL, outline=PLACEHOLDER_OUTLINE, width=2)
                return
            src = decode_image(f.image)
            fit = aspect_fit(box.width, box.height, src.width, src.height)
            size = (max(1, round(fit.final_width)), max(1, round(fit.final_height)))
            scaled = src.convert("RGBA").resize(size, Image.LANCZOS)
            # paste (not alpha_composite): off-page fields may have negative offsets
            img.paste(scaled, (round(box.x + fit.offset_x), round(box.y + fit.offset_y)), scaled)
            return

        if f.type in (FieldType.TEXT, FieldType.DATE):
            text = f.text if f.type == FieldType.TEXT else f.date
            if not text:
                return
            font = ImageFont.load_default(size=max(1, round(st.font_size * k)))
            pos = (box.x + st.text_inset * k, box.y + st.baseline_drop * k)
            if f.type == FieldType.TEXT:
                layer = Image.new("RGBA", img.size, (0, 0, 0, 0))
                ImageDraw.Draw(layer).text(pos, text, font=font, fill=INK, anchor="ls")
                mask = Image.new("L", img.size, 0)
                ImageDraw.Draw(mask).rectangle((x0, 0, x1, img.height), fill=255)
                layer.putalpha(ImageChops.multiply(layer.getchannel("A"), mask))
                img.alpha_composite(layer)
            else:
                drw.text(pos, text, font=font, fill=INK, anchor="ls")
            return

        if f.type.is_toggle:
            line = max(1, round(st.border_width * k))
            drw.rectangle((x0, y0, x1, y1), outline=INK, width=line)
            if not f.checked:
                return
            if f.type == FieldType.RADIO:
                cx, cy = box.center
                rx, ry = abs(box.width) * st.radio_dot_ratio, abs(box.height) * st.radio_dot_ratio
                drw.ellipse((cx - rx, cy - ry, cx + rx, cy + ry), fill=INK)
            else:
                # relative points are bottom-up; flip for raster space
                pts = [(box.x + box.width * fx, box.y + box.height * (1.0 - fy)) for fx, fy in CHECKMARK_POINTS]
                drw.line(pts, fill=INK, width=max(1, round(st.check_thickness * k)), joint="curve")
