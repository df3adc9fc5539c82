"""
Per-page field rendering.

Fields are grouped by their 1-based page and drawn onto a reportlab canvas
that has the exact size of the target page. The canvas content later becomes
an overlay merged onto that page (see document_assembler).
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from io import BytesIO
from typing import Iterable, Optional, Sequence

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..exceptions.errors import InvalidGeometry, PageOutOfRange, UnsupportedImageFormat
from ..models.field import Field
from ..models.field_enums import FieldType
from ..models.geometry import Box, PageGeometry
from ..models.render_models import RenderReport
from ..models.render_style import RenderStyle
from .aspect_fit import aspect_fit
from .coordinate_transform import to_page_box
from .image_decoder import decode_image

logger = logging.getLogger(__name__)

# Checkmark polyline, relative to the box (width, height) from its bottom-left
CHECKMARK_POINTS = ((0.2, 0.5), (0.45, 0.2), (0.8, 0.8))
LINE_SPACING = 1.2


def check_page(page: int, page_count: int) -> int:
    """Return the 0-based index of a 1-based page or raise PageOutOfRange."""
    index = page - 1
    if index < 0 or index >= page_count:
        raise PageOutOfRange(page, page_count)
    return index


class PageRenderer:
    def __init__(self, style: Optional[RenderStyle] = None) -> None:
        self._style = style or RenderStyle()

    @property
    def style(self) -> RenderStyle:
        return self._style

    # ---------------- Grouping
    @staticmethod
    def group_by_page(
        fields: Iterable[Field],
        page_count: int,
        report: Optional[RenderReport] = None,
    ) -> "OrderedDict[int, list[Field]]":
        """
        Group fields by page number. Groups for pages the document does not
        have are dropped with a warning; the remaining groups keep field order.
        """
        groups: "OrderedDict[int, list[Field]]" = OrderedDict()
        for f in fields:
            groups.setdefault(f.page, []).append(f)

        for page in list(groups):
            try:
                check_page(page, page_count)
            except PageOutOfRange as ex:
                logger.warning(f"{ex}, skipping {len(groups[page])} field(s)")
                if report is not None:
                    for f in groups[page]:
                        report.skip(f, "page_out_of_range")
                del groups[page]
        return groups

    # ---------------- Overlay
    def make_overlay(self, page: PageGeometry, fields: Sequence[Field]) -> tuple[bytes, RenderReport]:
        """
        One overlay page of the target page's size carrying all its fields.
        invariant=1 keeps reportlab output free of timestamps and random ids.
        """
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=(page.width, page.height), invariant=1)
        report = self.render_page(c, fields, page)
        c.showPage()
        c.save()
        return buf.getvalue(), report

    def render_page(self, c, fields: Sequence[Field], page: PageGeometry) -> RenderReport:
        """Draw every field of one page onto canvas `c`."""
        report = RenderReport()
        for f in fields:
            box = to_page_box(f, page)
            try:
                drawn = self._draw_field(c, f, box, page)
            except (InvalidGeometry, UnsupportedImageFormat) as ex:
                logger.warning(f"Field {f.id} ({f.type.value}) on page {f.page} skipped: {ex}")
                report.skip(f, type(ex).__name__)
                continue
            if drawn:
                logger.debug(f"Field {f.id} ({f.type.value}) drawn at {box}")
                report.drawn.append(f.id)
            else:
                report.skip(f, "empty")
        return report

    def _draw_field(self, c, f: Field, box: Box, page: PageGeometry) -> bool:
        if f.type.carries_image:
            return self._draw_image(c, f, box)
        if f.type == FieldType.TEXT:
            return self._draw_text(c, f.text, box, clip_to=page)
        if f.type == FieldType.DATE:
            return self._draw_text(c, f.date, box, clip_to=None)
        if f.type.is_toggle:
            return self._draw_toggle(c, f, box)
        return False

    # ---------------- Draw primitives
    def _draw_image(self, c, f: Field, box: Box) -> bool:
        if f.image is None:
            # unsigned signature / empty image: nothing goes into the output
            return False
        img = decode_image(f.image)
        fit = aspect_fit(box.width, box.height, img.width, img.height)
        c.drawImage(
            ImageReader(img),
            box.x + fit.offset_x,
            box.y + fit.offset_y,
            width=fit.final_width,
            height=fit.final_height,
            mask="auto",
        )
        return True

    def _draw_text(self, c, text: Optional[str], box: Box, *, clip_to: Optional[PageGeometry]) -> bool:
        if not text:
            return False
        st = self._style
        x = box.x + st.text_inset
        y = box.y + box.height - st.baseline_drop

        c.saveState()
        if clip_to is not None:
            # clip horizontally to the field, vertically to the page
            p = c.beginPath()
            p.rect(box.x, 0, box.width, clip_to.height)
            c.clipPath(p, stroke=0, fill=0)
        c.setFillColorRGB(*st.color_rgb)
        c.setFont(st.font_name, st.font_size)
        for n, line in enumerate(text.splitlines() or [text]):
            c.drawString(x, y - n * st.font_size * LINE_SPACING, line)
        c.restoreState()
        return True

    def _draw_toggle(self, c, f: Field, box: Box) -> bool:
        st = self._style
        x, y, w, h = box.x, box.y, box.width, box.height

        c.saveState()
        c.setStrokeColorRGB(*st.color_rgb)
        c.setFillColorRGB(*st.color_rgb)
        c.setLineWidth(st.border_width)
        # checkbox and radio share the rectangular outline
        c.rect(x, y, w, h, stroke=1, fill=0)

        if f.checked:
            if f.type == FieldType.RADIO:
                cx, cy = box.center
                rx, ry = w * st.radio_dot_ratio, h * st.radio_dot_ratio
                c.ellipse(cx - rx, cy - ry, cx + rx, cy + ry, stroke=0, fill=1)
            else:
                c.setLineWidth(st.check_thickness)
                p = c.beginPath()
                (fx, fy), *rest = CHECKMARK_POINTS
                p.moveTo(x + w * fx, y + h * fy)
                for rx_, ry_ in rest:
                    p.lineTo(x + w * rx_, y + h * ry_)
                c.drawPath(p, stroke=1, fill=0)
        c.restoreState()
        return True
