"""
Document assembly: load -> per-page overlays -> merge -> serialize.

Only pages that received at least one drawn field are touched; every other
page, and the document-level objects (info, outlines), are carried over from
the source as they are.
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Iterable, Optional

from pypdf import PasswordType, PdfReader, PdfWriter

from ..exceptions.errors import LoadError, SerializationError
from ..models.field import Field
from ..models.geometry import PageGeometry
from ..models.render_models import RenderReport, RenderRequest, RenderResult
from .page_renderer import PageRenderer

logger = logging.getLogger(__name__)


class DocumentAssembler:
    """Burns a field set into a PDF and returns the new document bytes."""

    def __init__(self, renderer: Optional[PageRenderer] = None) -> None:
        self._renderer = renderer or PageRenderer()

    # ---------------- Load
    @staticmethod
    def load(source: bytes) -> PdfReader:
        """Parse source bytes; anything pypdf cannot open becomes LoadError."""
        if not source:
            raise LoadError("Empty document")
        try:
            reader = PdfReader(BytesIO(source))
            if reader.is_encrypted and reader.decrypt("") == PasswordType.NOT_DECRYPTED:
                raise LoadError("Document is password protected")
            # force the page tree to be parsed now, not halfway through a render
            _ = len(reader.pages)
        except LoadError:
            raise
        except Exception as exc:
            logger.error(f"Cannot load PDF: {exc}")
            raise LoadError(f"Not a valid PDF document: {exc}") from exc
        return reader

    @staticmethod
    def page_geometries(reader: PdfReader) -> list[PageGeometry]:
        geometries = []
        for page in reader.pages:
            box = page.mediabox
            geometries.append(PageGeometry(
                float(box.width), float(box.height), float(box.left), float(box.bottom)
            ))
        return geometries

    def inspect(self, source: bytes) -> list[PageGeometry]:
        """Page sizes of a source document (points)."""
        return self.page_geometries(self.load(source))

    # ---------------- Assemble
    def render(self, request: RenderRequest) -> RenderResult:
        # request.viewport is deliberately unused: placement follows each page's own size
        return self.assemble(request.source, request.fields)

    def assemble(self, source: bytes, fields: Iterable[Field]) -> RenderResult:
        snapshot = tuple(fields)
        reader = self.load(source)
        geometries = self.page_geometries(reader)
        writer = PdfWriter(clone_from=reader)

        report = RenderReport()
        groups = self._renderer.group_by_page(snapshot, len(geometries), report)

        for page_no, page_fields in groups.items():
            index = page_no - 1
            try:
                overlay_pdf, page_report = self._renderer.make_overlay(geometries[index], page_fields)
            except Exception as exc:
                logger.error(f"Overlay for page {page_no} failed: {exc}")
                raise SerializationError(f"Cannot build overlay for page {page_no}: {exc}") from exc
            report.extend(page_report)
            if not page_report.drawn:
                continue
            overlay_page = PdfReader(BytesIO(overlay_pdf)).pages[0]
            geometry = geometries[index]
            if geometry.left or geometry.bottom:
                # overlay is drawn from (0, 0); move it onto the page box
                writer.pages[index].merge_translated_page(
                    overlay_page, geometry.left, geometry.bottom
                )
            else:
                writer.pages[index].merge_page(overlay_page)

        out = BytesIO()
        try:
            writer.write(out)
        except Exception as exc:
            logger.error(f"Cannot serialize signed PDF: {exc}")
            raise SerializationError(f"Cannot serialize document: {exc}") from exc

        logger.info(
            f"Rendered {len(report.drawn)} field(s), skipped {len(report.skipped)} "
            f"on {len(geometries)} page(s)"
        )
        return RenderResult(pdf_bytes=out.getvalue(), page_count=len(geometries), report=report)
