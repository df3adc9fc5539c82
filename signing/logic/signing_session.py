"""
Explicit editing state for one document: loaded source, current page,
viewport box and the placed fields. UI layers hold one SigningSession and
call its operations instead of sharing globals.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from core.config.config_service import ConfigService, config_service

from ..exceptions.errors import EmptyFieldSetError, UnsignedSignatureError
from ..models.field import Field, new_field_id
from ..models.field_enums import FieldType, Origin
from ..models.field_store import FieldStore
from ..models.geometry import Box, PageGeometry
from ..models.image_payload import ImagePayload
from ..models.render_models import RenderRequest
from ..models.render_style import RenderStyle
from .coordinate_transform import box_to_percentages, to_viewport_box
from .document_assembler import DocumentAssembler

logger = logging.getLogger(__name__)

# Defaults in percent of the page: position (x, y) and size per type
DEFAULT_POSITION = (40.0, 45.0)
DEFAULT_SIZES: dict[FieldType, tuple[float, float]] = {
    FieldType.SIGNATURE: (25.0, 10.0),
    FieldType.IMAGE: (25.0, 10.0),
    FieldType.TEXT: (25.0, 5.0),
    FieldType.DATE: (25.0, 5.0),
    FieldType.CHECKBOX: (3.0, 3.0),
    FieldType.RADIO: (3.0, 3.0),
}


class SigningSession:
    def __init__(self, *, config: Optional[ConfigService] = None,
                 assembler: Optional[DocumentAssembler] = None,
                 style: Optional[RenderStyle] = None,
                 viewport: Optional[PageGeometry] = None) -> None:
        cfg = config or config_service
        self._assembler = assembler or DocumentAssembler()
        self._style = style or RenderStyle.from_config(cfg.rendering)
        self.fields = FieldStore()
        self.viewport: PageGeometry = viewport or PageGeometry(
            float(cfg.service.default_viewport_width),
            float(cfg.service.default_viewport_height),
        )
        self.source: Optional[bytes] = None
        self.source_name: Optional[str] = None
        self.pages: list[PageGeometry] = []
        self.current_page = 1

    # ---------------- Document
    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def has_document(self) -> bool:
        return self.source is not None

    def load_document(self, source: bytes, name: Optional[str] = None) -> None:
        """Replace the document; the old field set is discarded."""
        pages = self._assembler.inspect(source)  # LoadError propagates, state untouched
        self.source = bytes(source)
        self.source_name = name
        self.pages = pages
        self.fields.clear()
        self.current_page = 1
        logger.info(f"Loaded {name or '<document>'} with {len(pages)} page(s)")

    def set_page(self, page: int) -> int:
        if self.page_count:
            self.current_page = max(1, min(int(page), self.page_count))
        return self.current_page

    def set_viewport(self, width: float, height: float) -> None:
        """Called on every resize/page change with the rendered pixel box."""
        self.viewport = PageGeometry(float(width), float(height))

    # ---------------- Fields
    def add_field(self, field_type: FieldType | str, **overrides: Any) -> Field:
        if not self.has_document:
            raise RuntimeError("No document loaded; load a PDF before placing fields.")
        ftype = FieldType(field_type)
        width, height = DEFAULT_SIZES[ftype]
        x, y = DEFAULT_POSITION
        values: dict[str, Any] = {
            "id": new_field_id(),
            "type": ftype,
            "page": self.current_page,
            "x": x, "y": y, "width": width, "height": height,
        }
        if ftype == FieldType.TEXT:
            values["text"] = ""
        elif ftype == FieldType.DATE:
            values["date"] = datetime.now().strftime(self._style.date_format)
        values.update(overrides)
        return self.fields.add(Field(**values))

    def place_field(self, field: Field) -> Field:
        """Add a field built elsewhere (e.g. parsed from client JSON)."""
        if not self.has_document:
            raise RuntimeError("No document loaded; load a PDF before placing fields.")
        return self.fields.add(field)

    def update_field(self, field_id: int, **changes: Any) -> Field:
        return self.fields.update(field_id, **changes)

    def remove_field(self, field_id: int) -> bool:
        return self.fields.remove(field_id)

    def attach_image(self, field_id: int, payload: ImagePayload) -> Field:
        """Signature capture / image upload result."""
        return self.fields.update(field_id, image=payload)

    # ---------------- Viewport (preview side)
    def viewport_box(self, field_id: int) -> Box:
        return to_viewport_box(self.fields.get(field_id), self.viewport)

    def move_field_to_viewport_box(self, field_id: int, box: Box) -> Field:
        """Drag/resize ended: store the pixel box back as percentages."""
        pct = box_to_percentages(box, self.viewport.width, self.viewport.height, Origin.TOP_LEFT)
        return self.fields.update(field_id, **pct)

    # ---------------- Finalize
    def unsigned_signature_fields(self) -> list[Field]:
        return self.fields.unsigned_signature_fields()

    def sign_all(self, payload: ImagePayload) -> list[Field]:
        """Attach one signature image to every signature field still without one."""
        return [self.attach_image(f.id, payload) for f in self.unsigned_signature_fields()]

    def build_request(self, *, require_signatures: bool = True) -> RenderRequest:
        """Caller-side preconditions before a burn."""
        if not self.has_document:
            raise RuntimeError("No document loaded.")
        if not len(self.fields):
            raise EmptyFieldSetError("Add at least one field before signing")
        unsigned = self.unsigned_signature_fields()
        if unsigned and require_signatures:
            raise UnsignedSignatureError(f.id for f in unsigned)
        return RenderRequest(source=self.source, fields=self.fields.snapshot(), viewport=self.viewport)
