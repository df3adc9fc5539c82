# signing/models/render_models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from .field import Field
from .field_enums import FieldType
from .geometry import PageGeometry


@dataclass(frozen=True)
class RenderRequest:
    """
    Input of a burn run. `viewport` is accepted for symmetry with the preview
    but the final transform uses each page's own size.
    """
    source: bytes
    fields: Sequence[Field]
    viewport: Optional[PageGeometry] = None

    @property
    def field_types(self) -> list[str]:
        """Distinct field types in first-seen order."""
        seen: list[str] = []
        for f in self.fields:
            if f.type.value not in seen:
                seen.append(f.type.value)
        return seen

    @property
    def signature_count(self) -> int:
        return sum(1 for f in self.fields if f.type == FieldType.SIGNATURE)


@dataclass(frozen=True)
class SkippedField:
    field_id: int
    page: int
    reason: str


@dataclass
class RenderReport:
    """What happened to each field during a render."""
    drawn: list[int] = field(default_factory=list)
    skipped: list[SkippedField] = field(default_factory=list)

    def skip(self, f: Field, reason: str) -> None:
        self.skipped.append(SkippedField(field_id=f.id, page=f.page, reason=reason))

    def extend(self, other: "RenderReport") -> None:
        self.drawn.extend(other.drawn)
        self.skipped.extend(other.skipped)


@dataclass(frozen=True)
class RenderResult:
    pdf_bytes: bytes
    page_count: int
    report: RenderReport
