# signing/models/field.py
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Optional

from .field_enums import FieldType
from .image_payload import UNREADABLE_MIME, ImagePayload

_id_lock = threading.Lock()
_last_id = 0


def new_field_id() -> int:
    """Millisecond creation timestamp, bumped so ids stay strictly increasing."""
    global _last_id
    with _id_lock:
        candidate = time.time_ns() // 1_000_000
        _last_id = candidate if candidate > _last_id else _last_id + 1
        return _last_id


@dataclass(frozen=True)
class Field:
    """
    A placed field. Position and size are percentages (0-100) of the page
    container, x/y measured from the top-left corner. Values outside the
    expected range are kept as they are (no clamping).
    """
    id: int
    type: FieldType
    page: int = 1
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    text: Optional[str] = None
    date: Optional[str] = None
    checked: bool = False
    image: Optional[ImagePayload] = None

    def with_changes(self, **changes: Any) -> "Field":
        """Replace-by-id helper: same id, new values."""
        changes.pop("id", None)
        return replace(self, **changes)

    # -------------------- Wire format -------------------------------- #
    @classmethod
    def from_dict(cls, data: dict) -> "Field":
        """Build a Field from the JSON shape sent by the browser client."""
        image_data = data.get("imageData")
        image: Optional[ImagePayload] = None
        if isinstance(image_data, ImagePayload):
            image = image_data
        elif image_data:
            try:
                image = ImagePayload.from_data_url(str(image_data))
            except ValueError:
                # kept as an undecodable payload; the renderer skips the field
                image = ImagePayload(mime_type=UNREADABLE_MIME, data=b"")

        raw_id = data.get("id")
        return cls(
            id=int(raw_id) if raw_id is not None else new_field_id(),
            type=FieldType(str(data["type"]).lower()),
            page=int(data.get("page") or 1),
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            width=float(data.get("width", 0.0)),
            height=float(data.get("height", 0.0)),
            text=data.get("text"),
            date=data.get("date"),
            checked=bool(data.get("checked") or False),
            image=image,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "page": self.page,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "text": self.text,
            "date": self.date,
            "checked": self.checked,
            "imageData": self.image.to_data_url() if self.image else None,
        }
