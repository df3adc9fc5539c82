from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Optional

from .field_enums import ImageFormat

_MIME_TO_FORMAT = {
    "image/png": ImageFormat.PNG,
    "image/jpeg": ImageFormat.JPEG,
    "image/jpg": ImageFormat.JPEG,
}
_FORMAT_TO_MIME = {
    ImageFormat.PNG: "image/png",
    ImageFormat.JPEG: "image/jpeg",
}
UNREADABLE_MIME = "application/octet-stream"


@dataclass(frozen=True)
class ImagePayload:
    """
    Embedded image of a signature/image field.

    `mime_type` is kept verbatim; `format` is only set for the encodings the
    renderer can embed (PNG, JPEG). Anything else is carried along and
    rejected at draw time.
    """
    mime_type: str
    data: bytes

    @property
    def format(self) -> Optional[ImageFormat]:
        return _MIME_TO_FORMAT.get(self.mime_type.lower())

    @classmethod
    def from_bytes(cls, data: bytes, fmt: ImageFormat) -> "ImagePayload":
        return cls(mime_type=_FORMAT_TO_MIME[fmt], data=bytes(data))

    @classmethod
    def from_data_url(cls, url: str) -> "ImagePayload":
        """Parse `data:image/png;base64,....` as produced by a browser canvas."""
        if not url.startswith("data:") or "," not in url:
            raise ValueError("Not a data URL")
        header, _, body = url[5:].partition(",")
        parts = header.split(";")
        mime = parts[0] or "text/plain"
        if "base64" in parts[1:]:
            try:
                raw = base64.b64decode(body, validate=False)
            except (binascii.Error, ValueError) as exc:
                raise ValueError(f"Invalid base64 payload: {exc}") from exc
        else:
            raw = body.encode("utf-8")
        return cls(mime_type=mime, data=raw)

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{base64.b64encode(self.data).decode('ascii')}"
