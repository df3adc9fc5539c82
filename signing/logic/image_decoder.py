from __future__ import annotations

from io import BytesIO

from PIL import Image, UnidentifiedImageError

from ..exceptions.errors import UnsupportedImageFormat
from ..models.field_enums import ImageFormat
from ..models.image_payload import ImagePayload

# Pillow plugin ids per accepted payload format
_PIL_FORMATS = {
    ImageFormat.PNG: ["PNG"],
    ImageFormat.JPEG: ["JPEG"],
}


def decode_image(payload: ImagePayload) -> Image.Image:
    """
    Decode a PNG/JPEG payload into a Pillow image ready for embedding.
    PNG keeps its alpha channel (RGBA), JPEG becomes RGB.
    """
    fmt = payload.format
    if fmt is None:
        raise UnsupportedImageFormat(f"Unsupported image type '{payload.mime_type}'")
    try:
        img = Image.open(BytesIO(payload.data), formats=_PIL_FORMATS[fmt])
        img.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise UnsupportedImageFormat(f"Cannot decode {fmt.value} payload: {exc}") from exc
    return img.convert("RGBA" if fmt == ImageFormat.PNG else "RGB")
