# signing/models/field_enums.py
from __future__ import annotations
from enum import Enum


class FieldType(str, Enum):
    """Kind of a placed field; drives the draw dispatch."""
    SIGNATURE = "signature"
    TEXT = "text"
    DATE = "date"
    IMAGE = "image"
    CHECKBOX = "checkbox"
    RADIO = "radio"

    @property
    def carries_image(self) -> bool:
        return self in (FieldType.SIGNATURE, FieldType.IMAGE)

    @property
    def is_toggle(self) -> bool:
        return self in (FieldType.CHECKBOX, FieldType.RADIO)


class ImageFormat(str, Enum):
    PNG = "png"
    JPEG = "jpeg"


class Origin(str, Enum):
    """Where (0, 0) sits in the output space of a transform."""
    BOTTOM_LEFT = "bottom_left"   # PDF point space
    TOP_LEFT = "top_left"         # viewport / raster space
