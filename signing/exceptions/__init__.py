"""Signing feature exceptions."""

from signing.exceptions.errors import (
    EmptyFieldSetError,
    FieldNotFound,
    InvalidGeometry,
    LoadError,
    NotFound,
    PageOutOfRange,
    PersistenceError,
    SerializationError,
    SigningError,
    UnsignedSignatureError,
    UnsupportedImageFormat,
)

__all__ = [
    "EmptyFieldSetError",
    "FieldNotFound",
    "InvalidGeometry",
    "LoadError",
    "NotFound",
    "PageOutOfRange",
    "PersistenceError",
    "SerializationError",
    "SigningError",
    "UnsignedSignatureError",
    "UnsupportedImageFormat",
]
