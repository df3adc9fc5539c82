"""Signing feature exceptions.

Only LoadError and SerializationError abort a render. The per-field kinds
(InvalidGeometry, UnsupportedImageFormat, PageOutOfRange) are caught by the
page renderer and end up in the render report.
"""
from __future__ import annotations

from typing import Iterable

from core.contracts.audit import PersistenceError  # noqa: F401  (re-export)


class SigningError(Exception):
    """Base exception for the signing feature."""


# ---- fatal for a render request -------------------------------------------
class LoadError(SigningError):
    """Source bytes are not a parseable (or openable) PDF."""


class SerializationError(SigningError):
    """Writing the mutated document to bytes failed."""


# ---- per field ------------------------------------------------------------
class InvalidGeometry(SigningError):
    """Zero or negative dimension passed to the aspect-fit calculation."""


class UnsupportedImageFormat(SigningError):
    """Image payload is neither PNG nor JPEG, or cannot be decoded."""


class PageOutOfRange(SigningError):
    """A field references a page the document does not have."""

    def __init__(self, page: int, page_count: int) -> None:
        super().__init__(f"Page {page} out of range (document has {page_count} pages)")
        self.page = page
        self.page_count = page_count


# ---- collaborators --------------------------------------------------------
class NotFound(SigningError):
    """Download identifier has no backing bytes."""


class FieldNotFound(SigningError, KeyError):
    """No field with the given id in the store."""

    def __str__(self) -> str:
        return Exception.__str__(self)


# ---- caller preconditions -------------------------------------------------
class EmptyFieldSetError(SigningError):
    """Finalization requested without any placed field."""


class UnsignedSignatureError(SigningError):
    """At least one signature field has no image attached."""

    def __init__(self, field_ids: Iterable[int]) -> None:
        self.field_ids = list(field_ids)
        super().__init__(f"Signature fields without signature: {self.field_ids}")
