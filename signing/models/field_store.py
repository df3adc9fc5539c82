# signing/models/field_store.py
from __future__ import annotations

from collections import OrderedDict
from typing import Any, Iterator

from ..exceptions.errors import FieldNotFound
from .field import Field
from .field_enums import FieldType


class FieldStore:
    """
    Ordered, id-keyed collection of fields. Fields themselves are immutable;
    update() swaps in a new instance under the same id and position.
    """

    def __init__(self) -> None:
        self._fields: "OrderedDict[int, Field]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(tuple(self._fields.values()))

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._fields

    def add(self, field: Field) -> Field:
        if field.id in self._fields:
            raise ValueError(f"Duplicate field id {field.id}")
        self._fields[field.id] = field
        return field

    def get(self, field_id: int) -> Field:
        try:
            return self._fields[field_id]
        except KeyError:
            raise FieldNotFound(f"No field with id {field_id}") from None

    def update(self, field_id: int, **changes: Any) -> Field:
        updated = self.get(field_id).with_changes(**changes)
        self._fields[field_id] = updated
        return updated

    def remove(self, field_id: int) -> bool:
        return self._fields.pop(field_id, None) is not None

    def clear(self) -> None:
        self._fields.clear()

    def for_page(self, page: int) -> list[Field]:
        return [f for f in self._fields.values() if f.page == page]

    def snapshot(self) -> tuple[Field, ...]:
        """Immutable view handed to the renderer."""
        return tuple(self._fields.values())

    def unsigned_signature_fields(self) -> list[Field]:
        return [f for f in self._fields.values()
                if f.type == FieldType.SIGNATURE and f.image is None]
