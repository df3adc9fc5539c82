"""
audit_record.py

Dataclass für einen Audit-Eintrag eines Signiervorgangs.

• from_dict()  – baut das Objekt aus einem DB-/JSON-Dict
• as_dict()    – JSON-taugliches Dict (z. B. für die API-Antwort)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional


@dataclass(frozen=True)
class AuditRecord:
    source_hash: str
    output_hash: str
    source_file_name: Optional[str] = None
    output_file_name: Optional[str] = None
    field_types: List[str] = field(default_factory=list)
    signature_count: int = 0
    signed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: Optional[int] = None

    def with_id(self, record_id: int) -> "AuditRecord":
        return replace(self, id=record_id)

    # -------------------- Factory ------------------------------------ #
    @classmethod
    def from_dict(cls, data: dict) -> "AuditRecord":
        ts = data.get("signed_at") or datetime.now(timezone.utc)
        if isinstance(ts, str):
            ts = datetime.fromisoformat(ts)
        types = data.get("field_types") or []
        if isinstance(types, str):
            types = json.loads(types)
        return cls(
            id=data.get("id"),
            source_hash=data["source_hash"],
            output_hash=data["output_hash"],
            source_file_name=data.get("source_file_name"),
            output_file_name=data.get("output_file_name"),
            field_types=list(types),
            signature_count=int(data.get("signature_count") or 0),
            signed_at=ts,
        )

    # -------------------- Dict für API / Export ---------------------- #
    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "source_hash": self.source_hash,
            "output_hash": self.output_hash,
            "source_file_name": self.source_file_name,
            "output_file_name": self.output_file_name,
            "field_types": list(self.field_types),
            "signature_count": self.signature_count,
            "signed_at": self.signed_at.isoformat(),
        }
