"""core/contracts/audit.py
======================

Audit trail contracts.

A signing run produces one audit record (content hashes of source and output
plus metadata). Sinks are replaceable (SQLite, remote, in-memory for tests);
a failing sink must never fail the render, so every implementation reports
problems through :class:`PersistenceError` only.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from core.audit.models.audit_record import AuditRecord


class PersistenceError(Exception):
    """Audit trail could not be written or read."""


class IAuditStore(ABC):
    """Write-mostly audit trail store."""

    @abstractmethod
    def save(self, record: "AuditRecord") -> "AuditRecord":
        """Persist *record* and return it with its storage id set."""

    @abstractmethod
    def fetch_recent(self, limit: int = 100) -> List["AuditRecord"]:
        """Newest records first."""

    @abstractmethod
    def find_by_output_hash(self, output_hash: str) -> Optional["AuditRecord"]:
        """Look up the record of a signed document by its SHA-256."""
