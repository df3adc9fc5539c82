"""
core/audit/logic/audit_repository.py
====================================

Thread-sicheres SQLite-Audit-Trail für Signiervorgänge.

- Reuses a single database connection instead of creating new ones per operation
- Connection is thread-safe via check_same_thread=False and explicit locking
- Schema is created lazily on first use, so constructing the repository never
  fails; every sqlite problem surfaces as PersistenceError
"""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
from pathlib import Path
from typing import List, Optional

from core.audit.models.audit_record import AuditRecord
from core.contracts.audit import IAuditStore, PersistenceError

logger = logging.getLogger(__name__)


class SqliteAuditRepository(IAuditStore):
    """Audit trail in a single SQLite table."""

    def __init__(self, db_path: Path | str) -> None:
        self._lock = threading.RLock()
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._schema_ready = False

    # ------------------------------------------------------------------ #
    #  Connection management (reuse single connection)                   #
    # ------------------------------------------------------------------ #
    def _get_connection(self) -> sqlite3.Connection:
        with self._lock:
            if self._conn is None:
                if str(self.db_path) != ":memory:":
                    os.makedirs(self.db_path.parent, exist_ok=True)
                self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
                self._conn.row_factory = sqlite3.Row
            if not self._schema_ready:
                self._ensure_db(self._conn)
                self._schema_ready = True
            return self._conn

    def close(self) -> None:
        """Close the database connection and release resources."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                self._schema_ready = False

    # ------------------------------------------------------------------ #
    #  Public API                                                         #
    # ------------------------------------------------------------------ #
    def save(self, record: AuditRecord) -> AuditRecord:
        try:
            with self._lock:
                conn = self._get_connection()
                cur = conn.execute(
                    """
                    INSERT INTO audit_trail
                        (source_hash, output_hash, source_file_name, output_file_name,
                         field_types, signature_count, signed_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.source_hash,
                        record.output_hash,
                        record.source_file_name,
                        record.output_file_name,
                        json.dumps(list(record.field_types)),
                        record.signature_count,
                        record.signed_at.isoformat(),
                    ),
                )
                conn.commit()
                saved = record.with_id(int(cur.lastrowid))
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Audit trail write failed: {exc}") from exc
        logger.info(f"Audit record {saved.id} stored for output {saved.output_hash[:12]}")
        return saved

    def fetch_recent(self, limit: int = 100) -> List[AuditRecord]:
        rows = self._query("SELECT * FROM audit_trail ORDER BY id DESC LIMIT ?", (limit,))
        return [AuditRecord.from_dict(dict(row)) for row in rows]

    def find_by_output_hash(self, output_hash: str) -> Optional[AuditRecord]:
        rows = self._query(
            "SELECT * FROM audit_trail WHERE output_hash = ? ORDER BY id DESC LIMIT 1",
            (output_hash,),
        )
        return AuditRecord.from_dict(dict(rows[0])) if rows else None

    # ------------------------------------------------------------------ #
    #  Interne Helfer                                                    #
    # ------------------------------------------------------------------ #
    def _query(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        try:
            with self._lock:
                return self._get_connection().execute(query, params).fetchall()
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Audit trail read failed: {exc}") from exc

    @staticmethod
    def _ensure_db(conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS audit_trail (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                source_hash TEXT NOT NULL,
                output_hash TEXT NOT NULL,
                source_file_name TEXT,
                output_file_name TEXT,
                field_types TEXT NOT NULL DEFAULT '[]',
                signature_count INTEGER NOT NULL DEFAULT 0,
                signed_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_audit_output_hash ON audit_trail(output_hash)"
        )
        conn.commit()
