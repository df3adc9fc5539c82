# signing/logic/signing_service.py
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from core.audit.logic.audit_repository import SqliteAuditRepository
from core.audit.logic.hashing import calculate_hash
from core.audit.models.audit_record import AuditRecord
from core.config.config_service import ConfigService, config_service
from core.contracts.audit import IAuditStore, PersistenceError

from ..adapters.output_store import DownloadHandle, FilesystemOutputStore, OutputStore
from ..exceptions.errors import LoadError, SerializationError
from ..models.render_models import RenderReport, RenderRequest, RenderResult
from ..models.render_style import RenderStyle
from .document_assembler import DocumentAssembler
from .naming_strategy import TimestampStrategy
from .page_renderer import PageRenderer

logger = logging.getLogger(__name__)

DOWNLOAD_ROUTE = "/api/download/"


@dataclass(frozen=True)
class SignResult:
    output_id: str
    source_hash: str
    output_hash: str
    page_count: int
    report: RenderReport
    signed_at: datetime
    audit: Optional[AuditRecord] = None
    note: Optional[str] = None

    @property
    def download_url(self) -> str:
        return f"{DOWNLOAD_ROUTE}{self.output_id}"

    def as_response(self) -> dict:
        """JSON body for the sign endpoint."""
        trail = {
            "originalHash": self.source_hash,
            "signedHash": self.output_hash,
            "timestamp": (self.audit.signed_at if self.audit else self.signed_at).isoformat(),
        }
        if self.note:
            trail["note"] = self.note
        return {"success": True, "signedPdfUrl": self.download_url, "auditTrail": trail}


class SigningService:
    """
    Request-level signing (no UI).

    Renders the field set into the source PDF, stores the output, and writes
    the audit trail on a best-effort basis: a failing audit store never fails
    the request. Independent requests share nothing but the store, so they
    can run in parallel via submit().
    """

    def __init__(self, *, config: Optional[ConfigService] = None,
                 assembler: Optional[DocumentAssembler] = None,
                 output_store: Optional[OutputStore] = None,
                 audit_store: Optional[IAuditStore] = None) -> None:
        cfg = config or config_service
        self._assembler = assembler or DocumentAssembler(
            PageRenderer(RenderStyle.from_config(cfg.rendering))
        )
        self._store = output_store or FilesystemOutputStore(
            cfg.storage.output_dir, TimestampStrategy(cfg.storage.filename_prefix)
        )
        if audit_store is None and cfg.audit.enabled:
            audit_store = SqliteAuditRepository(cfg.audit.database)
        self._audit_store = audit_store
        self._max_upload_bytes = int(cfg.service.max_upload_mb) * 1024 * 1024
        self._max_workers = max(1, int(cfg.service.max_workers))
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    # -------- Render only ----------------------------------------------------
    def render(self, request: RenderRequest) -> RenderResult:
        """Burn fields into the source PDF; nothing is stored."""
        if len(request.source) > self._max_upload_bytes:
            raise LoadError(
                f"Document exceeds upload limit ({len(request.source)} > {self._max_upload_bytes} bytes)"
            )
        return self._assembler.render(request)

    # -------- Signing --------------------------------------------------------
    def sign(self, request: RenderRequest, *, source_name: Optional[str] = None) -> SignResult:
        """
        Render, store and audit. Raises LoadError / SerializationError; every
        other problem degrades (skipped fields, missing audit record).
        """
        source_hash = calculate_hash(request.source)
        result = self.render(request)
        output_hash = calculate_hash(result.pdf_bytes)

        try:
            output_id = self._store.save(result.pdf_bytes, source_name=source_name)
        except OSError as exc:
            logger.error(f"Cannot store signed PDF: {exc}")
            raise SerializationError(f"Cannot store signed document: {exc}") from exc

        signed_at = datetime.now(timezone.utc)
        audit, note = self._audit({
            "source_hash": source_hash,
            "output_hash": output_hash,
            "source_file_name": source_name,
            "output_file_name": output_id,
            "field_types": request.field_types,
            "signature_count": request.signature_count,
            "signed_at": signed_at,
        })

        logger.info(f"Signed {source_name or '<upload>'} -> {output_id} ({output_hash[:12]})")
        return SignResult(
            output_id=output_id,
            source_hash=source_hash,
            output_hash=output_hash,
            page_count=result.page_count,
            report=result.report,
            signed_at=signed_at,
            audit=audit,
            note=note,
        )

    def submit(self, request: RenderRequest, *, source_name: Optional[str] = None) -> "Future[SignResult]":
        """Run sign() on a worker thread; the future carries the single result."""
        return self._get_executor().submit(self.sign, request, source_name=source_name)

    def download(self, output_id: str) -> DownloadHandle:
        return self._store.open(output_id)

    def shutdown(self, wait: bool = True) -> None:
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=wait)
                self._executor = None

    # -------- Internal helpers ----------------------------------------------
    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="signing"
                )
            return self._executor

    def _audit(self, payload: dict) -> tuple[Optional[AuditRecord], Optional[str]]:
        """Best-effort audit write; returns (record, note)."""
        if self._audit_store is None:
            return None, "Audit trail disabled"
        try:
            return self._audit_store.save(AuditRecord(**payload)), None
        except PersistenceError as exc:
            logger.warning(f"Audit trail save failed: {exc}")
            return None, "Audit trail not saved (store unavailable)"
