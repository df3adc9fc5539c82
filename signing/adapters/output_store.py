"""Output storage for signed documents.

Maps an opaque output identifier (the stored file name) to bytes. The
identifier is what the download endpoint receives.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from signing.exceptions.errors import NotFound
from signing.logic.naming_strategy import NamingContext, NamingStrategy, TimestampStrategy

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


@dataclass
class DownloadHandle:
    """Open stream plus the headers a download response needs."""
    identifier: str
    filename: str
    content_type: str
    size: int
    stream: BinaryIO

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'

    def read(self) -> bytes:
        with self.stream:
            return self.stream.read()


class OutputStore(ABC):
    """Abstract storage for rendered documents."""

    @abstractmethod
    def save(self, data: bytes, *, source_name: Optional[str] = None) -> str:
        """
        Persist output bytes.

        Returns:
            Opaque identifier for open()
        """
        raise NotImplementedError

    @abstractmethod
    def open(self, identifier: str) -> DownloadHandle:
        """Open stored bytes; NotFound if the identifier has none."""
        raise NotImplementedError


class FilesystemOutputStore(OutputStore):
    """Flat directory of signed PDFs."""

    def __init__(self, root_path: str | Path, naming: Optional[NamingStrategy] = None):
        self._root = Path(root_path)
        self._root.mkdir(parents=True, exist_ok=True)
        self._naming = naming or TimestampStrategy()
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def save(self, data: bytes, *, source_name: Optional[str] = None) -> str:
        with self._lock:
            ctx = NamingContext.now(source_name)
            name = self._naming.propose_name(ctx)
            # same millisecond twice: move on to the next free stamp
            while (self._root / name).exists():
                ctx = NamingContext(source_name=source_name, timestamp_ms=ctx.timestamp_ms + 1)
                name = self._naming.propose_name(ctx)

            tmp_path = self._root / f".{name}.part"
            tmp_path.write_bytes(data)
            tmp_path.replace(self._root / name)
        logger.info(f"Stored output {name} ({len(data)} bytes)")
        return name

    def open(self, identifier: str) -> DownloadHandle:
        path = self._resolve(identifier)
        if path is None or not path.is_file():
            logger.warning(f"Download requested for unknown output '{identifier}'")
            raise NotFound(f"No output stored under '{identifier}'")
        return DownloadHandle(
            identifier=identifier,
            filename=path.name,
            content_type=PDF_CONTENT_TYPE,
            size=path.stat().st_size,
            stream=path.open("rb"),
        )

    def _resolve(self, identifier: str) -> Optional[Path]:
        """Only plain file names inside the root are addressable."""
        if not identifier or identifier.startswith(".") or Path(identifier).name != identifier:
            return None
        if "/" in identifier or "\\" in identifier:
            return None
        return self._root / identifier
