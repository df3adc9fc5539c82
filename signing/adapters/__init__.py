"""Adapters for external collaborators.

Provides abstraction layers for:
- Output storage (flat directory of signed PDFs)
"""

from signing.adapters.output_store import DownloadHandle, FilesystemOutputStore, OutputStore

__all__ = [
    "DownloadHandle",
    "FilesystemOutputStore",
    "OutputStore",
]
