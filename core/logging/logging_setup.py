"""
core/logging/logging_setup.py
=============================

Configures the root logger once per process. Modules themselves only do
``logger = logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.config.config_service import LoggingConfig, config_service


def setup_logging(cfg: Optional[LoggingConfig] = None, *, level: Optional[str] = None) -> None:
    """Apply level/format from config; an explicit *level* wins (CLI --verbose)."""
    cfg = cfg or config_service.logging
    name = (level or cfg.level or "INFO").upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=cfg.format, force=True)
    # pypdf is chatty about harmless structure issues in real-world files
    logging.getLogger("pypdf").setLevel(max(numeric, logging.WARNING))
