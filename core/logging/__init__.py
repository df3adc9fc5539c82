"""core.logging – stdlib logging setup driven by the [Logging] config section."""

from core.logging.logging_setup import setup_logging

__all__ = ["setup_logging"]
