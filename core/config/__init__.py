"""core.config – layered, typed configuration."""

from core.config.config_service import ConfigService, config_service

__all__ = ["ConfigService", "config_service"]
