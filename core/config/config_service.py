"""Typed, layered configuration loader with precedence handling."""
from __future__ import annotations

import os
import configparser
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Optional, Tuple, get_type_hints

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

def _find_project_root() -> Path:
    here = Path(__file__).resolve()
    for parent in here.parents:
        if (parent / "core").is_dir() and (parent / "signing").is_dir():
            return parent
    return here.parents[2]

PROJECT_ROOT = _find_project_root()
CONFIG_DIR = Path(__file__).resolve().parent
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
ENV_PREFIX = "SIE_"
ENV_CONFIG_PATH = "SIE_CONFIG"


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "Rendering": {
        "font_name": "Helvetica",
        "font_size": "10",
        "text_inset": "2",
        "baseline_drop": "12",
        "border_width": "1",
        "check_thickness": "1.5",
        "radio_dot_ratio": str(1.0 / 3.0),
        "date_format": "%Y-%m-%d",
    },
    "Storage": {
        "output_dir": (PROJECT_ROOT / "uploads").as_posix(),
        "filename_prefix": "signed_",
    },
    "Audit": {
        "enabled": "true",
        "database": (PROJECT_ROOT / "databases" / "audit.db").as_posix(),
    },
    "Service": {
        "max_workers": "4",
        "max_upload_mb": "50",
        "default_viewport_width": "800",
        "default_viewport_height": "600",
    },
    "Logging": {
        "level": "INFO",
        "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class RenderingConfig:
    font_name: str = "Helvetica"
    font_size: float = 10.0
    text_inset: float = 2.0
    baseline_drop: float = 12.0
    border_width: float = 1.0
    check_thickness: float = 1.5
    radio_dot_ratio: float = 1.0 / 3.0
    date_format: str = "%Y-%m-%d"


@dataclass
class StorageConfig:
    output_dir: Path = PROJECT_ROOT / "uploads"
    filename_prefix: str = "signed_"


@dataclass
class AuditConfig:
    enabled: bool = True
    database: Path = PROJECT_ROOT / "databases" / "audit.db"


@dataclass
class ServiceConfig:
    max_workers: int = 4
    max_upload_mb: int = 50
    default_viewport_width: float = 800.0
    default_viewport_height: float = 600.0


@dataclass
class LoggingConfig:
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _new_parser() -> configparser.ConfigParser:
    # no interpolation: date/log formats contain '%'
    return configparser.ConfigParser(interpolation=None)


def _cp_to_dict(cp: configparser.ConfigParser) -> Dict[str, Dict[str, Any]]:
    data: Dict[str, Dict[str, Any]] = {}
    for section in cp.sections():
        data[section] = {k: v for k, v in cp.items(section)}
    return data


def _read_ini(path: Path) -> Dict[str, Dict[str, Any]]:
    cp = _new_parser()
    cp.read(path, encoding="utf-8")
    return _cp_to_dict(cp)


def _apply(target: Dict[str, Dict[str, Any]], source: Dict[str, Dict[str, Any]],
           layer: str, origin: str,
           sources: Dict[Tuple[str, str], Dict[str, str]]) -> None:
    for section, items in source.items():
        sec = target.setdefault(section, {})
        for key, value in items.items():
            sec[key] = value
            sources[(section, key)] = {"layer": layer, "source": origin}


def _cast(value: Any, typ: type) -> Any:
    if typ is Path:
        return Path(str(value)).expanduser()
    if typ is bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ is int:
        return int(value)
    if typ is float:
        return float(value)
    return typ(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    hints = get_type_hints(cls)
    kwargs = {}
    for field in fields(cls):
        val = data.get(field.name, field.default)
        kwargs[field.name] = _cast(val, hints[field.name])
    return cls(**kwargs)


def _env_overlays(environ: Optional[Dict[str, str]] = None) -> Dict[str, Dict[str, Any]]:
    """SIE_RENDERING__FONT_SIZE=11 -> {"Rendering": {"font_size": "11"}}"""
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in (os.environ if environ is None else environ).items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        remainder = env_key[len(ENV_PREFIX):]
        parts = remainder.split("__", 1)
        if len(parts) != 2:
            continue
        section, key = parts
        section = section.title()
        key = key.lower()
        result.setdefault(section, {})[key] = value
    return result


def _user_config_path() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "SignatureEngine" / "config.ini"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "signature-engine" / "config.ini"


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Facade merging layered configuration with type safety."""

    def __init__(self, config_path: Optional[Path] = None, *,
                 environ: Optional[Dict[str, str]] = None,
                 use_user_config: bool = True) -> None:
        self._lock = RLock()
        self._config_path = Path(config_path) if config_path else None
        self._environ = environ
        self._use_user_config = use_user_config
        self.reload()

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}
            env_source = os.environ if self._environ is None else self._environ

            # Layer 0: embedded defaults
            _apply(merged, _DEFAULTS, "code", "embedded", sources)

            # Layer 1: defaults.ini
            if DEFAULTS_INI.exists():
                _apply(merged, _read_ini(DEFAULTS_INI), "defaults.ini", str(DEFAULTS_INI), sources)

            # Layer 2: environment variables
            _apply(merged, _env_overlays(env_source), "env", "os.environ", sources)

            # Layer 3: explicit config file
            explicit = self._config_path or (
                Path(env_source[ENV_CONFIG_PATH]) if env_source.get(ENV_CONFIG_PATH) else None
            )
            if explicit is not None and explicit.exists():
                _apply(merged, _read_ini(explicit), "file", str(explicit), sources)

            # Layer 4: user overrides
            user_ini = _user_config_path()
            if self._use_user_config and user_ini.exists():
                _apply(merged, _read_ini(user_ini), "user", str(user_ini), sources)

            self._merged = merged
            self._sources = sources

            self.rendering = _build_dataclass(RenderingConfig, merged.get("Rendering", {}))
            self.storage = _build_dataclass(StorageConfig, merged.get("Storage", {}))
            self.audit = _build_dataclass(AuditConfig, merged.get("Audit", {}))
            self.service = _build_dataclass(ServiceConfig, merged.get("Service", {}))
            self.logging = _build_dataclass(LoggingConfig, merged.get("Logging", {}))

    # ------------------------------------------------------------------ #
    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def meta_source(self, section: str, key: str) -> Dict[str, str] | None:
        return self._sources.get((section, key))


# Global singleton
config_service = ConfigService()
