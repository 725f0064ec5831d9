"""Client configuration.

Loads from p0f-mcp.yaml if present, with environment variable overrides:
P0F_SOCKET, P0F_TIMEOUT, P0F_STRICT_CODES, P0F_LOG_LEVEL.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .transport.unix_connection import DEFAULT_SOCKET_PATH

DEFAULT_CONFIG_FILE = "p0f-mcp.yaml"

logger = logging.getLogger(__name__)


@dataclass
class DaemonConfig:
    socket_path: str = DEFAULT_SOCKET_PATH
    timeout: float | None = None  # seconds; None blocks
    strict_codes: bool = False


@dataclass
class LoggingConfig:
    level: str = "info"


@dataclass
class AppConfig:
    daemon: DaemonConfig = field(default_factory=DaemonConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_timeout(value: str) -> float | None:
    value = value.strip()
    if not value or value.lower() == "none":
        return None
    return float(value)


def _checked_level(level) -> str:
    """Return ``level`` if logging knows it, else fall back to info."""
    name = str(level).strip()
    if isinstance(logging.getLevelName(name.upper()), int):
        return name.lower()
    logger.warning("Unknown log level %r, using info", level)
    return "info"


def _apply_env_overrides(config: AppConfig) -> None:
    """Override config values from environment variables."""
    mapping = {
        "P0F_SOCKET": lambda v: setattr(config.daemon, "socket_path", v),
        "P0F_TIMEOUT": lambda v: setattr(config.daemon, "timeout", _parse_timeout(v)),
        "P0F_STRICT_CODES": lambda v: setattr(config.daemon, "strict_codes", _parse_bool(v)),
        "P0F_LOG_LEVEL": lambda v: setattr(config.logging, "level", v),
    }
    for env_key, setter in mapping.items():
        val = os.environ.get(env_key)
        if val is not None:
            setter(val)


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file + environment overrides."""
    config = AppConfig()

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_FILE)
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        for section in ("daemon", "logging"):
            target = getattr(config, section)
            for k, v in (raw.get(section) or {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)

    # Environment overrides always win
    _apply_env_overrides(config)
    config.logging.level = _checked_level(config.logging.level)
    return config
