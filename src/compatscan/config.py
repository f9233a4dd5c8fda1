"""Global configuration — XDG paths, YAML file, env vars, defaults."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def _default_data_dir() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "compatscan"
    return Path.home() / ".local" / "share" / "compatscan"


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "compatscan"
    return Path.home() / ".config" / "compatscan"


@dataclass
class CompatScanConfig:
    """Application-wide configuration."""

    data_dir: Path = field(default_factory=_default_data_dir)
    config_dir: Path = field(default_factory=_default_config_dir)
    # Interpreter and linter resolution
    php_binary: str = ""
    php_bindir: str = "/usr/bin"
    tool_dir: Path = field(default_factory=Path.cwd)
    # Scan targets (WordPress layout)
    plugins_dir: Path = field(default_factory=lambda: Path("wp-content/plugins"))
    themes_dir: Path = field(default_factory=lambda: Path("wp-content/themes"))
    default_php_version: str = "8.3"
    default_batch_size: int = 50
    session_ttl: float = 3600.0
    exec_time_limit: float | None = 300.0
    allow_exec: bool = True
    session_backend: str = "sqlite"
    web_host: str = "127.0.0.1"  # loopback only
    web_port: int = 8471
    verbose: bool = False

    @property
    def temp_dir(self) -> Path:
        """Scratch area for file-list artifacts."""
        return self.data_dir / "tmp"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "compatscan.db"

    @classmethod
    def load(cls, path: str | Path | None = None) -> CompatScanConfig:
        """Load config from an optional YAML file, then environment variables."""
        config = cls()

        config_file = Path(path) if path else config.config_dir / "config.yaml"
        if config_file.is_file():
            config._apply_file(config_file)
        elif path:
            raise FileNotFoundError(f"Config file not found: {config_file}")

        config._apply_env()
        return config

    def _apply_file(self, config_file: Path) -> None:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError("Config YAML must be a mapping")

        known = {f.name: f for f in fields(self)}
        for key, value in data.items():
            if key not in known or key == "web_host":
                logger.warning("Ignoring unknown config key '%s'", key)
                continue
            setattr(self, key, _coerce(getattr(self, key), value))
        logger.debug("Loaded config from %s", config_file)

    def _apply_env(self) -> None:
        env_map = {
            "COMPATSCAN_DATA_DIR": "data_dir",
            "COMPATSCAN_PHP_BINARY": "php_binary",
            "COMPATSCAN_PHP_BINDIR": "php_bindir",
            "COMPATSCAN_TOOL_DIR": "tool_dir",
            "COMPATSCAN_PLUGINS_DIR": "plugins_dir",
            "COMPATSCAN_THEMES_DIR": "themes_dir",
            "COMPATSCAN_PHP_VERSION": "default_php_version",
            "COMPATSCAN_BATCH_SIZE": "default_batch_size",
            "COMPATSCAN_SESSION_TTL": "session_ttl",
            "COMPATSCAN_EXEC_TIME_LIMIT": "exec_time_limit",
            "COMPATSCAN_ALLOW_EXEC": "allow_exec",
            "COMPATSCAN_SESSION_BACKEND": "session_backend",
            "COMPATSCAN_WEB_PORT": "web_port",
        }
        for env_name, attr in env_map.items():
            raw = os.environ.get(env_name)
            if raw:
                setattr(self, attr, _coerce(getattr(self, attr), raw))


def _coerce(current: object, value: object) -> object:
    """Convert a raw YAML/env value to the type of the current setting."""
    if value is None:
        return None
    if isinstance(current, bool):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUTHY
    if isinstance(current, Path):
        return Path(str(value)).expanduser()
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float) or current is None:
        return float(value)
    return str(value)
