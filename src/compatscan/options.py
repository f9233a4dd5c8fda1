"""Persisted scan options — validation, clamping and storage."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

VALID_BATCH_SIZES = (10, 25, 50, 75, 100)
VALID_PHP_VERSIONS = ("7.4", "8.0", "8.1", "8.2", "8.3", "8.4")
VALID_REPORT_MODES = ("detailed", "summary")

DEFAULT_BATCH_SIZE = 50
DEFAULT_PHP_VERSION = "8.3"
DEFAULT_REPORT_MODE = "detailed"

VENDOR_EXCLUSIONS = ("vendor/*",)

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ScanOptions:
    """Process-wide scan settings, not tied to any session."""

    report_mode: str = DEFAULT_REPORT_MODE
    batch_size: int = DEFAULT_BATCH_SIZE
    php_version: str = DEFAULT_PHP_VERSION
    skip_vendor: bool = True

    @property
    def exclude_patterns(self) -> tuple[str, ...]:
        return VENDOR_EXCLUSIONS if self.skip_vendor else ()

    def to_dict(self) -> dict:
        return {
            "report_mode": self.report_mode,
            "batch_size": self.batch_size,
            "php_version": self.php_version,
            "skip_vendor": self.skip_vendor,
        }

    def to_storage(self) -> dict[str, str]:
        return {
            "report_mode": self.report_mode,
            "batch_size": str(self.batch_size),
            "php_version": self.php_version,
            "skip_vendor": "1" if self.skip_vendor else "0",
        }


def normalize_batch_size(value: object, default: int = DEFAULT_BATCH_SIZE) -> int:
    try:
        size = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return size if size in VALID_BATCH_SIZES else default


def normalize_php_version(value: object, default: str = DEFAULT_PHP_VERSION) -> str:
    version = str(value).strip() if value is not None else ""
    return version if version in VALID_PHP_VERSIONS else default


def parse_flag(value: object, default: bool = True) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def normalize_options(
    raw: Mapping[str, object],
    defaults: ScanOptions | None = None,
) -> ScanOptions:
    """Build options from client input; invalid values fall back to defaults."""
    defaults = defaults or ScanOptions()

    report_mode = str(raw.get("report_mode") or defaults.report_mode).strip()
    if report_mode not in VALID_REPORT_MODES:
        report_mode = DEFAULT_REPORT_MODE

    return ScanOptions(
        report_mode=report_mode,
        batch_size=normalize_batch_size(
            raw.get("batch_size", defaults.batch_size), defaults.batch_size
        ),
        php_version=normalize_php_version(
            raw.get("php_version", defaults.php_version), defaults.php_version
        ),
        skip_vendor=parse_flag(raw.get("skip_vendor"), defaults.skip_vendor),
    )


class OptionsBackend(Protocol):
    async def save(self, values: dict[str, str]) -> None: ...

    async def load(self) -> dict[str, str]: ...


class MemoryOptionsBackend:
    """In-process stand-in for the options table."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    async def save(self, values: dict[str, str]) -> None:
        self._values.update(values)

    async def load(self) -> dict[str, str]:
        return dict(self._values)


class OptionsService:
    """Loads and saves ``ScanOptions`` through a key/value backend."""

    def __init__(self, backend: OptionsBackend, defaults: ScanOptions) -> None:
        self._backend = backend
        self._defaults = defaults

    @property
    def defaults(self) -> ScanOptions:
        return self._defaults

    async def load(self) -> ScanOptions:
        stored = await self._backend.load()
        return normalize_options(stored, self._defaults)

    async def save(self, raw: Mapping[str, object]) -> ScanOptions:
        options = normalize_options(raw, self._defaults)
        await self._backend.save(options.to_storage())
        logger.info("Saved scan options: %s", options.to_dict())
        return options
