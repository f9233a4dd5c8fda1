"""Application context — wires the collaborators once at startup."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import aiosqlite

from compatscan.config import CompatScanConfig
from compatscan.options import (
    MemoryOptionsBackend,
    OptionsBackend,
    OptionsService,
    ScanOptions,
    normalize_batch_size,
    normalize_php_version,
)
from compatscan.scanner.command import CommandBuilder
from compatscan.scanner.engine import Scanner
from compatscan.scanner.runner import ProcessRunner
from compatscan.session.manager import ScanSessionManager
from compatscan.session.store import MemorySessionStore, SessionStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a request handler or CLI command needs."""

    config: CompatScanConfig
    sessions: ScanSessionManager
    scanner: Scanner
    options: OptionsService
    db: aiosqlite.Connection | None = None

    async def close(self) -> None:
        if self.db is not None:
            await self.db.close()
            self.db = None


def build_context(
    config: CompatScanConfig,
    store: SessionStore | None = None,
    options_backend: OptionsBackend | None = None,
    db: aiosqlite.Connection | None = None,
) -> AppContext:
    """Assemble the context; storage defaults to in-process memory."""
    sessions = ScanSessionManager(
        store if store is not None else MemorySessionStore(),
        ttl=config.session_ttl,
    )
    defaults = ScanOptions(
        batch_size=normalize_batch_size(config.default_batch_size),
        php_version=normalize_php_version(config.default_php_version),
    )
    scanner = Scanner(
        builder=CommandBuilder(
            tool_dir=config.tool_dir,
            temp_dir=config.temp_dir,
            php_binary=config.php_binary,
            php_bindir=config.php_bindir,
        ),
        runner=ProcessRunner(
            time_limit=config.exec_time_limit,
            allow_exec=config.allow_exec,
        ),
        sessions=sessions,
        default_php_version=defaults.php_version,
        default_batch_size=defaults.batch_size,
    )
    return AppContext(
        config=config,
        sessions=sessions,
        scanner=scanner,
        options=OptionsService(options_backend or MemoryOptionsBackend(), defaults),
        db=db,
    )


async def open_context(config: CompatScanConfig) -> AppContext:
    """Build the context on the configured session backend."""
    if config.session_backend == "memory":
        logger.info("Using in-memory session store")
        return build_context(config)

    from compatscan.storage.db import get_db
    from compatscan.storage.repos import OptionsRepo, SqliteSessionStore

    db = await get_db(config.db_path)
    logger.info("Using SQLite session store at %s", config.db_path)
    return build_context(
        config,
        store=SqliteSessionStore(db),
        options_backend=OptionsRepo(db),
        db=db,
    )
