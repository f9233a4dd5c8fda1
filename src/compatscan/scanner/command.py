"""Linter command construction — PHP binary detection and phpcs resolution."""

from __future__ import annotations

import logging
import os
import re
import shlex
import shutil
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform.startswith("win")

_CGI_BINARY = re.compile(r"php-cgi(\.exe)?$", re.IGNORECASE)

# Relative to the tool directory, in priority order
_LINTER_CANDIDATES = (
    ("vendor", "bin", "phpcs"),
    ("vendor", "squizlabs", "php_codesniffer", "bin", "phpcs"),
)


def php_binary_name(windows: bool = IS_WINDOWS) -> str:
    return "php.exe" if windows else "php"


def quote_arg(arg: str, windows: bool = IS_WINDOWS) -> str:
    """Quote one argument for the platform shell."""
    if windows:
        return '"' + arg.replace('"', '""') + '"'
    return shlex.quote(arg)


def render_command_line(args: list[str], windows: bool = IS_WINDOWS) -> str:
    """Render argv as a shell line with stderr folded into stdout."""
    return " ".join(quote_arg(a, windows) for a in args) + " 2>&1"


@dataclass
class LinterCommand:
    """An argv ready to execute plus the temp file-list it owns.

    Use as a context manager so the file-list artifact is removed on every
    exit path.
    """

    args: list[str]
    file_list: Path | None = None
    _cleaned: bool = field(default=False, repr=False)

    @property
    def command_line(self) -> str:
        return render_command_line(self.args)

    def cleanup(self) -> None:
        """Delete the file-list artifact, if any. Safe to call repeatedly."""
        if self._cleaned or self.file_list is None:
            return
        try:
            self.file_list.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove file list %s: %s", self.file_list, e)
        self._cleaned = True

    def __enter__(self) -> LinterCommand:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()


class CommandBuilder:
    """Builds phpcs invocations for PHPCompatibility scans."""

    def __init__(
        self,
        tool_dir: str | Path,
        temp_dir: str | Path,
        php_binary: str = "",
        php_bindir: str = "",
    ) -> None:
        self._tool_dir = Path(tool_dir)
        self._temp_dir = Path(temp_dir)
        self._php_binary = php_binary
        self._php_bindir = php_bindir

    def build(self, files: list[str], php_version: str) -> LinterCommand:
        """Build the command for ``files`` against ``php_version``.

        More than one file goes through ``--file-list`` to stay clear of
        command-line length limits; the caller owns the returned artifact.
        """
        args = [
            self.detect_php_binary(),
            str(self.resolve_linter_path()),
            "--extensions=php",
            "--standard=PHPCompatibility",
            "--runtime-set",
            "testVersion",
            php_version,
            "--no-cache",
        ]

        if len(files) > 1:
            file_list = self._write_file_list(files)
            if file_list is not None:
                args.append(f"--file-list={file_list}")
                return LinterCommand(args=args, file_list=file_list)
            # Fallback to individual file arguments
            args.extend(files)
        else:
            args.extend(files[:1])

        return LinterCommand(args=args)

    def version_command(self) -> LinterCommand:
        """Command that asks phpcs for its version."""
        return LinterCommand(
            args=[self.detect_php_binary(), str(self.resolve_linter_path()), "--version"]
        )

    def detect_php_binary(self) -> str:
        """Locate a PHP CLI binary, falling back to the bare name."""
        name = php_binary_name()
        php = self._php_binary if self._php_binary and os.path.exists(self._php_binary) else ""

        if not php and self._php_bindir:
            candidate = os.path.join(self._php_bindir.rstrip("\\/"), name)
            if os.path.exists(candidate):
                php = candidate

        # A php-cgi binary prints HTTP headers; prefer the sibling CLI
        if php and _CGI_BINARY.search(php):
            sibling = os.path.join(os.path.dirname(php), name)
            if os.path.exists(sibling):
                php = sibling

        if not php:
            php = shutil.which(name) or ""

        return php or "php"

    def resolve_linter_path(self) -> Path:
        """First existing phpcs entry point, else the primary candidate."""
        candidates = [self._tool_dir.joinpath(*parts) for parts in _LINTER_CANDIDATES]
        for candidate in candidates:
            if candidate.exists():
                return candidate
        return candidates[0]

    def _write_file_list(self, files: list[str]) -> Path | None:
        try:
            self._temp_dir.mkdir(parents=True, exist_ok=True)
            fd, name = tempfile.mkstemp(
                prefix="filelist_", suffix=".tmp", dir=self._temp_dir
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write("\n".join(files))
        except OSError as e:
            logger.warning("Could not write file list, passing files inline: %s", e)
            return None
        return Path(name)
