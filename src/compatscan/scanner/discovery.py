"""File discovery — enumerate PHP sources under a scan target."""

from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

# Source suffixes handed to the linter, legacy variants included
PHP_EXTENSIONS = frozenset({".php", ".php3", ".php4", ".php5", ".phtml", ".inc"})


def is_php_file(path: str | Path) -> bool:
    """Check the extension against the recognised set, ignoring case."""
    return os.path.splitext(str(path))[1].lower() in PHP_EXTENSIONS


def discover_files(
    root: str | Path,
    exclusions: Iterable[str] = (),
) -> list[str]:
    """Return PHP files under ``root`` that match no exclusion pattern.

    A ``root`` that is itself a PHP file yields a one-element list. Order
    follows the filesystem walk and is not stable across calls if the tree
    changes in between.
    """
    root = str(root)
    patterns = [p.replace("\\", "/") for p in exclusions]

    if not os.path.isdir(root):
        return [root] if os.path.isfile(root) and is_php_file(root) else []

    return [
        path
        for path in _walk(root)
        if is_php_file(path) and not is_excluded(path, root, patterns)
    ]


def is_excluded(file_path: str, base_path: str, patterns: list[str]) -> bool:
    """Match the root-relative, ``/``-separated path against each pattern."""
    if not patterns:
        return False

    relative = os.path.relpath(file_path, base_path).replace("\\", "/")
    # fnmatchcase: '*' also crosses '/'
    return any(fnmatch.fnmatchcase(relative, pattern) for pattern in patterns)


def _walk(root: str) -> Iterator[str]:
    """Walk ``root`` yielding files only; unreadable subtrees are skipped."""

    def _on_error(err: OSError) -> None:
        logger.debug("Skipping %s: %s", err.filename, err)

    for dirpath, _dirs, files in os.walk(root, onerror=_on_error):
        for name in files:
            yield os.path.join(dirpath, name)
