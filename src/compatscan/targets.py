"""Scan targets — WordPress plugins and themes on disk."""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# WordPress reads only the start of a file for its header block
_HEADER_BYTES = 8192

_PLUGIN_NAME = re.compile(r"^[ \t/*#@]*Plugin Name:(.*)$", re.IGNORECASE | re.MULTILINE)
_THEME_NAME = re.compile(r"^[ \t/*#@]*Theme Name:(.*)$", re.IGNORECASE | re.MULTILINE)

PLUGIN = "plugin"
THEME = "theme"


@dataclass(frozen=True)
class Target:
    """A plugin or theme that can be scanned."""

    type: str
    slug: str
    name: str

    def to_dict(self) -> dict:
        return asdict(self)


def list_targets(plugins_dir: str | Path, themes_dir: str | Path) -> list[Target]:
    """Plugins first, then themes, each sorted by slug."""
    return list_plugins(plugins_dir) + list_themes(themes_dir)


def list_plugins(plugins_dir: str | Path) -> list[Target]:
    root = Path(plugins_dir)
    if not root.is_dir():
        return []

    candidates = sorted(root.glob("*.php")) + sorted(root.glob("*/*.php"))
    targets = []
    for path in candidates:
        name = _read_header(path, _PLUGIN_NAME)
        if name:
            slug = path.relative_to(root).as_posix()
            targets.append(Target(type=PLUGIN, slug=slug, name=name))
    return sorted(targets, key=lambda t: t.slug)


def list_themes(themes_dir: str | Path) -> list[Target]:
    root = Path(themes_dir)
    if not root.is_dir():
        return []

    targets = []
    for theme_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        stylesheet = theme_dir / "style.css"
        if not stylesheet.is_file():
            continue
        name = _read_header(stylesheet, _THEME_NAME) or theme_dir.name
        targets.append(Target(type=THEME, slug=theme_dir.name, name=name))
    return targets


def resolve_target(
    target_type: str,
    slug: str,
    plugins_dir: str | Path,
    themes_dir: str | Path,
) -> Path | None:
    """Map a (type, slug) pair to the path to scan.

    Returns None for unknown types, missing paths, or slugs that would
    leave the plugins/themes root.
    """
    if not slug:
        return None

    if target_type == PLUGIN:
        root = Path(plugins_dir).resolve()
        plugin_file = (root / slug).resolve()
        if not _within(plugin_file, root) or not plugin_file.exists():
            return None
        # Single-file plugins sit directly in the root; scan just that file
        if plugin_file.parent == root:
            return plugin_file
        return plugin_file.parent
    if target_type == THEME:
        root = Path(themes_dir).resolve()
        theme_dir = (root / slug).resolve()
        if not _within(theme_dir, root) or not theme_dir.is_dir():
            return None
        return theme_dir

    return None


def _within(path: Path, root: Path) -> bool:
    return path != root and path.is_relative_to(root)


def _read_header(path: Path, pattern: re.Pattern[str]) -> str:
    try:
        with path.open("r", encoding="utf-8", errors="ignore") as fh:
            head = fh.read(_HEADER_BYTES)
    except OSError as e:
        logger.debug("Skipping %s: %s", path, e)
        return ""
    m = pattern.search(head)
    if not m:
        return ""
    # Strip a trailing comment terminator left on the header line
    return re.sub(r"\s*(?:\*/|\?>).*$", "", m.group(1)).strip()
