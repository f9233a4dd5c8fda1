"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from compatscan.config import CompatScanConfig


def _write(path: Path, content: str = "<?php\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def php_tree(tmp_path: Path) -> Path:
    """A plugin-like tree with sources inside and outside vendor/."""
    root = tmp_path / "plugin"
    _write(root / "main.php")
    _write(root / "includes" / "helper.inc")
    _write(root / "templates" / "page.PHTML")
    _write(root / "vendor" / "lib" / "dep.php")
    _write(root / "assets" / "app.js", "console.log(1);\n")
    _write(root / "README.md", "# readme\n")
    return root


@pytest.fixture
def wp_root(tmp_path: Path) -> Path:
    """A minimal wp-content layout with two plugins and one theme."""
    content = tmp_path / "wp-content"
    _write(
        content / "plugins" / "akismet" / "akismet.php",
        "<?php\n/*\nPlugin Name: Akismet Anti-spam\nVersion: 5.0\n*/\n",
    )
    _write(content / "plugins" / "akismet" / "class.akismet.php")
    _write(
        content / "plugins" / "hello.php",
        "<?php\n/**\n * Plugin Name: Hello Dolly\n */\n",
    )
    _write(content / "plugins" / "index.php", "<?php\n// Silence is golden.\n")
    _write(
        content / "themes" / "twentytwenty" / "style.css",
        "/*\nTheme Name: Twenty Twenty\n*/\n",
    )
    _write(content / "themes" / "twentytwenty" / "functions.php")
    (content / "themes" / "broken").mkdir()
    return content


@pytest.fixture
def config(tmp_path: Path, wp_root: Path) -> CompatScanConfig:
    tool_dir = tmp_path / "tools"
    return CompatScanConfig(
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
        php_binary="",
        php_bindir=str(tmp_path / "no-bin"),
        tool_dir=tool_dir,
        plugins_dir=wp_root / "plugins",
        themes_dir=wp_root / "themes",
        session_backend="memory",
    )
