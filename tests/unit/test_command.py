"""Tests for linter command construction."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from compatscan.scanner.command import (
    CommandBuilder,
    LinterCommand,
    quote_arg,
    render_command_line,
)


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


@pytest.fixture
def builder(tmp_path: Path) -> CommandBuilder:
    php = _touch(tmp_path / "bin" / "php")
    return CommandBuilder(
        tool_dir=tmp_path / "tools",
        temp_dir=tmp_path / "tmp",
        php_binary=str(php),
    )


class TestBuild:
    def test_fixed_flags(self, builder: CommandBuilder, tmp_path: Path):
        cmd = builder.build(["/src/a.php"], "8.1")
        assert cmd.args[:8] == [
            str(tmp_path / "bin" / "php"),
            str(tmp_path / "tools" / "vendor" / "bin" / "phpcs"),
            "--extensions=php",
            "--standard=PHPCompatibility",
            "--runtime-set",
            "testVersion",
            "8.1",
            "--no-cache",
        ]

    def test_single_file_is_positional(self, builder: CommandBuilder):
        cmd = builder.build(["/src/my file.php"], "8.3")
        assert cmd.args[-1] == "/src/my file.php"
        assert cmd.file_list is None
        assert "'/src/my file.php'" in cmd.command_line

    def test_multiple_files_use_file_list(self, builder: CommandBuilder, tmp_path: Path):
        files = ["/src/a.php", "/src/b.php", "/src/c.php"]
        cmd = builder.build(files, "8.3")

        assert cmd.file_list is not None
        assert cmd.file_list.parent == tmp_path / "tmp"
        assert cmd.file_list.name.startswith("filelist_")
        assert cmd.args[-1] == f"--file-list={cmd.file_list}"
        assert cmd.file_list.read_text() == "\n".join(files)
        assert not any(f in cmd.args for f in files)

        cmd.cleanup()
        assert not cmd.file_list.exists()

    def test_context_manager_removes_file_list(self, builder: CommandBuilder):
        with builder.build(["/a.php", "/b.php"], "8.3") as cmd:
            file_list = cmd.file_list
            assert file_list.exists()
        assert not file_list.exists()

    def test_context_manager_removes_file_list_on_error(self, builder: CommandBuilder):
        with pytest.raises(RuntimeError):
            with builder.build(["/a.php", "/b.php"], "8.3") as cmd:
                file_list = cmd.file_list
                raise RuntimeError("boom")
        assert not file_list.exists()

    def test_cleanup_is_idempotent(self, builder: CommandBuilder):
        cmd = builder.build(["/a.php", "/b.php"], "8.3")
        cmd.cleanup()
        cmd.cleanup()

    def test_unwritable_temp_dir_falls_back_to_arguments(self, tmp_path: Path):
        blocker = _touch(tmp_path / "not-a-dir")
        builder = CommandBuilder(tool_dir=tmp_path, temp_dir=blocker / "tmp")
        cmd = builder.build(["/a.php", "/b.php"], "8.3")
        assert cmd.file_list is None
        assert cmd.args[-2:] == ["/a.php", "/b.php"]


class TestDetectPhpBinary:
    def test_configured_binary_wins(self, builder: CommandBuilder, tmp_path: Path):
        assert builder.detect_php_binary() == str(tmp_path / "bin" / "php")

    def test_bindir_used_when_configured_binary_missing(self, tmp_path: Path):
        php = _touch(tmp_path / "usr" / "bin" / "php")
        builder = CommandBuilder(
            tool_dir=tmp_path,
            temp_dir=tmp_path,
            php_binary=str(tmp_path / "missing" / "php"),
            php_bindir=str(php.parent),
        )
        assert builder.detect_php_binary() == str(php)

    def test_cgi_prefers_sibling_cli(self, tmp_path: Path):
        cgi = _touch(tmp_path / "bin" / "php-cgi")
        cli = _touch(tmp_path / "bin" / "php")
        builder = CommandBuilder(tool_dir=tmp_path, temp_dir=tmp_path, php_binary=str(cgi))
        assert builder.detect_php_binary() == str(cli)

    def test_cgi_kept_without_sibling(self, tmp_path: Path):
        cgi = _touch(tmp_path / "bin" / "php-cgi")
        builder = CommandBuilder(tool_dir=tmp_path, temp_dir=tmp_path, php_binary=str(cgi))
        assert builder.detect_php_binary() == str(cgi)

    def test_path_search(self, tmp_path: Path):
        builder = CommandBuilder(tool_dir=tmp_path, temp_dir=tmp_path)
        with patch(
            "compatscan.scanner.command.shutil.which", return_value="/opt/php/bin/php"
        ):
            assert builder.detect_php_binary() == "/opt/php/bin/php"

    def test_bare_name_fallback(self, tmp_path: Path):
        builder = CommandBuilder(tool_dir=tmp_path, temp_dir=tmp_path)
        with patch("compatscan.scanner.command.shutil.which", return_value=None):
            assert builder.detect_php_binary() == "php"


class TestResolveLinterPath:
    def test_first_candidate_when_none_exist(self, tmp_path: Path):
        builder = CommandBuilder(tool_dir=tmp_path, temp_dir=tmp_path)
        assert builder.resolve_linter_path() == tmp_path / "vendor" / "bin" / "phpcs"

    def test_second_layout(self, tmp_path: Path):
        phpcs = _touch(
            tmp_path / "vendor" / "squizlabs" / "php_codesniffer" / "bin" / "phpcs"
        )
        builder = CommandBuilder(tool_dir=tmp_path, temp_dir=tmp_path)
        assert builder.resolve_linter_path() == phpcs

    def test_primary_layout_preferred(self, tmp_path: Path):
        primary = _touch(tmp_path / "vendor" / "bin" / "phpcs")
        _touch(tmp_path / "vendor" / "squizlabs" / "php_codesniffer" / "bin" / "phpcs")
        builder = CommandBuilder(tool_dir=tmp_path, temp_dir=tmp_path)
        assert builder.resolve_linter_path() == primary


class TestQuoting:
    def test_windows_doubles_quotes(self):
        assert quote_arg('C:\\a "b"\\php.exe', windows=True) == '"C:\\a ""b""\\php.exe"'

    def test_posix_single_quotes(self):
        assert quote_arg("a b", windows=False) == "'a b'"

    def test_command_line_redirects_stderr(self):
        line = render_command_line(["php", "phpcs", "--version"], windows=False)
        assert line == "php phpcs --version 2>&1"

    def test_linter_command_without_file_list(self):
        cmd = LinterCommand(args=["php"])
        cmd.cleanup()
        assert cmd.file_list is None
