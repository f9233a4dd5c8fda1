"""Scan engine — orchestrates sessions, linter runs and result parsing."""

from __future__ import annotations

import logging
import math
import os
import re
from collections.abc import Iterable

from compatscan.scanner.command import CommandBuilder, render_command_line
from compatscan.scanner.discovery import discover_files
from compatscan.scanner.models import (
    BatchReport,
    BatchResult,
    LintResult,
    ReadinessReport,
    ScanProgress,
)
from compatscan.scanner.parser import parse_counts
from compatscan.scanner.runner import LinterExecutionError, ProcessRunner
from compatscan.session.manager import ScanSessionManager
from compatscan.session.models import BatchSlice

logger = logging.getLogger(__name__)

MSG_NO_TARGET = "No valid scan target selected."
MSG_NO_LINTER = "Error: phpcs command not found. Please install PHP CodeSniffer first."
MSG_NO_FILES = "No PHP files found to scan."
MSG_EMPTY_BATCH = "No files to scan in this batch."
MSG_CLEAN_BATCH = "No PHP compatibility issues found in this batch."
MSG_STOPPED = "Scan stopped."

# Header lines a php-cgi binary prepends to its output
_CGI_NOISE = re.compile(r"^(X-Powered-By:|Content-type:)", re.IGNORECASE)


class Scanner:
    """Runs PHPCompatibility scans, whole or one batch at a time.

    Failures a client can trigger (missing target, missing linter, process
    errors) come back as messages; programming errors propagate.
    """

    def __init__(
        self,
        builder: CommandBuilder,
        runner: ProcessRunner,
        sessions: ScanSessionManager,
        default_php_version: str = "8.3",
        default_batch_size: int = 50,
    ) -> None:
        self._builder = builder
        self._runner = runner
        self._sessions = sessions
        self._default_php_version = default_php_version
        self._default_batch_size = default_batch_size

    @property
    def sessions(self) -> ScanSessionManager:
        return self._sessions

    def check_system_requirements(self) -> ReadinessReport:
        """Preflight: exec allowed, PHP present, phpcs present, phpcs runs."""
        report = ReadinessReport(exec_enabled=self._runner.exec_enabled)
        if not report.exec_enabled:
            report.messages.append("Process execution is disabled by configuration.")

        report.php_binary = self._builder.detect_php_binary()
        report.php_binary_exists = bool(
            report.php_binary and os.path.exists(report.php_binary)
        )
        if not report.php_binary_exists:
            report.messages.append(f"PHP binary not found: {report.php_binary}")

        report.linter_path = str(self._builder.resolve_linter_path())
        report.linter_exists = os.path.exists(report.linter_path)
        if not report.linter_exists:
            report.messages.append(f"phpcs not found: {report.linter_path}")

        if report.exec_enabled and report.php_binary_exists and report.linter_exists:
            self._probe_version(report)

        report.ready = (
            report.exec_enabled
            and report.php_binary_exists
            and report.linter_exists
            and report.version_ok
        )
        return report

    def run(self, target_path: str | None, php_version: str | None = None) -> str:
        """Scan a whole target in one linter run, without batching."""
        if not target_path or not os.path.exists(target_path):
            return MSG_NO_TARGET
        if not self._builder.resolve_linter_path().exists():
            return MSG_NO_LINTER

        version = php_version or self._default_php_version
        with self._builder.build([str(target_path)], version) as command:
            try:
                result = self._runner.execute(command.args)
            except LinterExecutionError as e:
                logger.error("Scan of %s failed: %s", target_path, e)
                return f"Error running phpcs: {e}"
        return result.output

    async def get_scan_progress(
        self,
        target_path: str,
        batch_size: int,
        exclude_patterns: Iterable[str] = (),
    ) -> ScanProgress:
        """Discover files and open a session over them."""
        exclude_patterns = tuple(exclude_patterns)
        files = discover_files(target_path, exclude_patterns)
        if not files:
            logger.info("No PHP files under %s", target_path)
            return ScanProgress(total_files=0, estimated_batches=0, message=MSG_NO_FILES)

        scan_id = await self._sessions.create(files, batch_size, exclude_patterns)
        return ScanProgress(
            total_files=len(files),
            estimated_batches=math.ceil(len(files) / batch_size),
            scan_id=scan_id,
        )

    async def get_batch_files_from_scan(
        self, scan_id: str, batch_number: int
    ) -> BatchSlice:
        return await self._sessions.get_batch(scan_id, batch_number)

    def scan_batch(self, files: list[str], php_version: str) -> LintResult:
        """Lint one batch of files; the file-list artifact is always removed."""
        if not files:
            return LintResult(output=MSG_EMPTY_BATCH)

        with self._builder.build(files, php_version) as command:
            try:
                result = self._runner.execute(command.args)
            except LinterExecutionError as e:
                logger.error("Batch of %d files failed: %s", len(files), e)
                return LintResult(output=f"Error running phpcs: {e}")

        output = result.output
        counts = parse_counts(output)
        if not output.strip() and result.exit_code == 0:
            output = MSG_CLEAN_BATCH

        return LintResult(
            output=output,
            errors=counts.errors,
            warnings=counts.warnings,
            exit_code=result.exit_code,
        )

    async def prepare_batch(self, scan_id: str, batch_number: int) -> BatchSlice:
        """Look up a batch, refusing it once the session's stop token is set."""
        batch = await self._sessions.get_batch(scan_id, batch_number)
        if batch.ok and await self._sessions.is_stop_requested(scan_id):
            logger.info("Scan %s stopped; not starting batch %d", scan_id, batch_number)
            return BatchSlice(
                files=[],
                batch_number=batch_number,
                total_batches=batch.total_batches,
                message=MSG_STOPPED,
            )
        return batch

    async def process_batch(
        self,
        scan_id: str,
        batch_number: int,
        php_version: str | None = None,
    ) -> BatchResult | BatchSlice:
        """Fetch and lint one batch of a session.

        A failed lookup is returned as the ``BatchSlice`` carrying its message.
        """
        batch = await self.prepare_batch(scan_id, batch_number)
        if not batch.ok:
            return batch
        return self.lint_slice(batch, php_version)

    def lint_slice(
        self, batch: BatchSlice, php_version: str | None = None
    ) -> BatchResult:
        lint = self.scan_batch(batch.files, php_version or self._default_php_version)
        return BatchResult(
            batch_number=batch.batch_number,
            total_batches=batch.total_batches,
            is_last_batch=batch.is_last_batch,
            output=lint.output,
            errors=lint.errors,
            warnings=lint.warnings,
        )

    def scan_in_batches(
        self,
        target_path: str,
        batch_size: int | None = None,
        php_version: str | None = None,
    ) -> list[BatchReport]:
        """Discover and lint every batch in one call, bypassing sessions."""
        files = discover_files(target_path)
        size = batch_size or self._default_batch_size
        version = php_version or self._default_php_version

        reports = []
        for index, start in enumerate(range(0, len(files), size), start=1):
            chunk = files[start : start + size]
            lint = self.scan_batch(chunk, version)
            reports.append(
                BatchReport(
                    batch=index,
                    files_count=len(chunk),
                    output=lint.output,
                    errors=lint.errors,
                    warnings=lint.warnings,
                )
            )
        return reports

    async def stop_scan(self, scan_id: str | None = None) -> int:
        return await self._sessions.request_stop(scan_id)

    async def finish_scan(self, scan_id: str) -> None:
        await self._sessions.delete(scan_id)

    def _probe_version(self, report: ReadinessReport) -> None:
        command = self._builder.version_command()
        report.version_cmd = render_command_line(command.args)
        try:
            result = self._runner.execute(command.args)
        except LinterExecutionError as e:
            report.version_output = str(e)
            report.messages.append("Unable to run phpcs --version with detected PHP binary.")
            return

        report.version_output = "\n".join(
            line
            for line in (ln.strip() for ln in result.lines)
            if line and not _CGI_NOISE.match(line)
        )
        report.version_ok = result.exit_code == 0
        if not report.version_ok:
            report.messages.append("Unable to run phpcs --version with detected PHP binary.")
