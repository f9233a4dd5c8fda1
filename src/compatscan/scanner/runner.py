"""Process runner — blocking linter invocation with combined output."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class LinterExecutionError(RuntimeError):
    """The linter process could not be started or did not finish."""


@dataclass
class ProcessResult:
    """Exit status and combined stdout/stderr lines of one run."""

    exit_code: int
    lines: list[str] = field(default_factory=list)

    @property
    def output(self) -> str:
        return "\n".join(self.lines)


class ProcessRunner:
    """Runs one external command to completion; no streaming."""

    def __init__(
        self,
        time_limit: float | None = 300.0,
        allow_exec: bool = True,
    ) -> None:
        self._time_limit = time_limit
        self._allow_exec = allow_exec
        self._memory_raised = False

    @property
    def exec_enabled(self) -> bool:
        return self._allow_exec

    def execute(self, args: list[str]) -> ProcessResult:
        if not self._allow_exec:
            raise LinterExecutionError("process execution is disabled by configuration")

        self._raise_memory_limit()
        logger.debug("Executing: %s", " ".join(args))

        try:
            proc = subprocess.run(
                args,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                timeout=self._time_limit,
                check=False,
                # Own session: a terminal Ctrl-C reaches only the caller
                start_new_session=os.name == "posix",
            )
        except subprocess.TimeoutExpired as e:
            raise LinterExecutionError(
                f"timed out after {self._time_limit:g}s: {args[0]}"
            ) from e
        except OSError as e:
            raise LinterExecutionError(f"could not start {args[0]}: {e}") from e

        text = proc.stdout.decode("utf-8", errors="replace") if proc.stdout else ""
        lines = text.splitlines()
        logger.debug("Exit code %d, %d output lines", proc.returncode, len(lines))
        return ProcessResult(exit_code=proc.returncode, lines=lines)

    def _raise_memory_limit(self) -> None:
        """Lift the soft address-space limit to the hard limit, once."""
        if self._memory_raised:
            return
        self._memory_raised = True
        try:
            import resource
        except ImportError:
            return

        try:
            soft, hard = resource.getrlimit(resource.RLIMIT_AS)
            if soft != hard:
                resource.setrlimit(resource.RLIMIT_AS, (hard, hard))
                logger.debug("Raised RLIMIT_AS soft limit %s → %s", soft, hard)
        except (ValueError, OSError) as e:
            logger.debug("Could not raise memory limit: %s", e)
