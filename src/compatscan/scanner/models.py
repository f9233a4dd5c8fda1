"""Scanner data models — readiness, progress and batch results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field


@dataclass
class ReadinessReport:
    """Outcome of the preflight checks for running the linter."""

    exec_enabled: bool = True
    php_binary: str = ""
    php_binary_exists: bool = False
    linter_path: str = ""
    linter_exists: bool = False
    version_cmd: str | None = None
    version_ok: bool = False
    version_output: str = ""
    messages: list[str] = field(default_factory=list)
    ready: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ScanProgress:
    """Sizing information returned when a batched scan is started."""

    total_files: int
    estimated_batches: int
    scan_id: str | None = None
    message: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        if self.message is None:
            del data["message"]
        return data


@dataclass
class LintResult:
    """Output and parsed counts of one linter run."""

    output: str
    errors: int = 0
    warnings: int = 0
    exit_code: int | None = None


@dataclass
class BatchResult:
    """Result of scanning one batch of a session."""

    batch_number: int
    total_batches: int
    is_last_batch: bool
    output: str
    errors: int = 0
    warnings: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class BatchReport:
    """One row of a batch-all-at-once scan."""

    batch: int
    files_count: int
    output: str
    errors: int = 0
    warnings: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
