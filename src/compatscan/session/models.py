"""Session data models — persisted scan sessions and batch slices."""

from __future__ import annotations

import math
import time
import uuid
from dataclasses import asdict, dataclass, field


def new_scan_id() -> str:
    return f"scan_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class ScanSession:
    """A materialized file list split into fixed-size batches.

    Files and batch size never change after creation so batch numbering
    stays stable across client polls.
    """

    files: tuple[str, ...]
    batch_size: int
    exclude_patterns: tuple[str, ...] = ()
    created_at: float = field(default_factory=time.time)
    id: str = field(default_factory=new_scan_id)

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_batches(self) -> int:
        return math.ceil(len(self.files) / self.batch_size)

    def batch(self, batch_number: int) -> tuple[str, ...]:
        start = (batch_number - 1) * self.batch_size
        return self.files[start : start + self.batch_size]


@dataclass
class BatchSlice:
    """Files of one batch, or an empty list and a message on failure."""

    files: list[str]
    batch_number: int
    total_batches: int
    is_last_batch: bool = False
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.message is None

    def to_dict(self) -> dict:
        data = asdict(self)
        if self.message is None:
            del data["message"]
        return data
