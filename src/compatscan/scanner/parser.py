"""Summary-line parsing for phpcs output."""

from __future__ import annotations

import re
from typing import NamedTuple


class IssueCounts(NamedTuple):
    errors: int
    warnings: int


_BOTH = re.compile(r"FOUND (\d+) ERRORS? AND (\d+) WARNINGS?", re.IGNORECASE)
_ERRORS = re.compile(r"FOUND (\d+) ERRORS?", re.IGNORECASE)
_WARNINGS = re.compile(r"FOUND (\d+) WARNINGS?", re.IGNORECASE)


def parse_counts(output: str) -> IssueCounts:
    """Sum error and warning counts over every summary line.

    phpcs prints one summary per file; anything else is ignored.
    """
    errors = 0
    warnings = 0

    for line in output.splitlines():
        if m := _BOTH.search(line):
            errors += int(m.group(1))
            warnings += int(m.group(2))
        elif m := _ERRORS.search(line):
            errors += int(m.group(1))
        elif m := _WARNINGS.search(line):
            warnings += int(m.group(1))

    return IssueCounts(errors, warnings)
