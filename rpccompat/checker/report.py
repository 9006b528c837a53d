"""Outcome of a compatibility run and its printed summary."""

from __future__ import annotations

import dataclasses
import enum
import os
import sys
from typing import TextIO

GREEN = 32
RED = 31


class CheckStatus(enum.Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclasses.dataclass(frozen=True)
class CheckOutcome:
    fixture_name: str
    status: CheckStatus
    details: str


def colorize_status_label(label: str, color_code: int, stream: TextIO) -> str:
    """Wrap ``label`` in an ANSI colour when ``stream`` is a terminal and NO_COLOR is unset."""
    if not stream.isatty() or "NO_COLOR" in os.environ:
        return label
    return f"\x1b[{color_code}m{label}\x1b[0m"


@dataclasses.dataclass
class CompatibilityReport:
    checks: list[CheckOutcome] = dataclasses.field(default_factory=list)

    def has_failures(self) -> bool:
        return any(check.status is CheckStatus.FAILED for check in self.checks)

    def counts(self) -> dict[CheckStatus, int]:
        """Number of checks in each status."""
        totals = dict.fromkeys(CheckStatus, 0)
        for check in self.checks:
            totals[check.status] += 1
        return totals

    def print_summary(self, stream: TextIO | None = None) -> None:
        out = sys.stdout if stream is None else stream
        for check in self.checks:
            if check.status is CheckStatus.PASSED:
                label = colorize_status_label("PASS", GREEN, out)
            elif check.status is CheckStatus.FAILED:
                label = colorize_status_label("FAIL", RED, out)
            else:
                label = "SKIP"
            print(f"[{label}] {check.fixture_name} - {check.details}", file=out)

        totals = self.counts()
        print(file=out)
        print(
            f"Summary: {totals[CheckStatus.PASSED]} passed, "
            f"{totals[CheckStatus.FAILED]} failed, {totals[CheckStatus.SKIPPED]} skipped",
            file=out,
        )