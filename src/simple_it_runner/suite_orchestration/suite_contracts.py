"""Suite orchestration entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from simple_it_runner.results_aggregation import SuiteTally
from simple_it_runner.run_lifecycle import SuiteRun


@dataclass(frozen=True)
class PreparationFailure:
    """A descriptor whose run could not be prepared and therefore never executed."""

    descriptor_path: Path
    message: str


@dataclass(frozen=True)
class SuiteOutcome:
    """Output contract for one completed suite."""

    runs: tuple[SuiteRun, ...]
    tally: SuiteTally
    preparation_failures: tuple[PreparationFailure, ...] = ()
    summary_path: Path | None = None
    report_path: Path | None = None

    @property
    def passed(self) -> bool:
        return self.tally.passed
