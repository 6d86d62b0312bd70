"""Results writing entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from simple_it_runner.results_aggregation import SuiteTally

FAILSAFE_FAILURE_CODE = 255
FAILSAFE_NO_TESTS_CODE = 254


class SummaryFormat(str, Enum):
    """Serialization of the summary record, chosen by the destination suffix."""

    FAILSAFE_XML = "xml"
    JSON = "json"

    @classmethod
    def for_path(cls, path: Path) -> SummaryFormat:
        if path.suffix.lower() == ".xml":
            return cls.FAILSAFE_XML
        return cls.JSON


@dataclass(frozen=True)
class SuiteSummary:
    """Persisted tally consumed by the downstream verify step."""

    completed: int
    errors: int
    failures: int
    skipped: int
    failure_message: str | None = None

    @classmethod
    def from_tally(cls, tally: SuiteTally) -> SuiteSummary:
        return cls(
            completed=tally.total,
            errors=tally.errored,
            failures=tally.failed,
            skipped=tally.skipped,
        )

    @property
    def passed(self) -> bool:
        return self.errors + self.failures == 0

    @property
    def result_code(self) -> int | None:
        if not self.passed:
            return FAILSAFE_FAILURE_CODE
        if self.completed == 0:
            return FAILSAFE_NO_TESTS_CODE
        return None
