"""Suite-level aggregation of execution outcomes."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from simple_it_runner.run_lifecycle import Execution, ExecutionStatus, SuiteRun


@dataclass(frozen=True)
class SuiteTally:
    """Execution counters across every touched run."""

    total: int
    succeeded: int
    failed: int
    errored: int
    skipped: int

    @property
    def passed(self) -> bool:
        return self.failed + self.errored == 0

    @property
    def executions(self) -> int:
        return self.total + self.skipped


def tally_executions(runs: Iterable[SuiteRun]) -> SuiteTally:
    """Count execution statuses; pending executions are counted as skipped."""
    counts = dict.fromkeys(ExecutionStatus, 0)
    pending = 0
    for execution in iter_executions(runs):
        if execution.status is None:
            pending += 1
        else:
            counts[execution.status] += 1

    succeeded = counts[ExecutionStatus.SUCCESS]
    failed = counts[ExecutionStatus.FAILURE]
    errored = counts[ExecutionStatus.ERROR]
    return SuiteTally(
        total=succeeded + failed + errored,
        succeeded=succeeded,
        failed=failed,
        errored=errored,
        skipped=counts[ExecutionStatus.SKIPPED] + pending,
    )


def iter_executions(runs: Iterable[SuiteRun]) -> Iterator[Execution]:
    for run in runs:
        yield from run.executions


def unsuccessful_executions(runs: Iterable[SuiteRun]) -> list[Execution]:
    """Executions that ended in FAILURE or ERROR, in suite order."""
    return [
        execution
        for execution in iter_executions(runs)
        if execution.status in (ExecutionStatus.FAILURE, ExecutionStatus.ERROR)
    ]
