"""Execution and run lifecycle entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from simple_it_runner.run_descriptors import QUALIFIER_SEPARATOR, ExecutionDefinition


class ExecutionStatus(str, Enum):
    """Terminal outcome of one execution."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ERROR = "ERROR"
    SKIPPED = "SKIPPED"


_STATUSES_WITH_REASON = frozenset({ExecutionStatus.FAILURE, ExecutionStatus.ERROR})


class RunState(str, Enum):
    """Lifecycle state of a run."""

    CREATED = "CREATED"
    PREPARED = "PREPARED"
    CLEANED = "CLEANED"


class ExecutionStateError(RuntimeError):
    """Raised when an execution status would be overwritten or is inconsistent."""


@dataclass(eq=False)
class Execution:
    """A named, statusful unit of work owned by exactly one run.

    ``status`` is ``None`` while the execution is pending. It is set once by
    :meth:`complete` and never overwritten afterwards.
    """

    run_id: str
    definition: ExecutionDefinition
    descriptor_name: str
    status: ExecutionStatus | None = None
    reason: str | None = None
    duration_seconds: float | None = None
    log_path: Path | None = None

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def tags(self) -> frozenset[str]:
        return self.definition.tags

    @property
    def qualified_name(self) -> str:
        return f"{self.run_id}{QUALIFIER_SEPARATOR}{self.name}"

    @property
    def full_name(self) -> str:
        return f"{self.qualified_name} ({self.descriptor_name})"

    @property
    def is_pending(self) -> bool:
        return self.status is None

    def complete(
        self,
        status: ExecutionStatus,
        reason: str | None = None,
        *,
        duration_seconds: float | None = None,
    ) -> None:
        """Record the terminal status; a reason is required exactly for FAILURE and ERROR."""
        if self.status is not None:
            raise ExecutionStateError(
                f"{self.full_name} already completed with status {self.status.value}."
            )
        if status in _STATUSES_WITH_REASON and not reason:
            raise ExecutionStateError(f"{status.value} of {self.full_name} requires a reason.")
        if status not in _STATUSES_WITH_REASON and reason is not None:
            raise ExecutionStateError(
                f"{status.value} of {self.full_name} must not carry a reason."
            )
        self.status = status
        self.reason = reason
        self.duration_seconds = duration_seconds
