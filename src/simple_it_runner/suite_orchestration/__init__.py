"""Suite orchestration domain exports."""

from .suite_contracts import PreparationFailure, SuiteOutcome
from .suite_run_use_case import (
    RunFactory,
    SuiteAbortedError,
    execute_suite,
    log_suite_report,
    run_descriptors,
)

__all__ = [
    "PreparationFailure",
    "SuiteOutcome",
    "RunFactory",
    "SuiteAbortedError",
    "execute_suite",
    "log_suite_report",
    "run_descriptors",
]
