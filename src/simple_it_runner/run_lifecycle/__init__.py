"""Run lifecycle domain exports."""

from .command_launcher import (
    CommandLauncher,
    LaunchRequest,
    LaunchResult,
    SubprocessCommandLauncher,
)
from .execution_models import Execution, ExecutionStateError, ExecutionStatus, RunState
from .suite_run import (
    ExecutionFault,
    RunContext,
    RunPreparationError,
    SuiteRun,
    classify_launch_result,
)

__all__ = [
    "Execution",
    "ExecutionStatus",
    "ExecutionStateError",
    "RunState",
    "CommandLauncher",
    "LaunchRequest",
    "LaunchResult",
    "SubprocessCommandLauncher",
    "RunContext",
    "SuiteRun",
    "RunPreparationError",
    "ExecutionFault",
    "classify_launch_result",
]
