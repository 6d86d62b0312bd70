"""Run lifecycle service: prepare, execute selected executions, clean up."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from simple_it_runner.run_descriptors import (
    DescriptorError,
    ExecutionDefinition,
    RunDescriptor,
    default_run_id,
    read_run_descriptor,
)

from .command_launcher import (
    CommandLauncher,
    LaunchRequest,
    LaunchResult,
    SubprocessCommandLauncher,
)
from .execution_models import Execution, ExecutionStateError, ExecutionStatus, RunState

_LOGGER = logging.getLogger(__name__)


class RunPreparationError(Exception):
    """Raised when a run cannot be prepared; isolated to that run."""


class ExecutionFault(Exception):
    """Raised when launching an execution's command fails; fatal to the suite."""


@dataclass(frozen=True)
class RunContext:
    """Suite-wide collaborators and locations shared by every run."""

    launchers: Mapping[str, Path]
    report_dir: Path
    command_launcher: CommandLauncher = field(default_factory=SubprocessCommandLauncher)
    interface: str | None = None
    base_env: Mapping[str, str] | None = None


class SuiteRun:
    """Executions loaded from one descriptor, sharing one prepare/cleanup lifecycle.

    Two instances are distinct even when they wrap the same descriptor path.
    """

    def __init__(self, descriptor_path: Path | str, context: RunContext) -> None:
        self.descriptor_path = Path(descriptor_path)
        self._context = context
        self._state = RunState.CREATED
        self._descriptor: RunDescriptor | None = None
        self._executions: tuple[Execution, ...] = ()
        self._run_report_dir: Path | None = None
        self._work_dir: Path | None = None

    def __repr__(self) -> str:
        return f"SuiteRun({str(self.descriptor_path)!r}, state={self._state.value})"

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def run_id(self) -> str:
        if self._descriptor is not None:
            return self._descriptor.run_id
        return default_run_id(self.descriptor_path)

    @property
    def executions(self) -> tuple[Execution, ...]:
        return self._executions

    @property
    def work_dir(self) -> Path | None:
        return self._work_dir

    def prepare(self) -> None:
        """Parse the descriptor into pending executions and acquire run resources.

        Raises:
          RunPreparationError: If the descriptor is unreadable or malformed, it
            references an unknown launcher, or run directories cannot be created.
        """
        if self._state is not RunState.CREATED:
            raise RunPreparationError(
                f"Run {self.descriptor_path} cannot be prepared in state {self._state.value}."
            )
        try:
            descriptor = read_run_descriptor(self.descriptor_path)
            self._check_descriptor_references(descriptor)
            run_report_dir = self._context.report_dir / descriptor.run_id
            run_report_dir.mkdir(parents=True, exist_ok=True)
            self._run_report_dir = run_report_dir
            self._work_dir = Path(tempfile.mkdtemp(prefix=f"{descriptor.run_id}-"))
        except (DescriptorError, OSError) as exc:
            _LOGGER.error("Cannot initialize run %s: %s", self.descriptor_path, exc)
            raise RunPreparationError(
                f"Cannot initialize run {self.descriptor_path}: {exc}"
            ) from exc

        self._descriptor = descriptor
        self._executions = tuple(
            Execution(
                run_id=descriptor.run_id,
                definition=definition,
                descriptor_name=self.descriptor_path.name,
            )
            for definition in descriptor.executions
        )
        self._state = RunState.PREPARED

    def execute(self, execution: Execution) -> None:
        """Launch the execution's command and record its classified status.

        Raises:
          ExecutionFault: If the command cannot be launched at all.
          ExecutionStateError: If the run is not prepared or the execution is
            foreign to this run or already completed.
        """
        descriptor, run_report_dir = self._require_prepared(execution)
        definition = execution.definition
        if definition.skip:
            execution.complete(ExecutionStatus.SKIPPED)
            return

        request = LaunchRequest(
            command=(str(self._context.launchers[definition.launcher]), *definition.args),
            cwd=descriptor.working_dir,
            env=self._environment_for(descriptor, definition, run_report_dir),
            log_path=run_report_dir / f"{definition.name}.log",
            timeout_seconds=definition.timeout_seconds,
        )
        execution.log_path = request.log_path
        _LOGGER.debug("Launching %s: %s", execution.full_name, " ".join(request.command))
        try:
            result = self._context.command_launcher.launch(request)
        except (OSError, ValueError, subprocess.SubprocessError) as exc:
            raise ExecutionFault(f"Failed to execute {execution.full_name}: {exc}") from exc

        status, reason = classify_launch_result(definition, result)
        execution.complete(status, reason, duration_seconds=result.duration_seconds)

    def skip(self, execution: Execution) -> None:
        """Mark a pending execution as SKIPPED without launching it."""
        self._require_prepared(execution)
        execution.complete(ExecutionStatus.SKIPPED)

    def cleanup(self) -> None:
        """Release run resources; safe after a failed prepare and when called again."""
        if self._state is RunState.CLEANED:
            return
        if self._work_dir is not None and self._work_dir.exists():
            shutil.rmtree(self._work_dir)
        self._work_dir = None
        self._state = RunState.CLEANED

    def _require_prepared(self, execution: Execution) -> tuple[RunDescriptor, Path]:
        if (
            self._state is not RunState.PREPARED
            or self._descriptor is None
            or self._run_report_dir is None
        ):
            raise ExecutionStateError(
                f"Run {self.descriptor_path} is not prepared (state {self._state.value})."
            )
        if not any(candidate is execution for candidate in self._executions):
            raise ExecutionStateError(
                f"{execution.full_name} does not belong to run {self.descriptor_path}."
            )
        return self._descriptor, self._run_report_dir

    def _check_descriptor_references(self, descriptor: RunDescriptor) -> None:
        missing = sorted(descriptor.launcher_names - set(self._context.launchers))
        if missing:
            raise DescriptorError(f"Unknown launcher(s) referenced: {', '.join(missing)}")
        if not descriptor.working_dir.is_dir():
            raise DescriptorError(f"Working directory not found: {descriptor.working_dir}")

    def _environment_for(
        self, descriptor: RunDescriptor, definition: ExecutionDefinition, run_report_dir: Path
    ) -> dict[str, str]:
        base_env = os.environ if self._context.base_env is None else self._context.base_env
        env = dict(base_env)
        env.update(descriptor.env)
        env.update(definition.env)
        env["IT_RUN_ID"] = descriptor.run_id
        env["IT_EXECUTION_NAME"] = definition.name
        env["IT_WORK_DIR"] = str(self._work_dir)
        env["IT_REPORT_DIR"] = str(run_report_dir)
        if self._context.interface:
            env["IT_INTERFACE"] = self._context.interface
        return env


def classify_launch_result(
    definition: ExecutionDefinition, result: LaunchResult
) -> tuple[ExecutionStatus, str | None]:
    """Map a finished launch onto an execution status and failure reason."""
    if result.timed_out:
        limit = definition.timeout_seconds
        return ExecutionStatus.ERROR, (
            f"timed out after {limit:g} seconds" if limit is not None else "timed out"
        )
    if result.exit_code is None:
        return ExecutionStatus.ERROR, "no exit code reported"
    if result.exit_code < 0:
        return ExecutionStatus.ERROR, f"terminated by signal {-result.exit_code}"
    if result.exit_code != definition.expected_exit_code:
        return (
            ExecutionStatus.FAILURE,
            f"exit code {result.exit_code}, expected {definition.expected_exit_code}",
        )
    for fragment in definition.expected_output:
        if fragment not in result.output:
            return ExecutionStatus.FAILURE, f"expected output not found: {fragment!r}"
    return ExecutionStatus.SUCCESS, None
