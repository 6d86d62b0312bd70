"""Suite orchestration use-case service."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace
from pathlib import Path

from simple_it_runner.configuration import (
    ConfigurationError,
    SuiteSettings,
    ensure_launchers_available,
)
from simple_it_runner.execution_selection import ExecutionSelector, build_selector
from simple_it_runner.results_aggregation import (
    SuiteTally,
    tally_executions,
    unsuccessful_executions,
)
from simple_it_runner.results_writing import (
    REPORT_FILENAME,
    SuiteSummary,
    write_execution_report,
    write_suite_summary,
)
from simple_it_runner.run_descriptors import discover_descriptor_files, filter_descriptor_files
from simple_it_runner.run_lifecycle import (
    CommandLauncher,
    Execution,
    ExecutionFault,
    ExecutionStatus,
    RunContext,
    RunPreparationError,
    SubprocessCommandLauncher,
    SuiteRun,
)

from .suite_contracts import PreparationFailure, SuiteOutcome

_LOGGER = logging.getLogger(__name__)
_SEPARATOR = "--------------------------------------"

RunFactory = Callable[[Path], SuiteRun]


class SuiteAbortedError(Exception):
    """Raised when an execution fault stops the whole suite.

    ``fault`` is the :class:`ExecutionFault` that caused the abort and ``runs``
    the runs touched before it happened.
    """

    def __init__(self, message: str, *, fault: ExecutionFault, runs: tuple[SuiteRun, ...]):
        super().__init__(message)
        self.fault = fault
        self.runs = runs


def execute_suite(
    settings: SuiteSettings,
    *,
    selector: ExecutionSelector | None = None,
    command_launcher: CommandLauncher | None = None,
    environ: Mapping[str, str] | None = None,
) -> SuiteOutcome:
    """Template, discover and execute every run, then write the report and summary.

    Raises:
      ConfigurationError: Before any run starts, for conflicting selector
        values, missing launchers, or descriptors that cannot be templated.
      SuiteAbortedError: When an execution cannot be launched.
      ReportWriteError: When the global report cannot be written.
      SummaryWriteError: When the summary record cannot be written.
    """
    active_selector = selector or build_selector(settings.selection)
    ensure_launchers_available(settings)
    _template_descriptors(settings, environ)

    descriptor_files = discover_descriptor_files(settings.descriptors.output_dir)
    _LOGGER.info("%d run files found", len(descriptor_files))
    _LOGGER.info("Selecting %s", active_selector.describe())

    report_dir = settings.reports.report_dir
    report_dir.mkdir(parents=True, exist_ok=True)
    context = RunContext(
        launchers=settings.launchers,
        report_dir=report_dir,
        command_launcher=command_launcher or SubprocessCommandLauncher(),
        interface=settings.interface,
        base_env=environ,
    )

    try:
        outcome = run_descriptors(
            descriptor_files,
            active_selector,
            run_factory=lambda path: SuiteRun(path, context),
        )
    except SuiteAbortedError as exc:
        log_suite_report(exc.runs, tally_executions(exc.runs))
        raise
    log_suite_report(outcome.runs, outcome.tally)

    report_path = write_execution_report(outcome.runs, outcome.tally, report_dir / REPORT_FILENAME)
    summary_path = write_suite_summary(
        SuiteSummary.from_tally(outcome.tally), settings.reports.summary_file
    )
    return replace(outcome, summary_path=summary_path, report_path=report_path)


def run_descriptors(
    descriptor_files: Iterable[Path],
    selector: ExecutionSelector,
    *,
    run_factory: RunFactory,
) -> SuiteOutcome:
    """Prepare, select, execute and clean up one run per descriptor, in the given order.

    Preparation failures are isolated to their run; an execution fault aborts
    the suite immediately. Every constructed run is cleaned up exactly once.
    """
    touched: list[SuiteRun] = []
    failures: list[PreparationFailure] = []
    for descriptor_path in descriptor_files:
        run = run_factory(descriptor_path)
        try:
            try:
                run.prepare()
            except RunPreparationError as exc:
                failures.append(
                    PreparationFailure(descriptor_path=descriptor_path, message=str(exc))
                )
                _LOGGER.warning("Skipping run %s: preparation failed", descriptor_path)
                continue
            _process_run(run, selector, touched)
        finally:
            run.cleanup()

    runs = tuple(touched)
    return SuiteOutcome(
        runs=runs,
        tally=tally_executions(runs),
        preparation_failures=tuple(failures),
    )


def log_suite_report(runs: Sequence[SuiteRun], tally: SuiteTally) -> None:
    """Log unsuccessful executions and the final counts block."""
    _LOGGER.info(_SEPARATOR)
    for execution in unsuccessful_executions(runs):
        _log_unsuccessful(execution)
    _LOGGER.info(_SEPARATOR)
    _LOGGER.info("Number of runs: %d", len(runs))
    _LOGGER.info("Number of executions: %d", tally.total)
    _LOGGER.info("Number of succeeded executions: %d", tally.succeeded)
    _LOGGER.info("Number of failed executions: %d", tally.failed)
    _LOGGER.info("Number of executions in error: %d", tally.errored)
    _LOGGER.info("Number of skipped executions: %d", tally.skipped)
    _LOGGER.info(_SEPARATOR)


def _process_run(run: SuiteRun, selector: ExecutionSelector, touched: list[SuiteRun]) -> None:
    for execution in run.executions:
        if not selector.accept(run, execution):
            run.skip(execution)
            continue
        if not touched or touched[-1] is not run:
            touched.append(run)
        _LOGGER.info("Executing %s", execution.full_name)
        try:
            run.execute(execution)
        except ExecutionFault as exc:
            _LOGGER.error("Failed to execute %s: %s", run.descriptor_path, exc)
            raise SuiteAbortedError(
                f"Execution failure: {exc}", fault=exc, runs=tuple(touched)
            ) from exc
        if execution.status in (ExecutionStatus.FAILURE, ExecutionStatus.ERROR):
            _log_unsuccessful(execution)


def _log_unsuccessful(execution: Execution) -> None:
    if execution.status is ExecutionStatus.FAILURE:
        _LOGGER.warning("%s has failed: %s", execution.full_name, execution.reason)
    elif execution.status is ExecutionStatus.ERROR:
        _LOGGER.warning("%s is in error: %s", execution.full_name, execution.reason)


def _template_descriptors(settings: SuiteSettings, environ: Mapping[str, str] | None) -> None:
    input_dir = settings.descriptors.input_dir
    if input_dir is None:
        return
    if not input_dir.is_dir():
        raise ConfigurationError(f"Descriptor input directory not found: {input_dir}")
    try:
        filter_descriptor_files(
            input_dir,
            settings.descriptors.output_dir,
            settings.properties,
            environ=environ,
        )
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot filter run descriptor files: {exc}") from exc
