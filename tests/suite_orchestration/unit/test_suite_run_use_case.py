"""Suite orchestration tests over fake launchers."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest
from simple_it_runner.execution_selection import ExecutionSelector
from simple_it_runner.run_lifecycle import (
    ExecutionFault,
    ExecutionStatus,
    LaunchRequest,
    LaunchResult,
    RunContext,
    RunState,
    SuiteRun,
)
from simple_it_runner.suite_orchestration import SuiteAbortedError, run_descriptors


class FakeLauncher:
    """Returns scripted results keyed by qualified execution name."""

    def __init__(self, outcomes: dict[str, LaunchResult | Exception] | None = None) -> None:
        self.outcomes = outcomes or {}
        self.launched: list[str] = []

    def launch(self, request: LaunchRequest) -> LaunchResult:
        qualified = f"{request.env['IT_RUN_ID']}#{request.env['IT_EXECUTION_NAME']}"
        self.launched.append(qualified)
        outcome = self.outcomes.get(qualified, _exit(0))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _exit(code: int) -> LaunchResult:
    return LaunchResult(exit_code=code, output="", timed_out=False, duration_seconds=0.1)


class RecordingFactory:
    """Builds runs over one context and remembers every run it built."""

    def __init__(self, tmp_path: Path, launcher: FakeLauncher) -> None:
        self.context = RunContext(
            launchers={"tool": Path("/usr/bin/tool")},
            report_dir=tmp_path / "reports",
            command_launcher=launcher,
            base_env={},
        )
        self.built: list[SuiteRun] = []

    def __call__(self, path: Path) -> SuiteRun:
        run = SuiteRun(path, self.context)
        self.built.append(run)
        return run


def _descriptor(tmp_path: Path, run_id: str, executions: list[Any]) -> Path:
    path = tmp_path / f"{run_id}-run.json"
    path.write_text(json.dumps({"launcher": "tool", "executions": executions}), encoding="utf-8")
    return path


def test_exclude_all_touches_no_run_and_passes(tmp_path: Path) -> None:
    files = [_descriptor(tmp_path, run_id, [{"name": "one"}]) for run_id in ("a", "b", "c")]
    launcher = FakeLauncher()
    factory = RecordingFactory(tmp_path, launcher)

    outcome = run_descriptors(
        files, ExecutionSelector.patterns([], ["*"]), run_factory=factory
    )

    assert outcome.runs == ()
    assert (outcome.tally.total, outcome.tally.failed, outcome.tally.errored) == (0, 0, 0)
    assert outcome.tally.skipped == 0
    assert outcome.passed
    assert launcher.launched == []
    assert all(run.state is RunState.CLEANED for run in factory.built)


def test_tag_selects_only_tagged_execution(tmp_path: Path) -> None:
    files = [
        _descriptor(
            tmp_path, "alpha", [{"name": "one", "tags": ["smoke"]}, {"name": "two"}]
        )
    ]
    launcher = FakeLauncher()

    outcome = run_descriptors(
        files, ExecutionSelector.tagged("smoke"), run_factory=RecordingFactory(tmp_path, launcher)
    )

    assert launcher.launched == ["alpha#one"]
    assert [run.run_id for run in outcome.runs] == ["alpha"]
    assert outcome.tally.total == 1
    statuses = [execution.status for execution in outcome.runs[0].executions]
    assert statuses == [ExecutionStatus.SUCCESS, ExecutionStatus.SKIPPED]


def test_preparation_failure_is_isolated(tmp_path: Path, caplog) -> None:
    broken = tmp_path / "broken-run.json"
    broken.write_text("{", encoding="utf-8")
    files = [
        _descriptor(tmp_path, "alpha", [{"name": "one"}]),
        broken,
        _descriptor(tmp_path, "gamma", [{"name": "one"}]),
    ]
    launcher = FakeLauncher()
    factory = RecordingFactory(tmp_path, launcher)
    caplog.set_level(logging.WARNING)

    outcome = run_descriptors(files, ExecutionSelector.select_all(), run_factory=factory)

    assert launcher.launched == ["alpha#one", "gamma#one"]
    assert [run.run_id for run in outcome.runs] == ["alpha", "gamma"]
    assert outcome.tally.total == 2
    assert outcome.passed
    assert [failure.descriptor_path for failure in outcome.preparation_failures] == [broken]
    assert "Cannot initialize run" in outcome.preparation_failures[0].message
    assert "Skipping run" in caplog.text
    assert all(run.state is RunState.CLEANED for run in factory.built)


def test_descriptor_that_is_not_utf8_is_isolated(tmp_path: Path) -> None:
    bad = tmp_path / "bad-run.json"
    bad.write_bytes(b'{"launcher": "tool", "executions": [{"name": "\xff"}]}')
    files = [
        _descriptor(tmp_path, "alpha", [{"name": "one"}]),
        bad,
        _descriptor(tmp_path, "gamma", [{"name": "one"}]),
    ]
    launcher = FakeLauncher()

    outcome = run_descriptors(
        files, ExecutionSelector.select_all(), run_factory=RecordingFactory(tmp_path, launcher)
    )

    assert launcher.launched == ["alpha#one", "gamma#one"]
    assert [failure.descriptor_path for failure in outcome.preparation_failures] == [bad]
    assert outcome.passed


def test_launcher_value_error_aborts_suite(tmp_path: Path) -> None:
    files = [
        _descriptor(tmp_path, "alpha", [{"name": "one"}]),
        _descriptor(tmp_path, "beta", [{"name": "one"}]),
    ]
    launcher = FakeLauncher({"alpha#one": ValueError("illegal environment variable name")})

    with pytest.raises(SuiteAbortedError) as exc_info:
        run_descriptors(
            files, ExecutionSelector.select_all(), run_factory=RecordingFactory(tmp_path, launcher)
        )

    assert isinstance(exc_info.value.fault.__cause__, ValueError)
    assert launcher.launched == ["alpha#one"]


def test_execution_fault_aborts_suite_and_surfaces_the_fault(tmp_path: Path) -> None:
    files = [
        _descriptor(tmp_path, "alpha", [{"name": "one"}, {"name": "two"}, {"name": "three"}]),
        _descriptor(tmp_path, "beta", [{"name": "one"}]),
    ]
    fault = PermissionError("launcher not executable")
    launcher = FakeLauncher({"alpha#two": fault})
    factory = RecordingFactory(tmp_path, launcher)

    with pytest.raises(SuiteAbortedError) as exc_info:
        run_descriptors(files, ExecutionSelector.select_all(), run_factory=factory)

    error = exc_info.value
    assert isinstance(error.fault, ExecutionFault)
    assert error.fault.__cause__ is fault
    assert error.__cause__ is error.fault
    assert launcher.launched == ["alpha#one", "alpha#two"]
    assert [run.run_id for run in error.runs] == ["alpha"]
    assert len(factory.built) == 1
    assert factory.built[0].state is RunState.CLEANED
    assert factory.built[0].executions[2].is_pending


def test_mixed_outcomes_fail_the_verdict(tmp_path: Path, caplog) -> None:
    files = [
        _descriptor(tmp_path, "alpha", [{"name": "one"}, {"name": "two"}]),
        _descriptor(tmp_path, "beta", [{"name": "one"}, {"name": "two"}]),
    ]
    launcher = FakeLauncher(
        {"alpha#one": _exit(1), "alpha#two": _exit(2), "beta#one": _exit(-15)}
    )
    caplog.set_level(logging.WARNING)

    outcome = run_descriptors(
        files, ExecutionSelector.select_all(), run_factory=RecordingFactory(tmp_path, launcher)
    )

    tally = outcome.tally
    assert (tally.total, tally.succeeded, tally.failed, tally.errored) == (4, 1, 2, 1)
    assert not outcome.passed
    assert "alpha#one (alpha-run.json) has failed: exit code 1, expected 0" in caplog.text
    assert "beta#one (beta-run.json) is in error: terminated by signal 15" in caplog.text


def test_run_is_touched_once_and_in_discovery_order(tmp_path: Path) -> None:
    files = [
        _descriptor(tmp_path, "zeta", [{"name": "one"}, {"name": "two"}]),
        _descriptor(tmp_path, "alpha", [{"name": "one"}, {"name": "two"}]),
    ]
    launcher = FakeLauncher()

    outcome = run_descriptors(
        files, ExecutionSelector.select_all(), run_factory=RecordingFactory(tmp_path, launcher)
    )

    assert [run.run_id for run in outcome.runs] == ["zeta", "alpha"]
    assert launcher.launched == ["zeta#one", "zeta#two", "alpha#one", "alpha#two"]


def test_every_constructed_run_is_cleaned_up_exactly_once(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    files = [
        _descriptor(tmp_path, "alpha", [{"name": "one"}]),
        _descriptor(tmp_path, "beta", [{"name": "one"}]),
    ]
    calls: list[str] = []
    original_cleanup = SuiteRun.cleanup

    def counting_cleanup(self: SuiteRun) -> None:
        calls.append(self.run_id)
        original_cleanup(self)

    monkeypatch.setattr(SuiteRun, "cleanup", counting_cleanup)

    run_descriptors(
        files,
        ExecutionSelector.exact("beta#one"),
        run_factory=RecordingFactory(tmp_path, FakeLauncher()),
    )

    assert calls == ["alpha", "beta"]
