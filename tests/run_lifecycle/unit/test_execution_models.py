"""Tests for execution entities."""

from __future__ import annotations

import pytest
from simple_it_runner.run_descriptors import ExecutionDefinition
from simple_it_runner.run_lifecycle.execution_models import (
    Execution,
    ExecutionStateError,
    ExecutionStatus,
)


def _execution() -> Execution:
    return Execution(
        run_id="alpha",
        definition=ExecutionDefinition(
            name="one", args=(), launcher="vertx", tags=frozenset({"smoke"})
        ),
        descriptor_name="alpha-run.json",
    )


def test_new_execution_is_pending_with_derived_names() -> None:
    execution = _execution()

    assert execution.is_pending
    assert execution.status is None
    assert execution.reason is None
    assert execution.name == "one"
    assert execution.qualified_name == "alpha#one"
    assert execution.full_name == "alpha#one (alpha-run.json)"
    assert execution.tags == frozenset({"smoke"})


def test_complete_records_status_reason_and_duration() -> None:
    execution = _execution()

    execution.complete(ExecutionStatus.FAILURE, "exit code 1, expected 0", duration_seconds=1.5)

    assert execution.status is ExecutionStatus.FAILURE
    assert execution.reason == "exit code 1, expected 0"
    assert execution.duration_seconds == 1.5
    assert not execution.is_pending


def test_status_is_never_overwritten() -> None:
    execution = _execution()
    execution.complete(ExecutionStatus.SUCCESS)

    with pytest.raises(ExecutionStateError, match="already completed"):
        execution.complete(ExecutionStatus.ERROR, "late fault")

    assert execution.status is ExecutionStatus.SUCCESS
    assert execution.reason is None


@pytest.mark.parametrize("status", [ExecutionStatus.FAILURE, ExecutionStatus.ERROR])
def test_failure_and_error_require_reason(status: ExecutionStatus) -> None:
    with pytest.raises(ExecutionStateError, match="requires a reason"):
        _execution().complete(status)


@pytest.mark.parametrize("status", [ExecutionStatus.SUCCESS, ExecutionStatus.SKIPPED])
def test_success_and_skipped_reject_reason(status: ExecutionStatus) -> None:
    with pytest.raises(ExecutionStateError, match="must not carry a reason"):
        _execution().complete(status, "unexpected")


def test_executions_compare_by_identity() -> None:
    assert _execution() != _execution()
