"""External command launching for executions."""

from __future__ import annotations

import subprocess
import time
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class LaunchRequest:
    """Everything needed to start one execution's command."""

    command: tuple[str, ...]
    cwd: Path
    env: Mapping[str, str]
    log_path: Path
    timeout_seconds: float | None = None


@dataclass(frozen=True)
class LaunchResult:
    """Observed outcome of a finished (or timed out) command."""

    exit_code: int | None
    output: str
    timed_out: bool
    duration_seconds: float


class CommandLauncher(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol for launchers used by runs; faults surface as ``OSError`` or ``ValueError``."""

    def launch(self, request: LaunchRequest) -> LaunchResult: ...


class SubprocessCommandLauncher:  # pylint: disable=too-few-public-methods
    """Blocking launcher that runs the command and captures merged output in the log file."""

    def launch(self, request: LaunchRequest) -> LaunchResult:
        request.log_path.parent.mkdir(parents=True, exist_ok=True)
        started = time.monotonic()
        exit_code: int | None
        with request.log_path.open("w", encoding="utf-8") as log_file:
            try:
                completed = subprocess.run(
                    list(request.command),
                    cwd=request.cwd,
                    env=dict(request.env),
                    stdin=subprocess.DEVNULL,
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                    timeout=request.timeout_seconds,
                    check=False,
                )
                exit_code = completed.returncode
                timed_out = False
            except subprocess.TimeoutExpired:
                exit_code = None
                timed_out = True
        duration = time.monotonic() - started
        output = request.log_path.read_text(encoding="utf-8", errors="replace")
        return LaunchResult(
            exit_code=exit_code,
            output=output,
            timed_out=timed_out,
            duration_seconds=duration,
        )
