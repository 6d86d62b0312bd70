"""Run descriptor entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

RUN_DESCRIPTOR_SUFFIX = "-run.json"
RUN_DESCRIPTOR_GLOB = f"*{RUN_DESCRIPTOR_SUFFIX}"


@dataclass(frozen=True)
class ExecutionDefinition:  # pylint: disable=too-many-instance-attributes
    """One execution as declared in a run descriptor."""

    name: str
    args: tuple[str, ...]
    launcher: str
    tags: frozenset[str] = frozenset()
    env: Mapping[str, str] = field(default_factory=dict)
    expected_exit_code: int = 0
    expected_output: tuple[str, ...] = ()
    timeout_seconds: float | None = None
    skip: bool = False


@dataclass(frozen=True)
class RunDescriptor:
    """Parsed content of one ``*-run.json`` file."""

    path: Path
    run_id: str
    working_dir: Path
    env: Mapping[str, str]
    executions: tuple[ExecutionDefinition, ...]

    @property
    def launcher_names(self) -> frozenset[str]:
        return frozenset(execution.launcher for execution in self.executions)


def default_run_id(path: Path) -> str:
    """Derive a run id from a descriptor file name (``alpha-run.json`` -> ``alpha``)."""
    name = path.name
    if name.endswith(RUN_DESCRIPTOR_SUFFIX):
        return name[: -len(RUN_DESCRIPTOR_SUFFIX)]
    return path.stem
