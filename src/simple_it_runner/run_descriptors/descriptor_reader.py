"""Run descriptor reader service."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .descriptor_models import ExecutionDefinition, RunDescriptor, default_run_id

QUALIFIER_SEPARATOR = "#"


class DescriptorError(Exception):
    """Raised when a run descriptor cannot be read or is malformed."""


def read_run_descriptor(descriptor_path: Path | str) -> RunDescriptor:
    """Read and validate one ``*-run.json`` descriptor.

    Args:
      descriptor_path: Path of the (already templated) descriptor file.

    Returns:
      The parsed descriptor with executions in declaration order.

    Raises:
      DescriptorError: If the file is unreadable, not valid JSON, or violates
        the descriptor rules.
    """
    path = Path(descriptor_path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DescriptorError(f"Cannot read run descriptor {path}: {exc}") from exc
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DescriptorError(f"Run descriptor {path} is not valid JSON: {exc}") from exc

    if not isinstance(parsed, Mapping):
        raise DescriptorError(f"Run descriptor {path} root must be an object.")

    run_id = _parse_run_id(parsed.get("name"), path)
    default_launcher = _optional_string(parsed.get("launcher"), "launcher")
    working_dir = _optional_string(parsed.get("working-dir"), "working-dir")
    return RunDescriptor(
        path=path,
        run_id=run_id,
        working_dir=_resolve_working_dir(path.parent, working_dir),
        env=_parse_env(parsed.get("env"), "env"),
        executions=_parse_executions(parsed.get("executions"), default_launcher),
    )


def _parse_run_id(value: Any, path: Path) -> str:
    run_id = _optional_string(value, "name") or default_run_id(path)
    if not run_id:
        raise DescriptorError(f"Cannot derive a run name from {path.name}.")
    if QUALIFIER_SEPARATOR in run_id:
        raise DescriptorError(f"Run name '{run_id}' must not contain '{QUALIFIER_SEPARATOR}'.")
    return run_id


def _parse_executions(value: Any, default_launcher: str | None) -> tuple[ExecutionDefinition, ...]:
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise DescriptorError("executions must be a list.")
    if not value:
        raise DescriptorError("executions must contain at least one execution.")

    executions: list[ExecutionDefinition] = []
    seen_names: set[str] = set()
    for index, item in enumerate(value):
        label = f"executions[{index}]"
        if not isinstance(item, Mapping):
            raise DescriptorError(f"{label} must be an object.")
        execution = _parse_execution(item, label, default_launcher)
        if execution.name in seen_names:
            raise DescriptorError(f"Duplicate execution name '{execution.name}'.")
        seen_names.add(execution.name)
        executions.append(execution)
    return tuple(executions)


def _parse_execution(
    item: Mapping[str, Any], label: str, default_launcher: str | None
) -> ExecutionDefinition:
    name = _require_non_empty_string(item.get("name"), f"{label}.name")
    if QUALIFIER_SEPARATOR in name:
        raise DescriptorError(f"{label}.name must not contain '{QUALIFIER_SEPARATOR}'.")
    launcher = _optional_string(item.get("launcher"), f"{label}.launcher") or default_launcher
    if launcher is None:
        raise DescriptorError(f"{label} declares no launcher and the run has no default.")
    return ExecutionDefinition(
        name=name,
        args=_parse_string_list(item.get("args"), f"{label}.args", split_commas=False),
        launcher=launcher,
        tags=frozenset(_parse_string_list(item.get("tags"), f"{label}.tags", split_commas=True)),
        env=_parse_env(item.get("env"), f"{label}.env"),
        expected_exit_code=_parse_exit_code(item.get("expected-exit-code", 0), label),
        expected_output=_parse_string_list(
            item.get("expected-output"), f"{label}.expected-output", split_commas=False
        ),
        timeout_seconds=_parse_timeout(item.get("timeout"), label),
        skip=_parse_flag(item.get("skip", False), f"{label}.skip"),
    )


def _parse_string_list(value: Any, field_name: str, *, split_commas: bool) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        if split_commas:
            return tuple(item.strip() for item in value.split(",") if item.strip())
        return (_reject_nul(value, field_name),)
    if isinstance(value, Sequence):
        items = []
        for item in value:
            if not isinstance(item, str):
                raise DescriptorError(f"{field_name} entries must be strings.")
            items.append(_reject_nul(item, field_name))
        return tuple(items)
    raise DescriptorError(f"{field_name} must be a string or list of strings.")


def _parse_env(value: Any, field_name: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise DescriptorError(f"{field_name} must be an object.")
    env: dict[str, str] = {}
    for key, raw in value.items():
        if isinstance(raw, bool) or not isinstance(raw, str | int | float):
            raise DescriptorError(f"{field_name}.{key} must be a string or number.")
        name = str(key)
        if not name or "=" in name:
            raise DescriptorError(f"{field_name} key '{name}' is not a valid variable name.")
        env[_reject_nul(name, field_name)] = _reject_nul(str(raw), f"{field_name}.{name}")
    return env


def _reject_nul(value: str, field_name: str) -> str:
    if "\0" in value:
        raise DescriptorError(f"{field_name} must not contain NUL characters.")
    return value


def _parse_exit_code(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DescriptorError(f"{label}.expected-exit-code must be an integer.")
    return value


def _parse_timeout(value: Any, label: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise DescriptorError(f"{label}.timeout must be a number of seconds.")
    if value <= 0:
        raise DescriptorError(f"{label}.timeout must be greater than zero.")
    return float(value)


def _parse_flag(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise DescriptorError(f"{field_name} must be true or false.")
    return value


def _resolve_working_dir(base_path: Path, raw_path: str | None) -> Path:
    if raw_path is None:
        return base_path.resolve()
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise DescriptorError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise DescriptorError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DescriptorError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None
