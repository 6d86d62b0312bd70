"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    DEFAULT_REPORT_DIR,
    DEFAULT_SUMMARY_FILE,
    DescriptorSettings,
    ReportSettings,
    SelectionSettings,
    SuiteSettings,
)


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> SuiteSettings:
    """Load and validate the test configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    base_path = path.resolve().parent
    return SuiteSettings(
        path=path.resolve(),
        descriptors=_parse_descriptors_section(parsed.get("descriptors"), base_path),
        reports=_parse_reports_section(parsed.get("reports"), base_path),
        launchers=_parse_launchers_section(parsed.get("launchers"), base_path),
        selection=parse_selection_section(parsed.get("selection")),
        properties=_parse_properties_section(parsed.get("properties")),
        interface=_optional_string(parsed.get("interface"), "interface"),
    )


def ensure_launchers_available(settings: SuiteSettings) -> None:
    """Fail before any run starts when a configured launcher executable is missing."""
    for name, executable in settings.launchers.items():
        if not executable.is_file():
            raise ConfigurationError(f"Launcher '{name}' not found: {executable}")


def parse_selection_section(value: Any) -> SelectionSettings:
    """Normalize a ``selection`` mapping; mode exclusivity is checked by the selector."""
    if value is None:
        return SelectionSettings()
    section = _require_mapping(value, "selection")
    return SelectionSettings(
        exec_target=_optional_string(section.get("exec"), "selection.exec"),
        includes=_normalize_pattern_list(section.get("includes"), "selection.includes"),
        excludes=_normalize_pattern_list(section.get("excludes"), "selection.excludes"),
        tag=_optional_string(section.get("tag"), "selection.tag"),
    )


def _parse_descriptors_section(value: Any, base_path: Path) -> DescriptorSettings:
    section = _require_mapping(value, "descriptors")
    output_dir = _require_non_empty_string(section.get("output_dir"), "descriptors.output_dir")
    input_dir = _optional_string(section.get("input_dir"), "descriptors.input_dir")
    return DescriptorSettings(
        input_dir=_resolve_path(base_path, input_dir) if input_dir else None,
        output_dir=_resolve_path(base_path, output_dir),
    )


def _parse_reports_section(value: Any, base_path: Path) -> ReportSettings:
    section = {} if value is None else _require_mapping(value, "reports")
    report_dir = _optional_string(section.get("report_dir"), "reports.report_dir")
    summary_file = _optional_string(section.get("summary_file"), "reports.summary_file")
    return ReportSettings(
        report_dir=_resolve_path(base_path, report_dir or str(DEFAULT_REPORT_DIR)),
        summary_file=_resolve_path(base_path, summary_file or str(DEFAULT_SUMMARY_FILE)),
    )


def _parse_launchers_section(value: Any, base_path: Path) -> dict[str, Path]:
    section = _require_mapping(value, "launchers")
    if not section:
        raise ConfigurationError("launchers must define at least one launcher.")
    launchers: dict[str, Path] = {}
    for name, raw_path in section.items():
        if not isinstance(name, str) or not name.strip():
            raise ConfigurationError("launchers keys must be non-empty strings.")
        executable = _require_non_empty_string(raw_path, f"launchers.{name}")
        launchers[name.strip()] = _resolve_path(base_path, executable)
    return launchers


def _parse_properties_section(value: Any) -> dict[str, str]:
    if value is None:
        return {}
    section = _require_mapping(value, "properties")
    properties: dict[str, str] = {}
    for key, raw in section.items():
        if isinstance(raw, Mapping) or (isinstance(raw, Sequence) and not isinstance(raw, str)):
            raise ConfigurationError(f"properties.{key} must be a scalar value.")
        properties[str(key)] = "" if raw is None else _stringify_scalar(raw)
    return properties


def _stringify_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _normalize_pattern_list(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if isinstance(value, Sequence):
        normalized = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"{field_name} entries must be strings.")
            normalized.extend(part.strip() for part in item.split(",") if part.strip())
        return tuple(normalized)
    raise ConfigurationError(f"{field_name} must be a string or list of strings.")


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None
