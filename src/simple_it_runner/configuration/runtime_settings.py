"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

DEFAULT_REPORT_DIR = Path("build") / "it-reports"
DEFAULT_SUMMARY_FILE = Path("build") / "failsafe-reports" / "failsafe-summary.xml"


@dataclass(frozen=True)
class DescriptorSettings:
    """Where run descriptors are read from and templated to."""

    input_dir: Path | None
    output_dir: Path


@dataclass(frozen=True)
class ReportSettings:
    """Destinations for per-run artifacts and the suite summary record."""

    report_dir: Path
    summary_file: Path


@dataclass(frozen=True)
class SelectionSettings:
    """Raw selector values as configured, before mode validation."""

    exec_target: str | None = None
    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    tag: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.exec_target or self.includes or self.excludes or self.tag)

    def replaced_by(self, overrides: SelectionSettings) -> SelectionSettings:
        """Return ``overrides`` as a whole when it sets any value, otherwise these settings."""
        return self if overrides.is_empty else overrides


@dataclass(frozen=True)
class SuiteSettings:
    """Top-level configuration aggregate passed explicitly to the orchestrator."""

    path: Path | None
    descriptors: DescriptorSettings
    reports: ReportSettings
    launchers: Mapping[str, Path]
    selection: SelectionSettings = field(default_factory=SelectionSettings)
    properties: Mapping[str, str] = field(default_factory=dict)
    interface: str | None = None

    def with_overrides(
        self,
        *,
        selection: SelectionSettings | None = None,
        properties: Mapping[str, str] | None = None,
    ) -> SuiteSettings:
        """Apply command line overrides on top of the loaded configuration."""
        merged_properties = dict(self.properties)
        merged_properties.update(properties or {})
        return replace(
            self,
            selection=self.selection.replaced_by(selection or SelectionSettings()),
            properties=merged_properties,
        )
