"""Configuration domain exports."""

from .config_scaffold_builder import (
    DEFAULT_CONFIG_FILENAME,
    build_placeholder_configuration,
    write_placeholder_configuration,
)
from .loader import (
    ConfigurationError,
    ensure_launchers_available,
    load_configuration,
    parse_selection_section,
)
from .runtime_settings import (
    DEFAULT_REPORT_DIR,
    DEFAULT_SUMMARY_FILE,
    DescriptorSettings,
    ReportSettings,
    SelectionSettings,
    SuiteSettings,
)

__all__ = [
    "DescriptorSettings",
    "ReportSettings",
    "SelectionSettings",
    "SuiteSettings",
    "DEFAULT_REPORT_DIR",
    "DEFAULT_SUMMARY_FILE",
    "ConfigurationError",
    "ensure_launchers_available",
    "load_configuration",
    "parse_selection_section",
    "DEFAULT_CONFIG_FILENAME",
    "build_placeholder_configuration",
    "write_placeholder_configuration",
]
