"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "it-config.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Test configuration template for simple-it-runner.
# Replace every <REQUIRED> placeholder before running the suite.
# Replace <OPTIONAL> placeholders only when your setup needs them.
# Relative paths are resolved against the directory of this file.

descriptors:
  # Directory holding the *-run.json sources; omit to skip property templating.
  input_dir: "<OPTIONAL>"
  # Directory the templated *-run.json files are written to and discovered from.
  output_dir: "<REQUIRED>"

reports:
  report_dir: "build/it-reports"
  # A .xml suffix writes a failsafe-summary record, any other suffix writes JSON.
  summary_file: "build/failsafe-reports/failsafe-summary.xml"

launchers:
  # Launcher name referenced by descriptors -> executable path.
  vertx: "<REQUIRED>"

selection:
  # Use exec on its own, or includes/excludes, or tag.
  # exec: "<OPTIONAL>"          # runId#executionName or runId
  # includes: ["<OPTIONAL>"]    # wildcard globs on runId#executionName
  # excludes: ["<OPTIONAL>"]
  # tag: "<OPTIONAL>"

properties:
  # Substituted into descriptors as ${name} or @name@.
  # version: "<OPTIONAL>"

# Network interface exported to executions as IT_INTERFACE.
# interface: "<OPTIONAL>"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML test configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder test configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Test configuration file already exists: {destination.resolve()}")
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
