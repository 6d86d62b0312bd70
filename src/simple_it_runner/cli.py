"""Command line interface entry point."""

from __future__ import annotations

import logging
import sys

import click

from simple_it_runner.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    load_configuration,
    parse_selection_section,
    write_placeholder_configuration,
)
from simple_it_runner.results_writing import (
    ReportWriteError,
    SummaryReadError,
    SummaryWriteError,
    read_suite_summary,
)
from simple_it_runner.suite_orchestration import SuiteAbortedError, execute_suite


class CliError(Exception):
    """Custom CLI error."""


def _parse_property(
    _ctx: click.Context, _param: click.Parameter, values: tuple[str, ...]
) -> dict[str, str]:
    properties: dict[str, str] = {}
    for value in values:
        key, separator, raw = value.partition("=")
        if not separator or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got '{value}'")
        properties[key.strip()] = raw
    return properties


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="simple-it-runner")
def cli() -> None:
    """Descriptor-driven integration test runner."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML test configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML test configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="run")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON test configuration file",
)
@click.option(
    "--exec",
    "exec_target",
    required=False,
    help="Run only runId#executionName (or every execution of runId)",
)
@click.option(
    "--include",
    "includes",
    multiple=True,
    help="Wildcard glob on runId#executionName to include (repeatable, comma separated)",
)
@click.option(
    "--exclude",
    "excludes",
    multiple=True,
    help="Wildcard glob on runId#executionName to exclude (repeatable, comma separated)",
)
@click.option("--tag", required=False, help="Run only executions carrying this tag")
@click.option(
    "--property",
    "properties",
    multiple=True,
    callback=_parse_property,
    help="KEY=VALUE templating property, overrides the configured value (repeatable)",
)
@click.option("--verbose", is_flag=True, default=False, help="Log debug details.")
def run_suite(
    config_path: str,
    exec_target: str | None,
    includes: tuple[str, ...],
    excludes: tuple[str, ...],
    tag: str | None,
    properties: dict[str, str],
    verbose: bool,
) -> None:
    """Execute the selected executions of every run descriptor."""
    _configure_logging(verbose)
    try:
        selection = parse_selection_section(
            {
                "exec": exec_target,
                "includes": list(includes),
                "excludes": list(excludes),
                "tag": tag,
            }
        )
        settings = load_configuration(config_path).with_overrides(
            selection=selection, properties=properties
        )
        outcome = execute_suite(settings)
    except (ConfigurationError, SuiteAbortedError, ReportWriteError, SummaryWriteError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(outcome.summary_path))
    if not outcome.passed:
        raise CliError(
            f"{outcome.tally.failed} execution(s) failed and "
            f"{outcome.tally.errored} in error out of {outcome.tally.total}."
        )


@cli.command(name="verify")
@click.option(
    "--summary",
    "summary_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the summary record written by the run command",
)
def verify(summary_path: str) -> None:
    """Fail when a summary record reports failed or errored executions."""
    try:
        summary = read_suite_summary(summary_path)
    except SummaryReadError as exc:
        raise CliError(str(exc)) from exc
    click.echo(
        f"completed={summary.completed} errors={summary.errors} "
        f"failures={summary.failures} skipped={summary.skipped}"
    )
    if not summary.passed:
        raise CliError("There are test failures.")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
