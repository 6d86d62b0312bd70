"""Configuration loader tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from simple_it_runner.configuration.loader import (
    ConfigurationError,
    ensure_launchers_available,
    load_configuration,
    parse_selection_section,
)
from simple_it_runner.configuration.runtime_settings import SelectionSettings


def _write_file(path: Path, contents: str) -> Path:
    path.write_text(contents, encoding="utf-8")
    return path


def test_loads_yaml_configuration_with_defaults(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "it-config.yaml",
        """
descriptors:
  output_dir: build/runs
launchers:
  vertx: /opt/vertx/bin/vertx
""",
    )

    settings = load_configuration(config_path)

    assert settings.path == config_path.resolve()
    assert settings.descriptors.input_dir is None
    assert settings.descriptors.output_dir == (tmp_path / "build" / "runs").resolve()
    assert settings.reports.report_dir == (tmp_path / "build" / "it-reports").resolve()
    assert settings.reports.summary_file == (
        tmp_path / "build" / "failsafe-reports" / "failsafe-summary.xml"
    ).resolve()
    assert settings.launchers == {"vertx": Path("/opt/vertx/bin/vertx")}
    assert settings.selection == SelectionSettings()
    assert settings.properties == {}
    assert settings.interface is None


def test_loads_json_configuration_with_selection_properties_and_interface(tmp_path: Path) -> None:
    config = {
        "descriptors": {"input_dir": "src/runs", "output_dir": "/abs/runs"},
        "reports": {"report_dir": "reports", "summary_file": "summary.json"},
        "launchers": {"java": "bin/java"},
        "selection": {"includes": "alpha#*, beta#one", "excludes": ["*#slow"]},
        "properties": {"version": "4.5.1", "port": 8080, "secure": True, "empty": None},
        "interface": "eth0",
    }
    config_path = _write_file(tmp_path / "config.json", json.dumps(config))

    settings = load_configuration(config_path)

    assert settings.descriptors.input_dir == (tmp_path / "src" / "runs").resolve()
    assert settings.descriptors.output_dir == Path("/abs/runs")
    assert settings.reports.summary_file == (tmp_path / "summary.json").resolve()
    assert settings.launchers["java"] == (tmp_path / "bin" / "java").resolve()
    assert settings.selection.includes == ("alpha#*", "beta#one")
    assert settings.selection.excludes == ("*#slow",)
    assert settings.properties == {
        "version": "4.5.1",
        "port": "8080",
        "secure": "true",
        "empty": "",
    }
    assert settings.interface == "eth0"


def test_missing_configuration_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Configuration file not found"):
        load_configuration(tmp_path / "missing.yaml")


def test_configuration_root_must_be_mapping(tmp_path: Path) -> None:
    config_path = _write_file(tmp_path / "config.yaml", "- just\n- a list\n")

    with pytest.raises(ConfigurationError, match="Configuration root must be a mapping"):
        load_configuration(config_path)


def test_invalid_yaml_is_reported_as_configuration_error(tmp_path: Path) -> None:
    config_path = _write_file(tmp_path / "config.yaml", "descriptors: [unclosed\n")

    with pytest.raises(ConfigurationError, match="Failed to parse configuration file"):
        load_configuration(config_path)


@pytest.mark.parametrize(
    ("contents", "message"),
    [
        ("launchers: {vertx: /bin/vertx}\n", "'descriptors' is required"),
        ("descriptors: {output_dir: ''}\nlaunchers: {vertx: /bin/vertx}\n", "must not be empty"),
        ("descriptors: {output_dir: runs}\n", "'launchers' is required"),
        ("descriptors: {output_dir: runs}\nlaunchers: {}\n", "at least one launcher"),
        ("descriptors: {output_dir: runs}\nlaunchers: {vertx: 3}\n", "launchers.vertx"),
        (
            "descriptors: {output_dir: runs}\nlaunchers: {vertx: x}\nproperties: {a: [1]}\n",
            "properties.a must be a scalar",
        ),
        (
            "descriptors: {output_dir: runs}\nlaunchers: {vertx: x}\nselection: {includes: [1]}\n",
            "selection.includes entries must be strings",
        ),
        (
            "descriptors: {output_dir: runs}\nlaunchers: {vertx: x}\nselection: {tag: [a]}\n",
            "selection.tag must be a string",
        ),
    ],
)
def test_invalid_sections_raise_configuration_error(
    tmp_path: Path, contents: str, message: str
) -> None:
    config_path = _write_file(tmp_path / "config.yaml", contents)

    with pytest.raises(ConfigurationError, match=message):
        load_configuration(config_path)


def test_parse_selection_section_normalizes_blank_values() -> None:
    selection = parse_selection_section(
        {"exec": "  ", "includes": ["", " a* "], "excludes": None, "tag": " smoke "}
    )

    assert selection == SelectionSettings(exec_target=None, includes=("a*",), tag="smoke")


def test_parse_selection_section_splits_comma_separated_list_entries() -> None:
    selection = parse_selection_section(
        {"includes": ["alpha#*, beta#*", "gamma#one"], "excludes": "*#slow,,*#flaky"}
    )

    assert selection.includes == ("alpha#*", "beta#*", "gamma#one")
    assert selection.excludes == ("*#slow", "*#flaky")


def test_with_overrides_replaces_whole_selection_and_merges_properties(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "config.yaml",
        """
descriptors: {output_dir: runs}
launchers: {vertx: /bin/vertx}
selection: {tag: smoke, includes: "a*"}
properties: {version: "1.0", port: "80"}
""",
    )
    settings = load_configuration(config_path)

    overridden = settings.with_overrides(
        selection=SelectionSettings(exec_target="alpha#one"),
        properties={"port": "8080"},
    )

    assert overridden.selection == SelectionSettings(exec_target="alpha#one")
    assert overridden.properties == {"version": "1.0", "port": "8080"}
    assert settings.selection.tag == "smoke"


def test_with_overrides_keeps_configured_selection_when_none_given(tmp_path: Path) -> None:
    config_path = _write_file(
        tmp_path / "config.yaml",
        """
descriptors: {output_dir: runs}
launchers: {vertx: /bin/vertx}
selection: {tag: smoke}
""",
    )
    settings = load_configuration(config_path)

    overridden = settings.with_overrides(selection=SelectionSettings(), properties={})

    assert overridden.selection == SelectionSettings(tag="smoke")


def test_ensure_launchers_available_rejects_missing_executable(tmp_path: Path) -> None:
    existing = _write_file(tmp_path / "vertx", "#!/bin/sh\n")
    config_path = _write_file(
        tmp_path / "config.yaml",
        f"descriptors: {{output_dir: runs}}\nlaunchers: {{vertx: {existing}, java: missing}}\n",
    )
    settings = load_configuration(config_path)

    with pytest.raises(ConfigurationError, match="Launcher 'java' not found"):
        ensure_launchers_available(settings)
