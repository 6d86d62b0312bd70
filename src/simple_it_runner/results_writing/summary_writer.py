"""Suite summary record writer and reader."""

from __future__ import annotations

import json
import os
import tempfile
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from .report_models import SuiteSummary, SummaryFormat

FAILSAFE_ROOT_TAG = "failsafe-summary"
_XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
_FAILSAFE_XSD = (
    "https://maven.apache.org/surefire/maven-surefire-plugin/xsd/failsafe-summary.xsd"
)
_COUNT_FIELDS = ("completed", "errors", "failures", "skipped")


class SummaryWriteError(Exception):
    """Raised when the summary record cannot be persisted."""


class SummaryReadError(Exception):
    """Raised when a summary record is missing or malformed."""


def write_suite_summary(summary: SuiteSummary, destination: Path | str) -> Path:
    """Atomically write the summary record, creating the parent directory if needed.

    Args:
      summary: Counters to persist.
      destination: Target path; a ``.xml`` suffix selects the failsafe format.

    Returns:
      The resolved destination path.

    Raises:
      SummaryWriteError: If the record cannot be written. The destination is
        never left partially written.
    """
    path = Path(destination)
    payload = _render(summary, SummaryFormat.for_path(path))
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handle, temp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        temp_path = Path(temp_name)
        try:
            with os.fdopen(handle, "w", encoding="utf-8") as stream:
                stream.write(payload)
            os.replace(temp_path, path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise SummaryWriteError(f"Cannot write summary file {path}: {exc}") from exc
    return path.resolve()


def read_suite_summary(source: Path | str) -> SuiteSummary:
    """Read a summary record written by :func:`write_suite_summary`."""
    path = Path(source)
    if not path.is_file():
        raise SummaryReadError(f"Summary file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SummaryReadError(f"Cannot read summary file {path}: {exc}") from exc
    if SummaryFormat.for_path(path) is SummaryFormat.FAILSAFE_XML:
        return _parse_failsafe_xml(text, path)
    return _parse_json(text, path)


def _render(summary: SuiteSummary, summary_format: SummaryFormat) -> str:
    if summary_format is SummaryFormat.FAILSAFE_XML:
        return _render_failsafe_xml(summary)
    payload = {
        "completed": summary.completed,
        "errors": summary.errors,
        "failures": summary.failures,
        "skipped": summary.skipped,
        "failureMessage": summary.failure_message,
    }
    return json.dumps(payload, indent=2) + "\n"


def _render_failsafe_xml(summary: SuiteSummary) -> str:
    root = ET.Element(
        FAILSAFE_ROOT_TAG,
        {"xmlns:xsi": _XSI_NAMESPACE, "xsi:noNamespaceSchemaLocation": _FAILSAFE_XSD},
    )
    if summary.result_code is not None:
        root.set("result", str(summary.result_code))
    root.set("timeout", "false")
    for field_name in _COUNT_FIELDS:
        ET.SubElement(root, field_name).text = str(getattr(summary, field_name))
    failure_message = ET.SubElement(root, "failureMessage")
    if summary.failure_message:
        failure_message.text = summary.failure_message
    ET.indent(root, space="    ")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'


def _parse_failsafe_xml(text: str, path: Path) -> SuiteSummary:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise SummaryReadError(f"Summary file {path} is not valid XML: {exc}") from exc
    if root.tag != FAILSAFE_ROOT_TAG:
        raise SummaryReadError(f"Summary file {path} has unexpected root <{root.tag}>.")
    counts = {name: root.findtext(name) for name in _COUNT_FIELDS}
    return SuiteSummary(
        **{name: _parse_count(value, name, path) for name, value in counts.items()},
        failure_message=root.findtext("failureMessage") or None,
    )


def _parse_json(text: str, path: Path) -> SuiteSummary:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SummaryReadError(f"Summary file {path} is not valid JSON: {exc}") from exc
    if not isinstance(parsed, Mapping):
        raise SummaryReadError(f"Summary file {path} root must be an object.")
    failure_message = parsed.get("failureMessage")
    return SuiteSummary(
        **{name: _parse_count(parsed.get(name), name, path) for name in _COUNT_FIELDS},
        failure_message=failure_message if isinstance(failure_message, str) else None,
    )


def _parse_count(value: Any, field_name: str, path: Path) -> int:
    if isinstance(value, bool):
        raise SummaryReadError(f"Summary file {path} field '{field_name}' must be an integer.")
    try:
        count = int(value)
    except (TypeError, ValueError) as exc:
        raise SummaryReadError(
            f"Summary file {path} field '{field_name}' must be an integer."
        ) from exc
    if count < 0:
        raise SummaryReadError(f"Summary file {path} field '{field_name}' must not be negative.")
    return count
