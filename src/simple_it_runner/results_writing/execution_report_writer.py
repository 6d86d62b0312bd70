"""Global execution report workbook writer."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from simple_it_runner.results_aggregation import SuiteTally
from simple_it_runner.run_lifecycle import Execution, SuiteRun

EXECUTIONS_SHEET_NAME = "Executions"
SUITE_INFO_SHEET_NAME = "SuiteInfo"
REPORT_FILENAME = "it-report.xlsx"
EXECUTION_COLUMNS: tuple[str, ...] = (
    "Run",
    "Execution",
    "Tags",
    "Status",
    "Reason",
    "Duration (s)",
    "Log",
)
_PENDING_LABEL = "PENDING"


class ReportWriteError(Exception):
    """Raised when the global execution report cannot be written."""


def write_execution_report(
    runs: Sequence[SuiteRun],
    tally: SuiteTally,
    output_path: Path | str,
) -> Path:
    """Write one row per execution of every touched run plus a SuiteInfo sheet."""
    workbook = Workbook()
    sheet = workbook.active
    if sheet is None:
        raise ReportWriteError("Workbook active sheet is not available.")
    assert isinstance(sheet, Worksheet)
    sheet.title = EXECUTIONS_SHEET_NAME

    _write_header(sheet)
    row = 2
    for run in runs:
        for execution in run.executions:
            _write_execution_row(sheet, row, run, execution)
            row += 1

    _write_suite_info_sheet(workbook, runs, tally)

    output = Path(output_path)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(output)
    except OSError as exc:
        raise ReportWriteError(f"Cannot create global report {output}: {exc}") from exc
    return output.resolve()


def _write_header(sheet: Worksheet) -> None:
    for column_index, name in enumerate(EXECUTION_COLUMNS, start=1):
        cell = sheet.cell(row=1, column=column_index, value=name)
        cell.style = "Headline 1"
        sheet.column_dimensions[get_column_letter(column_index)].width = max(
            12, min(len(name) + 6, 40)
        )
    sheet.column_dimensions[get_column_letter(EXECUTION_COLUMNS.index("Reason") + 1)].width = 50
    sheet.freeze_panes = "A2"


def _write_execution_row(sheet: Worksheet, row: int, run: SuiteRun, execution: Execution) -> None:
    status = execution.status.value if execution.status is not None else _PENDING_LABEL
    duration = (
        round(execution.duration_seconds, 3) if execution.duration_seconds is not None else None
    )
    values = (
        run.run_id,
        execution.name,
        ", ".join(sorted(execution.tags)) or None,
        status,
        execution.reason,
        duration,
        str(execution.log_path) if execution.log_path is not None else None,
    )
    for column_index, value in enumerate(values, start=1):
        sheet.cell(row=row, column=column_index, value=value)


def _write_suite_info_sheet(
    workbook: Workbook, runs: Sequence[SuiteRun], tally: SuiteTally
) -> None:
    sheet = workbook.create_sheet(SUITE_INFO_SHEET_NAME)
    entries = (
        ("generated_at", datetime.now(UTC).isoformat()),
        ("runs", len(runs)),
        ("executions", tally.total),
        ("succeeded", tally.succeeded),
        ("failed", tally.failed),
        ("errored", tally.errored),
        ("skipped", tally.skipped),
        ("verdict", "PASS" if tally.passed else "FAIL"),
    )
    for row, (key, value) in enumerate(entries, start=1):
        sheet.cell(row=row, column=1, value=key)
        sheet.cell(row=row, column=2, value=value)
