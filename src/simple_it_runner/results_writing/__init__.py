"""Results writing domain exports."""

from .execution_report_writer import (
    EXECUTIONS_SHEET_NAME,
    REPORT_FILENAME,
    SUITE_INFO_SHEET_NAME,
    ReportWriteError,
    write_execution_report,
)
from .report_models import SuiteSummary, SummaryFormat
from .summary_writer import (
    SummaryReadError,
    SummaryWriteError,
    read_suite_summary,
    write_suite_summary,
)

__all__ = [
    "SuiteSummary",
    "SummaryFormat",
    "SummaryReadError",
    "SummaryWriteError",
    "read_suite_summary",
    "write_suite_summary",
    "EXECUTIONS_SHEET_NAME",
    "SUITE_INFO_SHEET_NAME",
    "REPORT_FILENAME",
    "ReportWriteError",
    "write_execution_report",
]
