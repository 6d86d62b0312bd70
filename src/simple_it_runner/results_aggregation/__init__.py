"""Results aggregation domain exports."""

from .suite_tally import SuiteTally, iter_executions, tally_executions, unsuccessful_executions

__all__ = [
    "SuiteTally",
    "iter_executions",
    "tally_executions",
    "unsuccessful_executions",
]
