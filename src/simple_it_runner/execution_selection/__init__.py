"""Execution selection domain exports."""

from .execution_selector import (
    ExecutionSelector,
    SelectionMode,
    SelectorConfigurationError,
    build_selector,
)
from .wildcard_patterns import WildcardPattern, WildcardSyntaxError, compile_wildcard

__all__ = [
    "ExecutionSelector",
    "SelectionMode",
    "SelectorConfigurationError",
    "build_selector",
    "WildcardPattern",
    "WildcardSyntaxError",
    "compile_wildcard",
]
