"""Execution selection predicate."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from simple_it_runner.configuration import ConfigurationError, SelectionSettings
from simple_it_runner.run_descriptors import QUALIFIER_SEPARATOR
from simple_it_runner.run_lifecycle import Execution, SuiteRun

from .wildcard_patterns import WildcardPattern, WildcardSyntaxError, compile_wildcard

_LOGGER = logging.getLogger(__name__)

ANY_EXECUTION = "*"


class SelectorConfigurationError(ConfigurationError):
    """Raised when selector values conflict or cannot be compiled."""


class SelectionMode(str, Enum):
    """Active filter mode of a selector."""

    ALL = "all"
    EXACT = "exact"
    PATTERN = "pattern"
    TAG = "tag"


@dataclass(frozen=True)
class ExecutionSelector:
    """Pure predicate deciding which executions of a run are executed."""

    mode: SelectionMode = SelectionMode.ALL
    exact_run_id: str | None = None
    exact_execution: str | None = None
    includes: tuple[WildcardPattern, ...] = ()
    excludes: tuple[WildcardPattern, ...] = ()
    tag: str | None = None

    @classmethod
    def select_all(cls) -> ExecutionSelector:
        return cls()

    @classmethod
    def exact(cls, target: str) -> ExecutionSelector:
        """Select ``runId#executionName``; ``runId`` alone or ``runId#*`` selects the whole run."""
        stripped = target.strip()
        if not stripped:
            raise SelectorConfigurationError("exec target must not be empty.")
        if QUALIFIER_SEPARATOR not in stripped:
            stripped = f"{stripped}{QUALIFIER_SEPARATOR}{ANY_EXECUTION}"
        run_id, execution_name = stripped.split(QUALIFIER_SEPARATOR, 1)
        if not run_id or not execution_name or QUALIFIER_SEPARATOR in execution_name:
            raise SelectorConfigurationError(
                f"exec target '{target}' must have the form runId#executionName."
            )
        return cls(
            mode=SelectionMode.EXACT,
            exact_run_id=run_id,
            exact_execution=execution_name,
        )

    @classmethod
    def patterns(cls, includes: Iterable[str], excludes: Iterable[str]) -> ExecutionSelector:
        return cls(
            mode=SelectionMode.PATTERN,
            includes=_compile_all(includes, "includes"),
            excludes=_compile_all(excludes, "excludes"),
        )

    @classmethod
    def tagged(cls, tag: str) -> ExecutionSelector:
        stripped = tag.strip()
        if not stripped:
            raise SelectorConfigurationError("tag must not be empty.")
        return cls(mode=SelectionMode.TAG, tag=stripped)

    def accept(self, run: SuiteRun, execution: Execution) -> bool:
        """Return whether ``execution`` of ``run`` should be executed."""
        if self.mode is SelectionMode.ALL:
            return True
        if self.mode is SelectionMode.EXACT:
            if run.run_id != self.exact_run_id:
                return False
            return self.exact_execution in (ANY_EXECUTION, execution.name)
        if self.mode is SelectionMode.PATTERN:
            name = execution.qualified_name
            included = not self.includes or any(p.matches(name) for p in self.includes)
            excluded = any(p.matches(name) for p in self.excludes)
            return included and not excluded
        if self.mode is SelectionMode.TAG:
            return self.tag in execution.tags
        raise ValueError(f"Unsupported selection mode: {self.mode}")

    def describe(self) -> str:
        if self.mode is SelectionMode.EXACT:
            return f"exec {self.exact_run_id}{QUALIFIER_SEPARATOR}{self.exact_execution}"
        if self.mode is SelectionMode.PATTERN:
            includes = ",".join(p.text for p in self.includes) or "<all>"
            excludes = ",".join(p.text for p in self.excludes) or "<none>"
            return f"includes {includes} excludes {excludes}"
        if self.mode is SelectionMode.TAG:
            return f"tag {self.tag}"
        return "all executions"


def build_selector(selection: SelectionSettings) -> ExecutionSelector:
    """Validate mode exclusivity and build the single active selector.

    Precedence is exact, then patterns, then tag. Exact combined with either
    of the other modes is rejected.

    Raises:
      SelectorConfigurationError: On conflicting modes or invalid values.
    """
    has_patterns = bool(selection.includes or selection.excludes)
    if selection.exec_target and selection.tag:
        raise SelectorConfigurationError("Cannot use the `tag` and `exec` parameters together")
    if selection.exec_target and has_patterns:
        raise SelectorConfigurationError(
            "Cannot use the `exec` and `includes/excludes` parameters together"
        )

    if selection.exec_target:
        return ExecutionSelector.exact(selection.exec_target)
    if has_patterns:
        if selection.tag:
            _LOGGER.warning("Ignoring tag '%s': includes/excludes take precedence", selection.tag)
        return ExecutionSelector.patterns(selection.includes, selection.excludes)
    if selection.tag:
        return ExecutionSelector.tagged(selection.tag)
    return ExecutionSelector.select_all()


def _compile_all(patterns: Iterable[str], label: str) -> tuple[WildcardPattern, ...]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(compile_wildcard(pattern))
        except WildcardSyntaxError as exc:
            raise SelectorConfigurationError(f"Invalid {label} pattern: {exc}") from exc
    return tuple(compiled)
