"""Wildcard glob dialect used to select executions.

The dialect is fixed and platform independent:

* ``*`` matches any run of characters, including none and including ``#``;
* ``?`` matches exactly one character;
* every other character matches itself, case-sensitively.

``[``, ``]``, ``{`` and ``}`` are reserved and rejected, so that a pattern
written for a richer glob syntax fails loudly instead of matching nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

RESERVED_CHARACTERS = frozenset("[]{}")


class WildcardSyntaxError(ValueError):
    """Raised for empty patterns or patterns using reserved characters."""


@dataclass(frozen=True)
class WildcardPattern:
    """A compiled wildcard glob."""

    text: str
    regex: re.Pattern[str] = field(repr=False, compare=False)

    def matches(self, name: str) -> bool:
        return self.regex.fullmatch(name) is not None


def compile_wildcard(text: str) -> WildcardPattern:
    """Compile ``text`` into a :class:`WildcardPattern`."""
    if not text or not text.strip():
        raise WildcardSyntaxError("Wildcard pattern must not be empty.")
    reserved = sorted(RESERVED_CHARACTERS.intersection(text))
    if reserved:
        raise WildcardSyntaxError(
            f"Wildcard pattern '{text}' uses unsupported character(s): {''.join(reserved)}"
        )
    parts = []
    for char in text:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return WildcardPattern(text=text, regex=re.compile("".join(parts), re.DOTALL))
