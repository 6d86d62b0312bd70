"""Run descriptor discovery and property templating."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path

from .descriptor_models import RUN_DESCRIPTOR_GLOB

_LOGGER = logging.getLogger(__name__)

_PROPERTY_TOKEN = re.compile(r"\$\{([^}\s]+)\}|@([A-Za-z0-9_.\-]+)@")
_ENV_PREFIX = "env."


def discover_descriptor_files(root: Path | str) -> list[Path]:
    """Return every ``*-run.json`` file below ``root`` at any depth, sorted by path."""
    root_path = Path(root)
    if not root_path.is_dir():
        return []
    return sorted(path for path in root_path.rglob(RUN_DESCRIPTOR_GLOB) if path.is_file())


def filter_descriptor_files(
    input_dir: Path | str,
    output_dir: Path | str,
    properties: Mapping[str, str],
    *,
    environ: Mapping[str, str] | None = None,
) -> list[Path]:
    """Copy descriptors to ``output_dir`` with ``${name}``/``@name@`` substitution.

    Relative locations below ``input_dir`` are preserved. Tokens whose name is
    neither a property nor ``env.<VARIABLE>`` are left untouched.

    Returns:
      The written descriptor paths, sorted.

    Raises:
      OSError: If a descriptor cannot be read or written.
    """
    source_root = Path(input_dir)
    target_root = Path(output_dir)
    values = _templating_values(properties, os.environ if environ is None else environ)

    written: list[Path] = []
    for source in discover_descriptor_files(source_root):
        target = target_root / source.relative_to(source_root)
        target.parent.mkdir(parents=True, exist_ok=True)
        text = source.read_text(encoding="utf-8")
        target.write_text(substitute_properties(text, values), encoding="utf-8")
        written.append(target)
    _LOGGER.debug("Templated %d run descriptor(s) into %s", len(written), target_root)
    return sorted(written)


def substitute_properties(text: str, values: Mapping[str, str]) -> str:
    """Replace known ``${name}`` and ``@name@`` tokens in ``text``."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1) or match.group(2)
        return values.get(name, match.group(0))

    return _PROPERTY_TOKEN.sub(_replace, text)


def _templating_values(
    properties: Mapping[str, str], environ: Mapping[str, str]
) -> dict[str, str]:
    values = {f"{_ENV_PREFIX}{name}": value for name, value in environ.items()}
    values.update(properties)
    return values
