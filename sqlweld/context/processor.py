"""Render context assembly from files, assignments and the environment."""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Iterable

import yaml

from ..core.errors import ContextError

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"^-?\d+$")
_FLOAT_PATTERN = re.compile(r"^-?\d+(?:\.\d+)?$")
_YAML_SUFFIXES = {".yaml", ".yml"}


def coerce_value(value: str) -> bool | int | float | str | None:
    """Coerce a string value to its appropriate type.

    Args:
        value: String value to coerce

    Returns:
        Coerced value (bool, int, float, None for ``null``, or str)
    """
    value_lower = value.lower()

    if value_lower in ("true", "false"):
        return value_lower == "true"

    if value_lower == "null":
        return None

    if _INT_PATTERN.match(value):
        try:
            return int(value)
        except (ValueError, OverflowError):
            return value

    if _FLOAT_PATTERN.match(value):
        try:
            return float(value)
        except (ValueError, OverflowError):
            return value

    return value


def set_dotted(context: dict[str, Any], key: str, value: Any) -> None:
    """Assign ``value`` under ``key``, creating nested mappings for dots."""
    parts = key.split(".")
    if any(not part for part in parts):
        raise ContextError(detail=f"Invalid context key: {key!r}")

    target = context
    for part in parts[:-1]:
        child = target.setdefault(part, {})
        if not isinstance(child, dict):
            raise ContextError(
                detail=f"Cannot set {key!r}: {part!r} already holds a non-mapping value"
            )
        target = child
    target[parts[-1]] = value


def load_context_file(path: Path) -> dict[str, Any]:
    """Load a JSON or YAML mapping from ``path``.

    Args:
        path: Context file; ``.yaml``/``.yml`` are read as YAML, anything else as JSON

    Returns:
        The top-level mapping
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ContextError(path, str(exc)) from exc

    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(raw)
        else:
            data = json.loads(raw)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ContextError(path, str(exc)) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ContextError(path, "Top level of a context file must be a mapping")

    logger.debug(f"Loaded {len(data)} context key(s) from {path}")
    return data


def build_context(
    files: Iterable[Path] = (),
    assignments: Iterable[tuple[str, str]] = (),
    include_env: bool = False,
) -> dict[str, Any]:
    """Build the rendering context.

    Sources are merged in order, later ones winning: the process
    environment under ``env``, context files, then ``KEY=VALUE`` assignments.

    Returns:
        Context dictionary for template rendering
    """
    context: dict[str, Any] = {}

    if include_env:
        context["env"] = dict(os.environ)

    for path in files:
        context.update(load_context_file(path))

    for key, raw_value in assignments:
        set_dotted(context, key, coerce_value(raw_value))

    logger.debug(f"Context keys: {sorted(context)}")
    return context
