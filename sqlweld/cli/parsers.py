"""CLI argument parsers and validators."""

from __future__ import annotations

import shlex

import typer


def parse_assignment(value: str) -> tuple[str, str]:
    """Parse a context argument in format KEY=VALUE."""
    if "=" not in value:
        raise typer.BadParameter(f"Must be KEY=VALUE, got: {value!r}")
    key, raw = value.split("=", 1)
    key = key.strip()
    if not key:
        raise typer.BadParameter(f"Missing key in: {value!r}")
    return key, raw


def parse_command(value: str) -> tuple[str, ...] | None:
    """Split a shell-quoted formatter command; empty means no formatter."""
    try:
        argv = shlex.split(value)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid formatter command: {e}") from e
    return tuple(argv) or None


def verbosity_level(verbosity: int) -> str:
    """Map a repeat count of -v to a logging level name."""
    if verbosity <= 0:
        return "WARNING"
    if verbosity == 1:
        return "INFO"
    return "DEBUG"
