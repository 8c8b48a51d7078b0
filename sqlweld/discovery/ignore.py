"""Ignore-file handling for directory traversal."""

from __future__ import annotations

import logging
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)

IGNORE_FILES = (".gitignore", ".ignore")


def is_hidden(name: str) -> bool:
    return name.startswith(".")


class IgnoreRules:
    """Gitignore-style rules collected from the walk root down to a directory.

    Each layer is anchored at the directory holding the ignore file, so a
    pattern such as ``/build`` only matches relative to that directory.
    Instances are immutable and shared between walker threads.
    """

    def __init__(self, layers: tuple[tuple[Path, pathspec.PathSpec], ...] = ()) -> None:
        self._layers = layers

    def descend(self, directory: Path) -> IgnoreRules:
        """Return the rules in effect inside ``directory``.

        Lines that are not valid gitignore patterns are dropped, as git
        itself does, instead of failing the walk.
        """
        lines: list[str] = []
        for filename in IGNORE_FILES:
            ignore_file = directory / filename
            try:
                raw_lines = ignore_file.read_text(encoding="utf-8").splitlines()
            except FileNotFoundError:
                continue
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug(f"Skipping unreadable ignore file {ignore_file}: {exc}")
                continue
            lines.extend(_valid_lines(ignore_file, raw_lines))

        if not lines:
            return self

        spec = pathspec.GitIgnoreSpec.from_lines(lines)
        return IgnoreRules(self._layers + ((directory, spec),))

    def is_ignored(self, path: Path, *, is_dir: bool) -> bool:
        """Check ``path`` against the innermost ignore file that decides it.

        A deeper file overrides its parents, so ``!keep.sql.j2`` in a
        subdirectory re-includes a file ignored further up.
        """
        for base, spec in reversed(self._layers):
            relative = path.relative_to(base).as_posix()
            # Directory-only patterns such as "build/" need the trailing slash.
            if is_dir:
                relative += "/"
            include = spec.check_file(relative).include
            if include is not None:
                return include
        return False


def _valid_lines(ignore_file: Path, lines: list[str]) -> list[str]:
    valid: list[str] = []
    for number, line in enumerate(lines, start=1):
        try:
            pathspec.GitIgnoreSpec.from_lines([line])
        except ValueError as exc:
            logger.debug(f"Dropping invalid pattern {ignore_file}:{number}: {exc}")
            continue
        valid.append(line)
    return valid
