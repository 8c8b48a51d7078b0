"""Role classification and partial-name bookkeeping."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, TextIO

from ..core.errors import DuplicatePartialError, InternalConsistencyError
from ..core.models import DiscoveredPath, Options, Role, TemplateEntry

logger = logging.getLogger(__name__)


def classify(path: Path, root: Path, options: Options) -> DiscoveredPath:
    """Derive the role and logical name of a template file.

    The macro suffix is checked before the partial suffix, and both before
    the plain template suffix, so the most specific match wins.

    Args:
        path: Template file path
        root: Input root the path was discovered under
        options: Build options holding the suffixes

    Returns:
        The classified path
    """
    filename = path.name

    for role, suffix in (
        (Role.MACRO, options.macro_suffix),
        (Role.PARTIAL, options.partial_suffix),
    ):
        if filename.endswith(suffix):
            name = filename[: -len(suffix)]
            if not name:
                raise InternalConsistencyError(
                    path, f"{role.value} file has no name before {suffix!r}"
                )
            return DiscoveredPath(path=path, role=role, name=name)

    if not filename.endswith(options.template_suffix):
        raise InternalConsistencyError(
            path, f"Template path did not end in {options.template_suffix}"
        )
    if filename == options.template_suffix:
        raise InternalConsistencyError(
            path, f"Template file has no name before {options.template_suffix!r}"
        )

    relative = path.relative_to(root).as_posix()
    name = relative[: -len(options.template_suffix)]
    return DiscoveredPath(path=path, role=Role.NORMAL, name=name)


class PartialRegistry:
    """Maps partial and macro names to their source files.

    Written only by the collecting thread; ``freeze`` hands out a read-only
    view once discovery is over.
    """

    def __init__(self) -> None:
        self._entries: dict[str, DiscoveredPath] = {}
        self._frozen = False

    def add(self, entry: DiscoveredPath) -> None:
        if self._frozen:
            raise InternalConsistencyError(
                entry.path, "Partial registered after the registry was frozen"
            )
        existing = self._entries.get(entry.name)
        if existing is not None and existing.path != entry.path:
            # Sorted so the error does not depend on walk order.
            first, second = sorted((existing.path, entry.path))
            raise DuplicatePartialError(entry.name, first, second)
        self._entries[entry.name] = entry

    def freeze(self) -> Mapping[str, DiscoveredPath]:
        self._frozen = True
        return MappingProxyType(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class Discovery:
    """Everything collected from the input tree."""

    partials: Mapping[str, DiscoveredPath]
    templates: tuple[TemplateEntry, ...]


def collect(
    paths: Iterable[Path],
    root: Path,
    options: Options,
    hint_stream: TextIO | None = None,
) -> Discovery:
    """Drain the discovered paths into a partial registry and a template list.

    Args:
        paths: Template files, in any order
        root: Input root the paths were found under
        options: Build options
        hint_stream: Where rebuild hints go (default: stdout)

    Returns:
        Frozen discovery result
    """
    registry = PartialRegistry()
    templates: list[TemplateEntry] = []
    stream = hint_stream or sys.stdout

    for path in paths:
        if options.print_rerun_if_changed:
            print(options.rerun_format.format(path=path), file=stream)

        entry = classify(path, root, options)

        if entry.role is Role.NORMAL:
            templates.append(TemplateEntry(path=entry.path, name=entry.name))
            continue

        label = "macro library" if entry.role is Role.MACRO else "partial"
        logger.info(f"Reading {label} {entry.name} from {path}")
        registry.add(entry)

    # Deterministic order for logging and results.
    templates.sort(key=lambda t: t.name)
    return Discovery(partials=registry.freeze(), templates=tuple(templates))
