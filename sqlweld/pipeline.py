"""Build entry point tying discovery, compilation and rendering together."""

from __future__ import annotations

import logging
from contextlib import closing
from typing import TextIO

from .core.errors import ReadTemplateError
from .core.models import Options, OutputResult
from .discovery.classifier import collect
from .discovery.walker import PathSource, default_workers
from .rendering import engine

logger = logging.getLogger(__name__)


def build(options: Options, hint_stream: TextIO | None = None) -> list[OutputResult]:
    """Render every template below ``options.input``.

    Discovery finishes completely before anything is compiled, since a
    template may use any partial regardless of where the walk found it.
    A duplicate partial or a compile error therefore stops the build
    before a single file is written.

    Args:
        options: Build options
        hint_stream: Where rebuild hints go when they are requested

    Returns:
        One result per rendered template; empty when there was nothing to do
    """
    root = options.input
    if not root.is_dir():
        raise ReadTemplateError(root, "Input directory does not exist")

    workers = options.workers or default_workers()

    source = PathSource(
        root,
        options.template_suffix,
        include_ignored=options.check_ignored_dirs,
        workers=workers,
    )
    with closing(source.walk()) as paths:
        discovery = collect(paths, root, options, hint_stream=hint_stream)

    if not discovery.templates:
        logger.info("No templates found")
        return []

    compiled = engine.build_environment(discovery)
    return engine.render_all(
        compiled, discovery.templates, options.context, options, workers
    )
