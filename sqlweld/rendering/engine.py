"""Template rendering engine."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

from jinja2 import (
    DictLoader,
    Environment,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateSyntaxError,
)

from ..core.errors import DuplicatePartialError, ReadTemplateError, RenderError
from ..core.models import Options, OutputResult, Role, TemplateEntry
from ..discovery.classifier import Discovery
from .output import emit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledEnvironment:
    """A Jinja2 environment with every discovered source compiled.

    Nothing is added after construction, so worker threads can render
    from it concurrently.
    """

    env: Environment
    templates: Mapping[str, Template]


def create_environment(sources: Mapping[str, str]) -> Environment:
    """Create the Jinja2 environment serving ``sources`` by logical name."""
    return Environment(
        loader=DictLoader(dict(sources)),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        cache_size=-1,
        auto_reload=False,
    )


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadTemplateError(path, str(exc)) from exc


def _describe(exc: BaseException) -> str:
    if isinstance(exc, TemplateSyntaxError) and exc.lineno:
        return f"line {exc.lineno}: {exc.message}"
    return f"{type(exc).__name__}: {exc}"


def _compile(env: Environment, name: str, path: Path) -> Template:
    logger.debug(f"Compiling {name} from {path}")
    try:
        return env.get_template(name)
    except TemplateError as exc:
        raise ReadTemplateError(path, _describe(exc)) from exc


def build_environment(discovery: Discovery) -> CompiledEnvironment:
    """Compile all partials, macro libraries and templates.

    Partials and macro libraries are compiled first. Each macro library is
    also evaluated once and published as a global under its name, so
    templates can call ``{{ helpers.some_macro() }}`` without importing it.

    The global is evaluated without any render context, so its macros only
    see their own arguments. A macro that reads context variables must be
    imported per render instead, as ``{% import "helpers" as h with context %}``.

    Args:
        discovery: Frozen result of walking the input tree

    Returns:
        Environment ready for rendering
    """
    sources: dict[str, str] = {}

    for name, entry in discovery.partials.items():
        sources[name] = _read_source(entry.path)

    for template in discovery.templates:
        clash = discovery.partials.get(template.name)
        if clash is not None:
            first, second = sorted((clash.path, template.path))
            raise DuplicatePartialError(template.name, first, second)
        sources[template.name] = _read_source(template.path)

    env = create_environment(sources)

    for name, entry in discovery.partials.items():
        compiled = _compile(env, name, entry.path)
        if entry.role is Role.MACRO:
            try:
                env.globals[name] = compiled.module
            except Exception as exc:
                raise ReadTemplateError(entry.path, _describe(exc)) from exc

    templates = {
        template.name: _compile(env, template.name, template.path)
        for template in discovery.templates
    }

    logger.debug(
        f"Compiled {len(discovery.partials)} partial(s) and {len(templates)} template(s)"
    )
    return CompiledEnvironment(env=env, templates=templates)


def render_template(
    compiled: CompiledEnvironment,
    entry: TemplateEntry,
    context: Mapping[str, Any],
    options: Options,
) -> OutputResult:
    """Render a single template and write its output.

    Args:
        compiled: Shared compiled environment
        entry: Template to render
        context: Template context data
        options: Build options

    Returns:
        Output outcome
    """
    logger.debug(f"Rendering template: {entry.path}")

    try:
        body = compiled.templates[entry.name].render(context)
    except Exception as exc:
        raise RenderError(entry.path, _describe(exc)) from exc

    return emit(entry.path, body, options)


def render_all(
    compiled: CompiledEnvironment,
    templates: Sequence[TemplateEntry],
    context: Mapping[str, Any],
    options: Options,
    workers: int,
) -> list[OutputResult]:
    """Render all templates in parallel, stopping at the first failure.

    Templates that have not started when a failure is seen are cancelled;
    ones already running finish, and their outputs stay on disk.

    Returns:
        Output outcomes in template order
    """
    logger.info(f"Rendering {len(templates)} template(s)")

    with ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix="sqlweld-render"
    ) as pool:
        futures = [
            pool.submit(render_template, compiled, entry, context, options)
            for entry in templates
        ]
        for future in as_completed(futures):
            exc = future.exception()
            if exc is not None:
                for pending in futures:
                    pending.cancel()
                raise exc

    outputs = [future.result() for future in futures]
    logger.info(f"Successfully rendered {len(outputs)} file(s)")
    return outputs
