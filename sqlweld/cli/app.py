"""Main CLI application."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from ..context import processor
from ..core.errors import ContextError, SqlweldError
from ..core.models import Options
from ..core.settings import Settings
from ..pipeline import build
from .parsers import parse_assignment, parse_command, verbosity_level

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="sqlweld",
    help="Create SQL files from Jinja2 templates and partials.",
    add_completion=False,
)


@app.command()
def weld(
    input_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--input",
            "-i",
            help="Where to look for templates (default: cwd).",
            metavar="DIR",
        ),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Where to write generated files (default: beside each template).",
            metavar="DIR",
        ),
    ] = None,
    assignments: Annotated[
        list[str],
        typer.Option(
            "--set",
            help="Context value (format: KEY=VALUE, dots nest). Repeatable.",
            metavar="KEY=VALUE",
        ),
    ] = [],
    context_files: Annotated[
        list[Path],
        typer.Option(
            "--context-file",
            help="JSON or YAML file merged into the context. Repeatable.",
            metavar="FILE",
        ),
    ] = [],
    env_context: Annotated[
        bool,
        typer.Option(
            "--env-context",
            help="Expose environment variables to templates as 'env'.",
        ),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Print progress; repeat for debug output.",
        ),
    ] = 0,
    print_rerun_if_changed: Annotated[
        bool,
        typer.Option(
            "--print-rerun-if-changed",
            help="Print rerun-if-changed statements for build scripts.",
        ),
    ] = False,
    check_ignored_dirs: Annotated[
        bool,
        typer.Option(
            "--check-ignored-dirs",
            help="Traverse hidden and ignore-listed directories.",
        ),
    ] = False,
    header: Annotated[
        Optional[str],
        typer.Option(
            "--header",
            help="Header added to generated files; the SQL comment prefix is added automatically.",
        ),
    ] = None,
    extension: Annotated[
        Optional[str],
        typer.Option(
            "--ext",
            help="Extension of generated files (default: sql).",
        ),
    ] = None,
    always_write: Annotated[
        bool,
        typer.Option(
            "--always-write",
            help="Rewrite generated files even when their content is unchanged.",
        ),
    ] = False,
    formatter: Annotated[
        Optional[str],
        typer.Option(
            "--formatter",
            help="Command that reads SQL on stdin and prints the formatted SQL.",
            metavar="COMMAND",
        ),
    ] = None,
    workers: Annotated[
        Optional[int],
        typer.Option(
            "--workers",
            min=1,
            help="Threads used to walk and render (default: CPU count, at most 12).",
        ),
    ] = None,
) -> None:
    """Render every *.sql.j2 template into a .sql file."""
    logging.basicConfig(
        level=verbosity_level(verbose),
        format="[%(levelname)s] %(message)s",
    )

    try:
        context = processor.build_context(
            files=context_files,
            assignments=[parse_assignment(value) for value in assignments],
            include_env=env_context,
        )
    except ContextError as e:
        raise typer.BadParameter(str(e)) from e

    try:
        settings = Settings()
        formatter_command = (
            formatter if formatter is not None else settings.formatter
        )
        options = Options(
            input=input_dir if input_dir is not None else Path.cwd(),
            output=output_dir,
            context=context,
            verbosity=verbose,
            check_ignored_dirs=check_ignored_dirs,
            print_rerun_if_changed=print_rerun_if_changed,
            header=header if header is not None else settings.header,
            extension=extension if extension is not None else settings.extension,
            always_write=always_write,
            formatter=parse_command(formatter_command) if formatter_command else None,
            template_suffix=settings.template_suffix,
            partial_suffix=settings.partial_suffix,
            macro_suffix=settings.macro_suffix,
            workers=workers,
        )
    except ValidationError as e:
        raise typer.BadParameter(str(e)) from e

    logger.debug(f"Options: {options!r}")

    try:
        outputs = build(options)
    except SqlweldError as e:
        logger.error(str(e))
        raise typer.Exit(code=1) from e

    written = sum(1 for output in outputs if output.written)
    logger.info(f"Completed: {written} of {len(outputs)} file(s) written")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
