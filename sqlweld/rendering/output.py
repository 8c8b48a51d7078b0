"""Output stage: destination naming, header injection and writing."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from ..core.errors import InternalConsistencyError
from ..core.models import Options, OutputResult
from .formatter import run_formatter
from .io import read_existing, write_output

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "--"
_LINE_BREAK = re.compile(r"[\r\n]")


def output_path_for(template_path: Path, options: Options) -> Path:
    """Return where the output of ``template_path`` is written.

    ``foo.sql.j2`` becomes ``foo.<extension>``, beside the template or
    directly inside the output directory when one is configured.
    """
    base_name = template_path.name
    if not base_name.endswith(options.template_suffix):
        raise InternalConsistencyError(
            template_path,
            f"Template path did not end in {options.template_suffix}",
        )
    base_name = base_name[: -len(options.template_suffix)]

    filename = f"{base_name}.{options.extension}"
    if options.output is not None:
        return options.output / filename
    return template_path.with_name(filename)


def format_header(header: str) -> str:
    """Turn header text into SQL comment lines; empty input gives ''."""
    lines = (line.strip() for line in _LINE_BREAK.split(header))
    return "\n".join(f"{COMMENT_PREFIX} {line}" for line in lines if line)


def apply_header(header: str, body: str) -> str:
    header_lines = format_header(header)
    if not header_lines:
        return body
    return f"{header_lines}\n\n{body}"


def emit(template_path: Path, body: str, options: Options) -> OutputResult:
    """Run the output steps for one rendered template.

    Args:
        template_path: Source template
        body: Rendered template text
        options: Build options

    Returns:
        Where the output went and whether the file was touched
    """
    output_path = output_path_for(template_path, options)
    text = apply_header(options.header, body)

    if options.formatter:
        text = run_formatter(options.formatter, text, template_path)

    data = text.encode("utf-8")

    if not options.always_write and read_existing(output_path) == data:
        logger.info(f"Unchanged {output_path}")
        return OutputResult(
            template_path=template_path, output_path=output_path, written=False
        )

    logger.info(f"Writing {template_path}\nto      {output_path}")
    write_output(output_path, data, mode=options.file_mode)
    return OutputResult(
        template_path=template_path, output_path=output_path, written=True
    )
