"""Sqlweld - Create SQL files from templates and partials.

Discovers ``*.sql.j2`` templates, resolves shared partials and macro
libraries, and writes the rendered SQL beside each template.
"""

__version__ = "0.2.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .core.errors import (
    ContextError,
    DuplicatePartialError,
    FormatterError,
    InternalConsistencyError,
    ReadTemplateError,
    RenderError,
    SqlweldError,
    WriteResultError,
)
from .core.models import Options, OutputResult, Role
from .pipeline import build
from .cli import main

__all__ = [
    "ContextError",
    "DuplicatePartialError",
    "FormatterError",
    "InternalConsistencyError",
    "Options",
    "OutputResult",
    "ReadTemplateError",
    "RenderError",
    "Role",
    "SqlweldError",
    "WriteResultError",
    "build",
    "main",
]
