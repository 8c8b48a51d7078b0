"""Error types raised by the build pipeline.

Every error carries the path of the file that caused it so the message
points the user at something they can open.
"""

from __future__ import annotations

from pathlib import Path


class SqlweldError(Exception):
    """Base class for all build failures."""

    message = "Build failed"

    def __init__(self, path: Path | None = None, detail: str | None = None) -> None:
        self.path = path
        self.detail = detail
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.message
        if self.path is not None:
            text = f"{text}: {self.path}"
        if self.detail:
            text = f"{text}\n{self.detail}"
        return text


class ReadTemplateError(SqlweldError):
    """Raised when a template source cannot be read or compiled."""

    message = "Failed to read template file"


class RenderError(SqlweldError):
    """Raised when a template fails during rendering."""

    message = "Failed to render template"


class WriteResultError(SqlweldError):
    """Raised when the rendered output cannot be written."""

    message = "Failed to write render result"


class InternalConsistencyError(SqlweldError):
    """Raised when a discovered path breaks an assumed naming contract."""

    message = "Internal consistency error"


class ContextError(SqlweldError):
    """Raised when render context input is unusable."""

    message = "Invalid render context"


class DuplicatePartialError(SqlweldError):
    """Raised when two partial sources resolve to the same logical name."""

    message = "Duplicate partial name"

    def __init__(self, name: str, first: Path, second: Path) -> None:
        self.name = name
        self.first = first
        self.second = second
        super().__init__(
            path=second,
            detail=f"'{name}' is defined by both {first} and {second}",
        )


class FormatterError(SqlweldError):
    """Raised when the external formatter fails for a template."""

    message = "Formatter failed"

    def __init__(
        self,
        path: Path | None,
        detail: str,
        exit_code: int | None = None,
        stderr: str = "",
    ) -> None:
        self.exit_code = exit_code
        self.stderr = stderr
        if exit_code is not None:
            detail = f"{detail} (exit code {exit_code})"
        if stderr.strip():
            detail = f"{detail}\n{stderr.rstrip()}"
        super().__init__(path=path, detail=detail)
