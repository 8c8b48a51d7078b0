"""Domain models for template discovery, rendering and output."""

from __future__ import annotations

import enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, JsonValue, model_validator

DEFAULT_HEADER = "Autogenerated by sqlweld"
DEFAULT_EXTENSION = "sql"
TEMPLATE_SUFFIX = ".sql.j2"
PARTIAL_SUFFIX = ".partial.sql.j2"
MACRO_SUFFIX = ".macros.sql.j2"
RERUN_IF_CHANGED = "cargo:rerun-if-changed={path}"


class Role(enum.Enum):
    """How a discovered template file takes part in the build."""

    NORMAL = "normal"
    PARTIAL = "partial"
    MACRO = "macro"


class Options(BaseModel):
    """Resolved configuration for one build run."""

    model_config = ConfigDict(frozen=True)

    input: Path = Field(default_factory=Path.cwd, description="Input root directory")
    output: Path | None = Field(
        default=None,
        description="Output directory; files are written beside templates when unset",
    )
    context: dict[str, JsonValue] = Field(
        default_factory=dict, description="Extra context passed to templates"
    )
    verbosity: int = Field(default=0, ge=0, description="Logging verbosity level")
    check_ignored_dirs: bool = Field(
        default=False, description="Traverse hidden and ignore-listed paths"
    )
    print_rerun_if_changed: bool = Field(
        default=False, description="Emit a rebuild hint for every template file"
    )
    rerun_format: str = Field(
        default=RERUN_IF_CHANGED, description="Format of a rebuild hint line"
    )
    header: str = Field(default=DEFAULT_HEADER, description="Header comment text")
    extension: str = Field(
        default=DEFAULT_EXTENSION, description="Extension of generated files"
    )
    always_write: bool = Field(
        default=False, description="Rewrite outputs even when unchanged"
    )
    formatter: tuple[str, ...] | None = Field(
        default=None, description="Formatter command (argv) fed output on stdin"
    )
    template_suffix: str = Field(default=TEMPLATE_SUFFIX)
    partial_suffix: str = Field(default=PARTIAL_SUFFIX)
    macro_suffix: str = Field(default=MACRO_SUFFIX)
    file_mode: int = Field(default=0o644, description="File permissions (octal)")
    workers: int | None = Field(
        default=None, ge=1, description="Thread count for walking and rendering"
    )

    @model_validator(mode="after")
    def _check_suffixes(self) -> Options:
        if not self.template_suffix:
            raise ValueError("template_suffix must not be empty")
        for label, suffix in (
            ("partial_suffix", self.partial_suffix),
            ("macro_suffix", self.macro_suffix),
        ):
            if suffix == self.template_suffix or not suffix.endswith(
                self.template_suffix
            ):
                raise ValueError(
                    f"{label} {suffix!r} must end with {self.template_suffix!r} "
                    "and be longer than it"
                )
        if self.partial_suffix == self.macro_suffix:
            raise ValueError("partial_suffix and macro_suffix must differ")
        if not self.extension:
            raise ValueError("extension must not be empty")
        return self


class DiscoveredPath(BaseModel):
    """A template file found during traversal together with its role."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Template file path")
    role: Role = Field(..., description="Role derived from the file name")
    name: str = Field(..., description="Logical name used by other templates")


class TemplateEntry(BaseModel):
    """A normal template waiting to be rendered."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Template file path")
    name: str = Field(..., description="Input-relative logical name")


class OutputResult(BaseModel):
    """Outcome of rendering one normal template."""

    template_path: Path = Field(..., description="Template file path")
    output_path: Path = Field(..., description="Generated file path")
    written: bool = Field(..., description="False when existing content matched")
