from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import (
    DEFAULT_EXTENSION,
    DEFAULT_HEADER,
    MACRO_SUFFIX,
    PARTIAL_SUFFIX,
    TEMPLATE_SUFFIX,
)


class Settings(BaseSettings):
    """Environment-level defaults, overridden by explicit CLI flags."""

    model_config = SettingsConfigDict(env_prefix="SQLWELD_", case_sensitive=False)

    header: str = DEFAULT_HEADER
    extension: str = DEFAULT_EXTENSION
    formatter: str | None = None
    template_suffix: str = TEMPLATE_SUFFIX
    partial_suffix: str = PARTIAL_SUFFIX
    macro_suffix: str = MACRO_SUFFIX
