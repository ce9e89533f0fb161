"""Loader configuration — env-driven, read once at host startup.

Centralized config using pydantic-settings for environment variable support.
Reads from a .env file and PLUGINFORGE_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoaderConfig(BaseSettings):
    """Configuration for the extension loader with environment overrides.

    All settings can be overridden via PLUGINFORGE_* environment variables
    or a .env file in the working directory.

    Examples
    --------
    Override via environment::

        export PLUGINFORGE_SOURCES_PATH=/srv/game/SourceCodes
        export PLUGINFORGE_WARNINGS_AS_ERRORS=true
        export PLUGINFORGE_LOG_LEVEL=DEBUG

    List values are given as JSON::

        export PLUGINFORGE_HOST_MODULES='["terraria", "tshock"]'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PLUGINFORGE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    debug: bool = False

    # Directory layout
    references_path: Path = Path("Reference")
    sources_path: Path = Path("SourceCodes")
    reference_suffixes: list[str] = [".whl", ".zip", ".egg"]
    source_suffixes: list[str] = [".py"]  # empty list accepts every regular file

    # Host core references: top-level packages extensions may import
    # in addition to the standard library and pluginforge itself.
    host_modules: list[str] = []

    # Loaded modules are registered as sys.modules["<namespace>.<name>"]
    module_namespace: str = "pluginforge_extensions"

    # Contract version this host implements
    api_version_major: int = 2
    api_version_minor: int = 1

    # Compiler
    warnings_as_errors: bool = False
    optimize: int = -1

    @field_validator("optimize")
    @classmethod
    def _check_optimize(cls, value: int) -> int:
        if value not in (-1, 0, 1, 2):
            raise ValueError(f"optimize must be -1, 0, 1 or 2, got {value}")
        return value

    @field_validator("reference_suffixes", "source_suffixes")
    @classmethod
    def _normalize_suffixes(cls, value: list[str]) -> list[str]:
        normalized = [v.lower() for v in value]
        return [s if s.startswith(".") else f".{s}" for s in normalized]


# Module-level singleton — import as `from pluginforge.config import config`
config = LoaderConfig()
