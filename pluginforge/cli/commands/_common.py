"""Shared option handling for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path

from pluginforge.config import LoaderConfig


def build_config(
    sources: Path | None = None,
    references: Path | None = None,
    warnings_as_errors: bool = False,
) -> LoaderConfig:
    """Environment-driven config with command-line overrides applied."""
    overrides: dict[str, object] = {}
    if sources is not None:
        overrides["sources_path"] = sources
    if references is not None:
        overrides["references_path"] = references
    if warnings_as_errors:
        overrides["warnings_as_errors"] = True
    config = LoaderConfig(**overrides)
    logging.basicConfig(
        level="DEBUG" if config.debug else config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return config
