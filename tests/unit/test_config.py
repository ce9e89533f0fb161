"""Tests for loader config — env-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

import pluginforge.config as config_module
from pluginforge.config import LoaderConfig
from pluginforge.core.pipeline import ExtensionPipeline


class TestLoaderConfig:
    def test_defaults(self):
        config = LoaderConfig(_env_file=None)
        assert config.log_level == "INFO"
        assert config.warnings_as_errors is False
        assert config.optimize == -1
        assert config.module_namespace == "pluginforge_extensions"

    def test_default_paths(self):
        config = LoaderConfig(_env_file=None)
        assert config.references_path == Path("Reference")
        assert config.sources_path == Path("SourceCodes")

    def test_default_suffixes(self):
        config = LoaderConfig(_env_file=None)
        assert config.source_suffixes == [".py"]
        assert config.reference_suffixes == [".whl", ".zip", ".egg"]

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("PLUGINFORGE_SOURCES_PATH", "/srv/ext")
        monkeypatch.setenv("PLUGINFORGE_WARNINGS_AS_ERRORS", "true")
        monkeypatch.setenv("PLUGINFORGE_HOST_MODULES", '["gamehost"]')
        config = LoaderConfig(_env_file=None)
        assert config.sources_path == Path("/srv/ext")
        assert config.warnings_as_errors is True
        assert config.host_modules == ["gamehost"]

    def test_suffixes_normalized(self):
        config = LoaderConfig(_env_file=None, source_suffixes=["PY", ".Pyw"])
        assert config.source_suffixes == [".py", ".pyw"]

    def test_invalid_optimize_rejected(self):
        with pytest.raises(ValidationError):
            LoaderConfig(_env_file=None, optimize=3)


class TestConfigSingleton:
    def test_singleton_is_loader_config(self):
        assert isinstance(config_module.config, LoaderConfig)

    def test_pipeline_defaults_to_singleton(self):
        assert ExtensionPipeline().config is config_module.config

    def test_explicit_config_wins(self):
        config = LoaderConfig(_env_file=None, module_namespace="elsewhere")
        assert ExtensionPipeline(config=config).config is config
