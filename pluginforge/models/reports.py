"""Startup reports — what happened to each source directory."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from pluginforge.models.compilation import Diagnostic
from pluginforge.models.extensions import ExtensionState, ExtensionSummary


class ModuleOutcome(str, Enum):
    """Final outcome of one pipeline run over a source directory."""

    DISCOVERED = "discovered"  # loaded and discovered, not instantiated
    INITIALIZED = "initialized"
    COMPILE_FAILED = "compile_failed"
    LOAD_FAILED = "load_failed"
    ABORTED = "aborted"


class ModuleReport(BaseModel):
    """Per-directory result.

    ``compile_failed`` and ``load_failed`` are contained: startup continues.
    ``aborted`` means an extension failed construction or initialization;
    the fatal exception is kept on ``fatal_error`` so the caller can
    re-raise it.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    module_name: str
    outcome: ModuleOutcome
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    warnings: list[Diagnostic] = Field(default_factory=list)
    extensions: list[ExtensionSummary] = Field(default_factory=list)
    image_digest: str = ""
    error: str = ""
    fatal_error: BaseException | None = Field(default=None, exclude=True, repr=False)

    @property
    def is_fatal(self) -> bool:
        return self.outcome == ModuleOutcome.ABORTED


class StartupReport(BaseModel):
    """Ordered reports for every source directory processed at startup."""

    modules: list[ModuleReport] = Field(default_factory=list)

    @property
    def aborted(self) -> bool:
        return any(m.is_fatal for m in self.modules)

    @property
    def initialized_extensions(self) -> list[ExtensionSummary]:
        return [
            ext
            for m in self.modules
            for ext in m.extensions
            if ext.state == ExtensionState.INITIALIZED
        ]

    @property
    def failed_modules(self) -> list[str]:
        return [
            m.module_name
            for m in self.modules
            if m.outcome in (ModuleOutcome.COMPILE_FAILED, ModuleOutcome.LOAD_FAILED)
        ]
