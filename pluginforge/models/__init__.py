"""pluginforge data models — all Pydantic v2."""

from pluginforge.models.compilation import (
    CompilationResult,
    CompilationUnit,
    Diagnostic,
    Severity,
    SourceLocation,
    SourceSegment,
)
from pluginforge.models.extensions import (
    VALID_TRANSITIONS,
    ExtensionDescriptor,
    ExtensionState,
    ExtensionSummary,
)
from pluginforge.models.reports import ModuleOutcome, ModuleReport, StartupReport

__all__ = [
    # compilation
    "CompilationUnit",
    "CompilationResult",
    "Diagnostic",
    "Severity",
    "SourceLocation",
    "SourceSegment",
    # extensions
    "ExtensionState",
    "ExtensionDescriptor",
    "ExtensionSummary",
    "VALID_TRANSITIONS",
    # reports
    "ModuleOutcome",
    "ModuleReport",
    "StartupReport",
]
