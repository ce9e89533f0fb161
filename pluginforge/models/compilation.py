"""Compilation models — units, diagnostics, results."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SourceSegment(BaseModel):
    """One source file's slice of a concatenated compilation unit."""

    model_config = ConfigDict(frozen=True)

    path: Path
    start_line: int  # 1-based line of the segment's first line in the unit
    line_count: int

    @property
    def end_line(self) -> int:
        return self.start_line + self.line_count - 1


class SourceLocation(BaseModel):
    """A position in an original source file."""

    model_config = ConfigDict(frozen=True)

    path: str = ""
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        if not self.path:
            return "<unknown>"
        if self.line is None:
            return self.path
        if self.column is None:
            return f"{self.path}:{self.line}"
        return f"{self.path}:{self.line}:{self.column}"


UNKNOWN_LOCATION = SourceLocation()


class CompilationUnit(BaseModel):
    """Concatenated source text for one extension module.

    Built once per source subdirectory and discarded after compilation.
    ``segments`` records where each file landed in ``source`` so that
    positions reported against the unit can be traced back to the file
    they came from.
    """

    model_config = ConfigDict(frozen=True)

    module_name: str
    source: str = ""
    segments: list[SourceSegment] = Field(default_factory=list)
    source_dir: Path | None = None

    @property
    def filename(self) -> str:
        """Filename recorded in the compiled code; doubles as the module identity."""
        return f"{IMAGE_FILENAME_PREFIX}{self.module_name}"

    @property
    def is_empty(self) -> bool:
        return not self.source.strip()

    def locate(self, line: int | None, column: int | None = None) -> SourceLocation:
        """Map a 1-based line in the unit back to the originating file."""
        if line is None:
            return SourceLocation(path=self.filename)
        for segment in self.segments:
            if segment.start_line <= line <= segment.end_line:
                return SourceLocation(
                    path=str(segment.path),
                    line=line - segment.start_line + 1,
                    column=column,
                )
        return SourceLocation(path=self.filename, line=line, column=column)


IMAGE_FILENAME_PREFIX = "pluginforge:"


class Severity(str, Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """A single compiler message.

    Only errors, and warnings escalated to errors, fail a compilation.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    message: str
    severity: Severity = Severity.ERROR
    location: SourceLocation = UNKNOWN_LOCATION
    is_warning_as_error: bool = False

    @property
    def is_fatal(self) -> bool:
        return self.severity == Severity.ERROR or self.is_warning_as_error

    def __str__(self) -> str:
        return f"{self.id}: {self.message} at {self.location}"


class CompilationResult(BaseModel):
    """Outcome of compiling one unit.

    Exactly one of ``image`` and ``diagnostics`` is populated: a loadable
    image on success, the ordered fatal diagnostics on failure.
    Non-fatal warnings are kept apart in ``warnings``.
    """

    model_config = ConfigDict(frozen=True)

    module_name: str
    image: bytes | None = None
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    warnings: list[Diagnostic] = Field(default_factory=list)

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> CompilationResult:
        if (self.image is None) == (not self.diagnostics):
            raise ValueError(
                "CompilationResult must carry either an image or fatal "
                "diagnostics, not both and not neither"
            )
        if any(not d.is_fatal for d in self.diagnostics):
            raise ValueError("non-fatal diagnostics belong in 'warnings'")
        return self

    @property
    def success(self) -> bool:
        return self.image is not None
