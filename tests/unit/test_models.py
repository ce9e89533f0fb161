"""Tests for pluginforge Pydantic models."""

from __future__ import annotations

from pathlib import Path

import pytest

from pluginforge.contract import API_VERSION, ApiVersion, ExtensionBase, api_version, get_api_version
from pluginforge.core.errors import InvalidTransitionError
from pluginforge.models import (
    CompilationResult,
    CompilationUnit,
    Diagnostic,
    ExtensionDescriptor,
    ExtensionState,
    ModuleOutcome,
    ModuleReport,
    Severity,
    SourceLocation,
    SourceSegment,
    StartupReport,
    VALID_TRANSITIONS,
)


class TestSourceLocation:
    def test_full_format(self):
        assert str(SourceLocation(path="a.py", line=3, column=7)) == "a.py:3:7"

    def test_without_column(self):
        assert str(SourceLocation(path="a.py", line=3)) == "a.py:3"

    def test_unknown(self):
        assert str(SourceLocation()) == "<unknown>"


class TestCompilationUnit:
    def test_filename_is_identity(self):
        assert CompilationUnit(module_name="Greeter").filename == "pluginforge:Greeter"

    def test_locate_outside_segments(self):
        unit = CompilationUnit(
            module_name="m",
            source="x = 1\n",
            segments=[SourceSegment(path=Path("a.py"), start_line=1, line_count=1)],
        )
        location = unit.locate(9)
        assert location.path == "pluginforge:m"
        assert location.line == 9

    def test_locate_without_line(self):
        assert CompilationUnit(module_name="m").locate(None).path == "pluginforge:m"


class TestDiagnostic:
    def test_format(self):
        diag = Diagnostic(
            id="PF0002", message="The module 'x' could not be resolved.",
            location=SourceLocation(path="a.py", line=1, column=1),
        )
        assert str(diag) == "PF0002: The module 'x' could not be resolved. at a.py:1:1"

    def test_warning_is_not_fatal(self):
        assert not Diagnostic(id="PF1001", message="w", severity=Severity.WARNING).is_fatal

    def test_escalated_warning_is_fatal(self):
        diag = Diagnostic(
            id="PF1001", message="w", severity=Severity.WARNING, is_warning_as_error=True,
        )
        assert diag.is_fatal

    def test_frozen(self):
        diag = Diagnostic(id="PF0001", message="m")
        with pytest.raises(Exception):
            diag.id = "changed"


class TestCompilationResult:
    def test_success(self):
        assert CompilationResult(module_name="m", image=b"img").success

    def test_failure(self):
        result = CompilationResult(
            module_name="m", diagnostics=[Diagnostic(id="PF0001", message="bad")],
        )
        assert not result.success

    def test_neither_image_nor_diagnostics(self):
        with pytest.raises(ValueError):
            CompilationResult(module_name="m")

    def test_both_image_and_diagnostics(self):
        with pytest.raises(ValueError):
            CompilationResult(
                module_name="m", image=b"img",
                diagnostics=[Diagnostic(id="PF0001", message="bad")],
            )

    def test_non_fatal_diagnostic_rejected(self):
        with pytest.raises(ValueError):
            CompilationResult(
                module_name="m",
                diagnostics=[Diagnostic(id="PF1001", message="w", severity=Severity.WARNING)],
            )


class TestApiVersion:
    def test_compatibility_is_major_only(self):
        assert ApiVersion(major=2, minor=0).is_compatible_with(API_VERSION)
        assert ApiVersion(major=2, minor=9).is_compatible_with(API_VERSION)
        assert not ApiVersion(major=1, minor=1).is_compatible_with(API_VERSION)

    def test_str(self):
        assert str(ApiVersion(major=2, minor=1)) == "2.1"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            ApiVersion(major=-1)

    def test_marker_read_from_own_namespace(self):
        @api_version(2, 1)
        class Marked(ExtensionBase):
            def initialize(self) -> None:
                pass

        class Inheriting(Marked):
            pass

        assert get_api_version(Marked) == ApiVersion(major=2, minor=1)
        assert get_api_version(Inheriting) is None


class _Ext(ExtensionBase):
    def initialize(self) -> None:
        pass


def _descriptor() -> ExtensionDescriptor:
    return ExtensionDescriptor(
        extension_type=_Ext, module_name="m", name="Ext", api_version=API_VERSION,
    )


class TestExtensionStateMachine:
    def test_failure_states_are_terminal(self):
        assert VALID_TRANSITIONS[ExtensionState.FAILED] == set()
        assert VALID_TRANSITIONS[ExtensionState.CONSTRUCTION_FAILED] == set()
        assert VALID_TRANSITIONS[ExtensionState.INITIALIZED] == set()

    def test_cannot_skip_instantiation(self):
        descriptor = _descriptor()
        with pytest.raises(InvalidTransitionError):
            descriptor.transition(ExtensionState.INITIALIZED)

    def test_cannot_leave_terminal_state(self):
        descriptor = _descriptor()
        descriptor.transition(ExtensionState.CONSTRUCTION_FAILED)
        with pytest.raises(InvalidTransitionError):
            descriptor.transition(ExtensionState.INSTANTIATED)

    def test_history_recorded(self):
        descriptor = _descriptor()
        descriptor.transition(ExtensionState.INSTANTIATED)
        descriptor.transition(ExtensionState.FAILED)
        assert descriptor.history == ["discovered->instantiated", "instantiated->failed"]

    def test_summary_snapshot(self):
        descriptor = _descriptor()
        summary = descriptor.summary()
        assert summary.name == "Ext"
        assert summary.state == ExtensionState.DISCOVERED
        assert summary.qualified_name.endswith("._Ext")


class TestReports:
    def test_startup_report_aggregates(self):
        report = StartupReport(modules=[
            ModuleReport(module_name="A", outcome=ModuleOutcome.COMPILE_FAILED),
            ModuleReport(module_name="B", outcome=ModuleOutcome.LOAD_FAILED),
            ModuleReport(module_name="C", outcome=ModuleOutcome.INITIALIZED),
        ])
        assert report.failed_modules == ["A", "B"]
        assert not report.aborted

    def test_aborted_report_is_fatal(self):
        err = RuntimeError("boom")
        report = ModuleReport(module_name="A", outcome=ModuleOutcome.ABORTED, fatal_error=err)
        assert report.is_fatal
        assert report.fatal_error is err
        assert "fatal_error" not in report.model_dump()
