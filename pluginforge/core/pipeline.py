"""Startup pipeline — the central coordinator for loading extensions.

For every top-level subdirectory of the sources root, in name order::

    aggregate -> compile -> load -> discover -> order -> initialize

Compile and load failures are contained: the directory is reported and
skipped.  Construction and initialization failures are fatal: the report
for that directory is recorded and the error is raised out of
:meth:`ExtensionPipeline.start`, so no later directory is processed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pluginforge.config import LoaderConfig
from pluginforge.config import config as default_config
from pluginforge.contract import ApiVersion
from pluginforge.core.compiler import SOURCE_DECODE_ERROR, Compiler
from pluginforge.core.discovery import discover
from pluginforge.core.errors import (
    CompileError,
    FatalStartupError,
    LoadError,
    SourceDecodeError,
)
from pluginforge.core.lifecycle import LifecycleInitializer
from pluginforge.core.module_loader import LoadedModule, load_image
from pluginforge.core.ordering import order_extensions
from pluginforge.core.references import ReferenceSet, resolve_references
from pluginforge.core.reporter import Reporter
from pluginforge.core.sources import aggregate_sources
from pluginforge.host import HostContext
from pluginforge.models.compilation import CompilationResult, Diagnostic, SourceLocation
from pluginforge.models.extensions import ExtensionDescriptor
from pluginforge.models.reports import ModuleOutcome, ModuleReport, StartupReport

logger = logging.getLogger(__name__)


class ExtensionPipeline:
    """Compiles, loads and initializes every extension module at startup.

    Parameters
    ----------
    config:
        Loader configuration.  Defaults to the module-level
        :data:`pluginforge.config.config` singleton.
    host:
        Host context passed into every extension constructor.  A fresh
        ``HostContext`` is created if omitted.
    reporter:
        Output sink for diagnostics and lifecycle lines.
    """

    def __init__(
        self,
        config: LoaderConfig | None = None,
        host: Any = None,
        reporter: Reporter | None = None,
    ) -> None:
        self.config = config or default_config
        self.api_version = ApiVersion(
            major=self.config.api_version_major, minor=self.config.api_version_minor
        )
        self.host = host if host is not None else HostContext(api_version=self.api_version)
        self.reporter = reporter or Reporter()
        self.compiler = Compiler(
            warnings_as_errors=self.config.warnings_as_errors,
            optimize=self.config.optimize,
        )
        self.initializer = LifecycleInitializer(self.host, self.reporter)
        self.modules: list[LoadedModule] = []

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    @property
    def sources_path(self) -> Path:
        return self.config.sources_path

    @property
    def references_path(self) -> Path:
        return self.config.references_path

    def prepare(self) -> None:
        """Create the references and sources roots if absent."""
        self.references_path.mkdir(parents=True, exist_ok=True)
        self.sources_path.mkdir(parents=True, exist_ok=True)

    def source_directories(self) -> list[Path]:
        """Top-level subdirectories of the sources root, sorted by name."""
        if not self.sources_path.is_dir():
            return []
        return sorted(
            (p for p in self.sources_path.iterdir() if p.is_dir()),
            key=lambda p: p.name,
        )

    def references(self) -> ReferenceSet:
        """Re-scan the reference directory.  Never cached."""
        return resolve_references(
            self.references_path,
            suffixes=self.config.reference_suffixes,
            host_modules=self.config.host_modules,
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def build(self, directory: Path, references: ReferenceSet | None = None) -> CompilationResult:
        """Aggregate and compile one source directory."""
        try:
            unit = aggregate_sources(directory, suffixes=self.config.source_suffixes)
        except SourceDecodeError as exc:
            return CompilationResult(
                module_name=directory.name,
                diagnostics=[Diagnostic(
                    id=SOURCE_DECODE_ERROR,
                    message=str(exc),
                    location=SourceLocation(path=exc.path),
                )],
            )
        if references is None:
            references = self.references()
        return self.compiler.compile(unit, references)

    def load(self, result: CompilationResult, references: ReferenceSet) -> LoadedModule:
        module = load_image(
            result.image,
            archives=references.archives,
            namespace=self.config.module_namespace,
        )
        logger.debug("Registered module '%s' as '%s'.", module.name, module.qualified_name)
        self.modules.append(module)
        return module

    def discover(self, module: LoadedModule) -> list[ExtensionDescriptor]:
        """Discover and order extensions in a loaded module."""
        return order_extensions(discover(module, api_version=self.api_version))

    # ------------------------------------------------------------------
    # Per-directory pipeline
    # ------------------------------------------------------------------

    def compile_and_load(self, directory: Path) -> LoadedModule:
        """Build and load one source directory.

        Raises
        ------
        CompileError
            If compilation produced fatal diagnostics.
        LoadError
            If the image was rejected or the module raised while loading.
        """
        references = self.references()
        result = self.build(directory, references)
        if not result.success:
            raise CompileError(directory.name, result.diagnostics, result.warnings)
        return self.load(result, references)

    def _compile_and_load(self, directory: Path) -> LoadedModule | ModuleReport:
        name = directory.name
        try:
            return self.compile_and_load(directory)
        except CompileError as exc:
            self.reporter.diagnostics(name, exc.diagnostics)
            return ModuleReport(
                module_name=name,
                outcome=ModuleOutcome.COMPILE_FAILED,
                diagnostics=exc.diagnostics,
                warnings=exc.warnings,
                error=str(exc),
            )
        except LoadError as exc:
            self.reporter.load_failed(name, str(exc))
            return ModuleReport(
                module_name=name, outcome=ModuleOutcome.LOAD_FAILED, error=str(exc)
            )

    def discover_only(self, directory: Path) -> ModuleReport:
        """Compile, load and discover without instantiating anything."""
        loaded = self._compile_and_load(directory)
        if isinstance(loaded, ModuleReport):
            return loaded
        descriptors = self.discover(loaded)
        return ModuleReport(
            module_name=loaded.name,
            outcome=ModuleOutcome.DISCOVERED,
            extensions=[d.summary() for d in descriptors],
            image_digest=loaded.image_digest,
        )

    def process_directory(self, directory: Path) -> ModuleReport:
        """Run the full pipeline over one source directory.

        Never raises for compile, load or extension failures: the outcome
        is captured on the returned report.  Fatal failures carry the
        original exception on ``fatal_error``.
        """
        loaded = self._compile_and_load(directory)
        if isinstance(loaded, ModuleReport):
            return loaded

        descriptors = self.discover(loaded)
        try:
            self.initializer.initialize_all(descriptors)
        except FatalStartupError as exc:
            return ModuleReport(
                module_name=loaded.name,
                outcome=ModuleOutcome.ABORTED,
                extensions=[d.summary() for d in descriptors],
                image_digest=loaded.image_digest,
                error=str(exc),
                fatal_error=exc,
            )
        return ModuleReport(
            module_name=loaded.name,
            outcome=ModuleOutcome.INITIALIZED,
            extensions=[d.summary() for d in descriptors],
            image_digest=loaded.image_digest,
        )

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def run(self) -> StartupReport:
        """Process every source directory, stopping after a fatal one.

        Returns the report without raising; see :meth:`start`.
        """
        self.prepare()
        report = StartupReport()
        for directory in self.source_directories():
            logger.info("Processing extension module '%s'.", directory.name)
            module_report = self.process_directory(directory)
            report.modules.append(module_report)
            if module_report.is_fatal:
                logger.critical(
                    "Startup aborted in module '%s': %s",
                    module_report.module_name, module_report.error,
                )
                break
        return report

    def start(self) -> StartupReport:
        """Run startup and re-raise the fatal error, if any.

        Raises
        ------
        ConstructionError, InitializationError
            If an extension could not be brought up.  The error names the
            extension and chains the original cause.
        """
        report = self.run()
        for module_report in report.modules:
            if module_report.fatal_error is not None:
                raise module_report.fatal_error
        logger.info(
            "Startup complete: %d extension(s) initialized, %d module(s) skipped.",
            len(report.initialized_extensions), len(report.failed_modules),
        )
        return report
