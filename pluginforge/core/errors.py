"""Error taxonomy for the extension loader.

Two families with deliberately different propagation:

* ``ModuleError`` — compile and load problems.  Contained to one source
  directory: the module yields no extensions, it is reported, and startup
  moves on to the next directory.
* ``FatalStartupError`` — construction and initialization problems.  Code
  from the module is already live in the process and may have registered
  host-visible side effects, so startup halts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pluginforge.models.compilation import Diagnostic


class PluginForgeError(RuntimeError):
    """Base class for every error raised by the loader."""


# ---------------------------------------------------------------------------
# Recoverable, per module
# ---------------------------------------------------------------------------

class ModuleError(PluginForgeError):
    """A source directory could not be turned into a live module."""

    def __init__(self, message: str, *, module_name: str = "") -> None:
        super().__init__(message)
        self.module_name = module_name


class CompileError(ModuleError):
    """One or more fatal diagnostics were produced for a compilation unit."""

    def __init__(
        self,
        module_name: str,
        diagnostics: list[Diagnostic],
        warnings: list[Diagnostic] | None = None,
    ) -> None:
        super().__init__(
            f"Module '{module_name}' failed to compile with "
            f"{len(diagnostics)} error(s).",
            module_name=module_name,
        )
        self.diagnostics = list(diagnostics)
        self.warnings = list(warnings or [])


class LoadError(ModuleError):
    """A compiled image could not be loaded into the interpreter."""


class SourceDecodeError(ModuleError):
    """A source file is not valid UTF-8 text."""

    def __init__(self, message: str, *, module_name: str = "", path: str = "") -> None:
        super().__init__(message, module_name=module_name)
        self.path = path


# ---------------------------------------------------------------------------
# Fatal for the whole startup sequence
# ---------------------------------------------------------------------------

class FatalStartupError(PluginForgeError):
    """An extension failed after its module was loaded.  Startup must halt."""


class ConstructionError(FatalStartupError):
    """An extension class could not be instantiated."""

    def __init__(self, qualified_name: str) -> None:
        super().__init__(
            f'Could not create an instance of extension class "{qualified_name}".'
        )
        self.qualified_name = qualified_name


class InitializationError(FatalStartupError):
    """An extension raised from its ``initialize()`` entry point."""

    def __init__(self, extension_name: str) -> None:
        super().__init__(
            f'Extension "{extension_name}" has thrown an exception during initialization.'
        )
        self.extension_name = extension_name


class InvalidTransitionError(RuntimeError):
    """Raised when a requested extension state transition is not valid."""
