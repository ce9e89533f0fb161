"""In-memory compiler service.

Turns a CompilationUnit plus a ReferenceSet into a loadable image or a list
of diagnostics.  Nothing is written to disk.

Pipeline
--------
1. Parse (``ast.parse``) — syntax errors become ``PF0001``.
2. Resolve imports against the reference set — ``PF0002`` for an import
   nothing provides, ``PF0003`` for relative imports (a concatenated unit
   has no package to be relative to).
3. Generate code (``compile``) — late syntax errors become ``PF0001``.
4. Compiler warnings become ``PF1001``; fatal only when escalated.

Image format
------------
A hash-based, unchecked pyc (PEP 552)::

    MAGIC_NUMBER | flags=0b01 (4 bytes LE) | source_hash (8 bytes) | marshal(code)

The code's ``co_filename`` is ``pluginforge:<module_name>``; the loader reads
the module identity from it.  No timestamp is embedded, so the same source
compiles to the same bytes.
"""

from __future__ import annotations

import ast
import importlib.util
import logging
import marshal
import warnings
from types import CodeType

from pluginforge.core.references import ReferenceSet
from pluginforge.models.compilation import (
    CompilationResult,
    CompilationUnit,
    Diagnostic,
    Severity,
)

logger = logging.getLogger(__name__)

# Diagnostic identifiers
SYNTAX_ERROR = "PF0001"
UNRESOLVED_IMPORT = "PF0002"
RELATIVE_IMPORT = "PF0003"
SOURCE_DECODE_ERROR = "PF0004"
COMPILER_WARNING = "PF1001"

# PEP 552 flags: bit 0 = hash-based, bit 1 = check_source (unset: unchecked)
IMAGE_FLAGS = 0b01
IMAGE_HEADER_SIZE = 16


class Compiler:
    """Compiles compilation units to in-memory images.

    Each call to :meth:`compile` is independent: no parse trees, code
    objects or compiler flags are carried from one unit to the next.

    Parameters
    ----------
    warnings_as_errors:
        Escalate every compiler warning to a fatal diagnostic.
    optimize:
        Optimization level passed to :func:`compile` (-1 means the
        interpreter's own level).

    Examples
    --------
    >>> from pluginforge.core.references import resolve_references
    >>> from pathlib import Path
    >>> unit = CompilationUnit(module_name="demo", source="x = 1\\n")
    >>> result = Compiler().compile(unit, resolve_references(Path("/nonexistent")))
    >>> result.success
    True
    """

    def __init__(self, *, warnings_as_errors: bool = False, optimize: int = -1) -> None:
        self.warnings_as_errors = warnings_as_errors
        self.optimize = optimize

    # -- Public API ---------------------------------------------------------

    def compile(self, unit: CompilationUnit, references: ReferenceSet) -> CompilationResult:
        """Compile *unit* against *references*.

        Returns
        -------
        CompilationResult
            With ``image`` set on success, or the fatal diagnostics (in
            source order) on failure.
        """
        errors: list[Diagnostic] = []
        code: CodeType | None = None

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            tree = self._parse(unit, errors)
            if tree is not None:
                errors.extend(self._check_imports(unit, tree, references))
            if tree is not None and not errors:
                code = self._generate(unit, tree, errors)

        warning_diags: list[Diagnostic] = []
        for record in caught:
            diag = self._warning_diagnostic(unit, record)
            if diag not in warning_diags:
                warning_diags.append(diag)
        errors.extend(d for d in warning_diags if d.is_fatal)
        non_fatal = [d for d in warning_diags if not d.is_fatal]

        for diag in non_fatal:
            logger.warning("[%s] %s", unit.module_name, diag)

        if errors:
            logger.debug(
                "Module '%s' failed to compile: %d error(s).",
                unit.module_name, len(errors),
            )
            return CompilationResult(
                module_name=unit.module_name, diagnostics=errors, warnings=non_fatal
            )

        image = build_image(unit.source, code)
        logger.debug(
            "Compiled module '%s' to a %d-byte image.", unit.module_name, len(image)
        )
        return CompilationResult(
            module_name=unit.module_name, image=image, warnings=non_fatal
        )

    # -- Stages -------------------------------------------------------------

    def _parse(self, unit: CompilationUnit, errors: list[Diagnostic]) -> ast.Module | None:
        try:
            return ast.parse(unit.source, filename=unit.filename, mode="exec")
        except (SyntaxError, ValueError) as exc:
            errors.append(self._syntax_diagnostic(unit, exc))
            return None

    def _check_imports(
        self, unit: CompilationUnit, tree: ast.Module, references: ReferenceSet
    ) -> list[Diagnostic]:
        imports = [
            node for node in ast.walk(tree)
            if isinstance(node, (ast.Import, ast.ImportFrom))
        ]
        imports.sort(key=lambda n: (n.lineno, n.col_offset))

        found: list[Diagnostic] = []
        for node in imports:
            location = unit.locate(node.lineno, node.col_offset + 1)
            if isinstance(node, ast.ImportFrom) and node.level:
                found.append(Diagnostic(
                    id=RELATIVE_IMPORT,
                    message=(
                        "Relative imports are not supported in an extension "
                        "module; import from a referenced package instead."
                    ),
                    location=location,
                ))
                continue
            if isinstance(node, ast.ImportFrom):
                modules = [node.module or ""]
            else:
                modules = [alias.name for alias in node.names]
            for module in modules:
                if not references.resolves(module):
                    found.append(Diagnostic(
                        id=UNRESOLVED_IMPORT,
                        message=(
                            f"The module '{module}' could not be resolved. "
                            "Are you missing a reference?"
                        ),
                        location=location,
                    ))
        return found

    def _generate(
        self, unit: CompilationUnit, tree: ast.Module, errors: list[Diagnostic]
    ) -> CodeType | None:
        try:
            # dont_inherit: this module's own __future__ flags must not leak in.
            return compile(
                tree, unit.filename, "exec", dont_inherit=True, optimize=self.optimize
            )
        except (SyntaxError, ValueError) as exc:
            errors.append(self._syntax_diagnostic(unit, exc))
            return None

    # -- Diagnostics --------------------------------------------------------

    def _syntax_diagnostic(
        self, unit: CompilationUnit, exc: SyntaxError | ValueError
    ) -> Diagnostic:
        if isinstance(exc, SyntaxError):
            return Diagnostic(
                id=SYNTAX_ERROR,
                message=exc.msg or "invalid syntax",
                location=unit.locate(exc.lineno, exc.offset),
            )
        return Diagnostic(id=SYNTAX_ERROR, message=str(exc), location=unit.locate(None))

    def _warning_diagnostic(
        self, unit: CompilationUnit, record: warnings.WarningMessage
    ) -> Diagnostic:
        if record.filename == unit.filename:
            location = unit.locate(record.lineno)
        else:
            location = unit.locate(None)
        return Diagnostic(
            id=COMPILER_WARNING,
            message=f"{record.category.__name__}: {record.message}",
            severity=Severity.WARNING,
            location=location,
            is_warning_as_error=self.warnings_as_errors,
        )


def build_image(source: str, code: CodeType) -> bytes:
    """Serialize *code* as a hash-based pyc image."""
    source_hash = importlib.util.source_hash(source.encode("utf-8"))
    return (
        importlib.util.MAGIC_NUMBER
        + IMAGE_FLAGS.to_bytes(4, "little")
        + source_hash
        + marshal.dumps(code)
    )
