"""User-facing output: diagnostics to stderr, lifecycle lines to stdout.

Every line also goes through :mod:`logging` so hosts that capture logs see
the same events.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from rich.console import Console

from pluginforge.models.compilation import Diagnostic
from pluginforge.models.extensions import ExtensionDescriptor

logger = logging.getLogger(__name__)


class Reporter:
    """Writes diagnostics and lifecycle lines to two consoles.

    Parameters
    ----------
    out:
        Console for informational lines.  Defaults to stdout.
    err:
        Console for diagnostics.  Defaults to stderr.
    """

    def __init__(self, out: Console | None = None, err: Console | None = None) -> None:
        self.out = out or Console()
        self.err = err or Console(stderr=True)

    def diagnostics(self, module_name: str, diagnostics: Iterable[Diagnostic]) -> None:
        """One line per diagnostic: ``"{id}: {message} at {location}"``."""
        for diag in diagnostics:
            logger.error("[%s] %s", module_name, diag)
            # Source text may contain [brackets]; print it verbatim.
            self.err.print(str(diag), markup=False, highlight=False, soft_wrap=True)

    def load_failed(self, module_name: str, message: str) -> None:
        logger.error("Module '%s' failed to load: %s", module_name, message)
        self.err.print(
            f"Module '{module_name}' failed to load: {message}",
            markup=False, highlight=False, soft_wrap=True,
        )

    def initialized(self, descriptor: ExtensionDescriptor) -> None:
        line = (
            f"Extension {descriptor.name} v{descriptor.version} "
            f"(by {descriptor.author}) initiated."
        )
        logger.info("%s", line)
        self.out.print(line, markup=False, highlight=False, soft_wrap=True)
