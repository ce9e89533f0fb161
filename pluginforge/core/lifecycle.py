"""Lifecycle initializer — construct and initialize extensions, fail fast.

Each descriptor walks the state machine::

    discovered -> instantiated -> initialized
    discovered -> instantiated -> failed
    discovered -> construction_failed

Both failure states are terminal and raise a ``FatalStartupError``.  An
extension may already have registered commands or hooks on the host when
it fails, so nothing after it is brought up.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pluginforge.contract import ExtensionBase
from pluginforge.core.errors import ConstructionError, InitializationError
from pluginforge.core.reporter import Reporter
from pluginforge.models.extensions import ExtensionDescriptor, ExtensionState

logger = logging.getLogger(__name__)


class LifecycleInitializer:
    """Brings up ordered extensions against a host context.

    Parameters
    ----------
    host:
        Passed as the sole constructor argument of every extension.
    reporter:
        Receives one line per initialized extension.
    """

    def __init__(self, host: Any, reporter: Reporter | None = None) -> None:
        self.host = host
        self.reporter = reporter or Reporter()

    def instantiate(self, descriptor: ExtensionDescriptor) -> ExtensionBase:
        """Construct the extension, or raise ``ConstructionError``."""
        try:
            instance = descriptor.extension_type(self.host)
            if not isinstance(instance, ExtensionBase):
                raise TypeError(
                    f"constructor returned {type(instance).__name__}, "
                    "not an ExtensionBase"
                )
        except Exception as exc:
            descriptor.transition(ExtensionState.CONSTRUCTION_FAILED)
            logger.critical(
                "Construction of '%s' failed: %s", descriptor.qualified_name, exc
            )
            raise ConstructionError(descriptor.qualified_name) from exc

        descriptor.instance = instance
        descriptor.transition(ExtensionState.INSTANTIATED)
        return instance

    def initialize(self, descriptor: ExtensionDescriptor) -> None:
        """Construct then initialize one extension."""
        instance = self.instantiate(descriptor)
        try:
            instance.initialize()
        except Exception as exc:
            descriptor.transition(ExtensionState.FAILED)
            logger.critical("Initialization of '%s' failed: %s", descriptor.name, exc)
            raise InitializationError(descriptor.name) from exc

        descriptor.transition(ExtensionState.INITIALIZED)
        self.reporter.initialized(descriptor)

    def initialize_all(self, descriptors: Iterable[ExtensionDescriptor]) -> None:
        """Initialize *descriptors* in the given order.  Stops at the first failure."""
        for descriptor in descriptors:
            self.initialize(descriptor)
