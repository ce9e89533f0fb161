"""Host context handed to every extension at construction time."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pluginforge.contract import API_VERSION, ApiVersion

logger = logging.getLogger(__name__)


class HostContext:
    """The running host as extensions see it.

    Extensions register their host-visible side effects here during
    ``initialize()``: named commands and event hooks.

    Parameters
    ----------
    name:
        Display name of the host process.
    api_version:
        Contract version the host implements.
    settings:
        Free-form host settings exposed read-only to extensions.
    """

    def __init__(
        self,
        name: str = "pluginforge-host",
        api_version: ApiVersion = API_VERSION,
        settings: dict[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.api_version = api_version
        self.settings = dict(settings or {})
        self._commands: dict[str, Callable[..., Any]] = {}
        self._hooks: dict[str, list[Callable[..., Any]]] = {}

    # -- Commands -----------------------------------------------------------

    def register_command(self, name: str, handler: Callable[..., Any]) -> None:
        """Register a named command.

        Raises
        ------
        ValueError
            If another extension already registered *name*.
        """
        if name in self._commands:
            raise ValueError(f"Command '{name}' is already registered.")
        self._commands[name] = handler
        logger.debug("Registered command '%s'.", name)

    def run_command(self, name: str, *args: Any, **kwargs: Any) -> Any:
        try:
            handler = self._commands[name]
        except KeyError:
            raise KeyError(f"Unknown command '{name}'.") from None
        return handler(*args, **kwargs)

    @property
    def commands(self) -> list[str]:
        return sorted(self._commands)

    # -- Event hooks --------------------------------------------------------

    def register_hook(self, event: str, handler: Callable[..., Any]) -> None:
        self._hooks.setdefault(event, []).append(handler)
        logger.debug("Registered hook for '%s'.", event)

    def emit(self, event: str, **payload: Any) -> list[Any]:
        """Call every handler for *event* in registration order."""
        return [handler(**payload) for handler in self._hooks.get(event, [])]

    def hooks(self, event: str) -> list[Callable[..., Any]]:
        return list(self._hooks.get(event, []))
