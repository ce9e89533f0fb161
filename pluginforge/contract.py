"""The extension contract — what a dynamically compiled class must be.

An extension is a public, concrete subclass of :class:`ExtensionBase` that
carries its own API-version marker::

    from pluginforge.contract import ExtensionBase, api_version

    @api_version(2, 1)
    class Greeter(ExtensionBase):
        name = "Greeter"
        version = "1.0"
        author = "someone"
        order = 10

        def initialize(self) -> None:
            self.host.register_command("hello", lambda: "hi")

Metadata lives on the class so the loader can order extensions before
constructing any of them.  The marker is read from the class's own
namespace: subclassing a marked extension does not make the subclass
eligible.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field

MARKER_ATTRIBUTE = "__api_version__"


class ApiVersion(BaseModel):
    """Contract version an extension targets (or a host implements)."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(default=0, ge=0)

    def is_compatible_with(self, host: ApiVersion) -> bool:
        """Same major version — minor revisions are additive."""
        return self.major == host.major

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


# Contract version implemented by this package.
API_VERSION = ApiVersion(major=2, minor=1)

_T = TypeVar("_T", bound=type)


def api_version(major: int, minor: int = 0):
    """Class decorator that marks an extension with the contract version it targets."""

    marker = ApiVersion(major=major, minor=minor)

    def decorate(cls: _T) -> _T:
        setattr(cls, MARKER_ATTRIBUTE, marker)
        return cls

    return decorate


def get_api_version(cls: type) -> ApiVersion | None:
    """Return the marker declared directly on *cls*, ignoring base classes."""
    marker = vars(cls).get(MARKER_ATTRIBUTE)
    return marker if isinstance(marker, ApiVersion) else None


class ExtensionBase(ABC):
    """Base class every extension derives from.

    Parameters
    ----------
    host:
        The host context.  Retained as ``self.host``; extensions must not
        reach for the host through any global.
    """

    name: ClassVar[str] = ""
    version: ClassVar[str] = "0.0"
    author: ClassVar[str] = ""
    description: ClassVar[str] = ""
    order: ClassVar[int] = 0

    def __init__(self, host: Any) -> None:
        self.host = host

    @abstractmethod
    def initialize(self) -> None:
        """Bring the extension up.  Called once, after construction."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name or '?'} v{self.version}>"
