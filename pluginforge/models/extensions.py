"""Extension lifecycle models — descriptors and their state machine."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pluginforge.contract import ApiVersion
from pluginforge.core.errors import InvalidTransitionError


class ExtensionState(str, Enum):
    """Lifecycle state of a discovered extension."""

    DISCOVERED = "discovered"
    INSTANTIATED = "instantiated"
    INITIALIZED = "initialized"
    FAILED = "failed"
    CONSTRUCTION_FAILED = "construction_failed"


# Valid state transitions — enforced by ExtensionDescriptor.transition().
# Every failure state is terminal: there is no per-extension retry.
VALID_TRANSITIONS: dict[ExtensionState, set[ExtensionState]] = {
    ExtensionState.DISCOVERED: {
        ExtensionState.INSTANTIATED,
        ExtensionState.CONSTRUCTION_FAILED,
    },
    ExtensionState.INSTANTIATED: {ExtensionState.INITIALIZED, ExtensionState.FAILED},
    ExtensionState.INITIALIZED: set(),  # terminal
    ExtensionState.FAILED: set(),  # terminal
    ExtensionState.CONSTRUCTION_FAILED: set(),  # terminal
}


class ExtensionDescriptor(BaseModel):
    """A discovered extension class, its declared metadata, and (once
    constructed) its live instance.

    Metadata is read from class attributes at discovery time so that the
    initialization order is known before anything is instantiated.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    extension_type: type
    module_name: str
    name: str
    version: str = ""
    author: str = ""
    description: str = ""
    order: int = 0
    api_version: ApiVersion
    state: ExtensionState = ExtensionState.DISCOVERED
    instance: Any = None
    history: list[str] = Field(default_factory=list)

    @property
    def qualified_name(self) -> str:
        t = self.extension_type
        return f"{t.__module__}.{t.__qualname__}"

    @property
    def sort_key(self) -> tuple[int, str]:
        return (self.order, self.name)

    def transition(self, target: ExtensionState) -> None:
        """Move to *target*, recording ``"from->to"`` in ``history``."""
        allowed = VALID_TRANSITIONS.get(self.state, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition extension '{self.name}' from "
                f"{self.state.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )
        self.history.append(f"{self.state.value}->{target.value}")
        self.state = target

    def summary(self) -> ExtensionSummary:
        return ExtensionSummary(
            name=self.name,
            version=self.version,
            author=self.author,
            order=self.order,
            qualified_name=self.qualified_name,
            state=self.state,
        )


class ExtensionSummary(BaseModel):
    """Frozen, reportable snapshot of a descriptor."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    author: str
    order: int
    qualified_name: str
    state: ExtensionState
