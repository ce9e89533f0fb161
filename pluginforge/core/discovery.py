"""Extension discovery — a pure filter over a loaded module's classes.

A class becomes an ExtensionDescriptor only if it is

1. public — no leading underscore, and listed in ``__all__`` when the
   module defines one,
2. concrete — ``inspect.isabstract`` is false,
3. a strict subclass of :class:`~pluginforge.contract.ExtensionBase`,
4. marked — carries its own ``__api_version__`` whose major version
   matches the host contract,
5. orderable — ``order`` is a class-level ``int``, not a property.

Enumeration order means nothing here; see :mod:`pluginforge.core.ordering`.
"""

from __future__ import annotations

import inspect
import logging

from pluginforge.contract import API_VERSION, ApiVersion, ExtensionBase, get_api_version
from pluginforge.core.module_loader import LoadedModule
from pluginforge.models.extensions import ExtensionDescriptor

logger = logging.getLogger(__name__)


def is_public(cls: type, module: LoadedModule) -> bool:
    if cls.__name__.startswith("_"):
        return False
    exported = getattr(module.module, "__all__", None)
    if exported is not None:
        return cls.__name__ in exported
    return True


def implements_contract(cls: type) -> bool:
    return issubclass(cls, ExtensionBase) and cls is not ExtensionBase


def rejection_reason(
    cls: type, module: LoadedModule, api_version: ApiVersion = API_VERSION
) -> str | None:
    """Return why *cls* is not an eligible extension, or ``None`` if it is."""
    if not is_public(cls, module):
        return "not public"
    if inspect.isabstract(cls):
        return "abstract"
    if not implements_contract(cls):
        return "does not derive from ExtensionBase"
    marker = get_api_version(cls)
    if marker is None:
        return "missing @api_version marker"
    if not marker.is_compatible_with(api_version):
        return f"targets API {marker}, host implements {api_version}"
    if not isinstance(getattr(cls, "order", 0), int):
        return "ordering hint must be a class-level int"
    return None


def describe(cls: type, module_name: str) -> ExtensionDescriptor:
    """Read declared metadata off an eligible extension class."""
    return ExtensionDescriptor(
        extension_type=cls,
        module_name=module_name,
        name=str(getattr(cls, "name", "") or cls.__name__),
        version=str(getattr(cls, "version", "")),
        author=str(getattr(cls, "author", "")),
        description=str(getattr(cls, "description", "")),
        order=int(getattr(cls, "order", 0)),
        api_version=get_api_version(cls),
    )


def discover(
    module: LoadedModule, *, api_version: ApiVersion = API_VERSION
) -> list[ExtensionDescriptor]:
    """Return descriptors for every eligible extension class in *module*.

    A module with no eligible classes yields an empty list.
    """
    found: list[ExtensionDescriptor] = []
    for cls in module.types:
        reason = rejection_reason(cls, module, api_version)
        if reason is None:
            found.append(describe(cls, module.name))
            continue
        if reason.startswith("targets API"):
            logger.warning(
                "Extension '%s' in module '%s' is incompatible: %s.",
                cls.__qualname__, module.name, reason,
            )
        else:
            logger.debug("Skipping '%s' in module '%s': %s.", cls.__qualname__, module.name, reason)
    logger.info("Discovered %d extension(s) in module '%s'.", len(found), module.name)
    return found
