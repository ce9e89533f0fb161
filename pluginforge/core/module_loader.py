"""Module loader — brings a compiled image into the running interpreter.

The image is validated, unmarshalled and executed in a fresh module object
that is registered in ``sys.modules``.  Nothing touches disk.  Loaded
modules stay registered for the lifetime of the process: there is no unload
path, and reference archives added to ``sys.path`` are never removed.
"""

from __future__ import annotations

import importlib.util
import logging
import marshal
import sys
from collections.abc import Iterable
from pathlib import Path
from types import CodeType, ModuleType

from pydantic import BaseModel, ConfigDict, Field

from pluginforge.core.compiler import IMAGE_FLAGS, IMAGE_HEADER_SIZE
from pluginforge.core.errors import LoadError
from pluginforge.core.hasher import image_digest
from pluginforge.models.compilation import IMAGE_FILENAME_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "pluginforge_extensions"


class LoadedModule(BaseModel):
    """A live module and the classes it defines.

    ``types`` lists every class whose ``__module__`` is this module, once
    each, in definition order.  Visibility and contract filtering happen
    later, in discovery.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    module: ModuleType
    types: list[type] = Field(default_factory=list)
    image_digest: str = ""

    @property
    def qualified_name(self) -> str:
        return self.module.__name__


def read_image(image: bytes) -> tuple[str, CodeType]:
    """Validate an image header and return ``(module_name, code)``.

    Raises
    ------
    LoadError
        If the image is truncated, built for another interpreter, not
        hash-based, or does not contain a pluginforge module code object.
    """
    if len(image) < IMAGE_HEADER_SIZE:
        raise LoadError(f"Image is truncated ({len(image)} bytes).")
    if image[:4] != importlib.util.MAGIC_NUMBER:
        raise LoadError(
            "Image magic number does not match this interpreter "
            f"({image[:4].hex()} != {importlib.util.MAGIC_NUMBER.hex()})."
        )
    flags = int.from_bytes(image[4:8], "little")
    if flags != IMAGE_FLAGS:
        raise LoadError(f"Unsupported image flags {flags:#b}.")

    try:
        code = marshal.loads(image[IMAGE_HEADER_SIZE:])
    except (EOFError, ValueError, TypeError) as exc:
        raise LoadError(f"Image payload is malformed: {exc}") from exc
    if not isinstance(code, CodeType):
        raise LoadError(f"Image payload is a {type(code).__name__}, not a code object.")
    if not code.co_filename.startswith(IMAGE_FILENAME_PREFIX):
        raise LoadError(f"Image carries no module identity ({code.co_filename!r}).")

    name = code.co_filename[len(IMAGE_FILENAME_PREFIX):]
    if not name:
        raise LoadError("Image carries an empty module name.")
    return name, code


def add_reference_paths(archives: Iterable[Path]) -> None:
    """Make reference archives importable.  Appended once, never removed."""
    for archive in archives:
        entry = str(archive.resolve())
        if entry not in sys.path:
            sys.path.append(entry)
            logger.debug("Added reference '%s' to sys.path.", entry)


def load_image(
    image: bytes,
    *,
    archives: Iterable[Path] = (),
    namespace: str = DEFAULT_NAMESPACE,
) -> LoadedModule:
    """Load *image* into the interpreter and return the module's classes.

    Parameters
    ----------
    image:
        Bytes produced by :class:`pluginforge.core.compiler.Compiler`.
    archives:
        Reference archives the module was compiled against.
    namespace:
        Prefix for the ``sys.modules`` key, so an extension directory named
        like a stdlib module cannot shadow it.

    Raises
    ------
    LoadError
        If the image is malformed, or executing the module's top-level code
        raises or calls ``sys.exit()`` (for example an import that resolved
        at compile time but fails at run time).
    """
    name, code = read_image(image)
    qualified = f"{namespace}.{name}" if namespace else name

    spec = importlib.util.spec_from_loader(qualified, loader=None, origin=code.co_filename)
    module = importlib.util.module_from_spec(spec)
    module.__file__ = code.co_filename

    add_reference_paths(archives)

    if qualified in sys.modules:
        logger.debug("Replacing sys.modules entry for '%s'.", qualified)
    sys.modules[qualified] = module
    try:
        exec(code, module.__dict__)
    except (Exception, SystemExit) as exc:
        sys.modules.pop(qualified, None)
        raise LoadError(
            f"Module '{name}' raised while loading: {type(exc).__name__}: {exc}",
            module_name=name,
        ) from exc

    # A class bound to several names (aliases) is listed once.
    seen: set[int] = set()
    types: list[type] = []
    for obj in vars(module).values():
        if isinstance(obj, type) and obj.__module__ == qualified and id(obj) not in seen:
            seen.add(id(obj))
            types.append(obj)
    logger.info("Loaded module '%s' with %d type(s).", name, len(types))
    return LoadedModule(
        name=name, module=module, types=types, image_digest=image_digest(image)
    )
