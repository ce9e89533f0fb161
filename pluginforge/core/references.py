"""Reference resolution — what extension code is allowed to import.

A reference set has two parts:

* archives found directly inside the reference directory (wheels, zips,
  eggs — anything ``zipimport`` can import from), and
* the host's core: the interpreter's standard library and builtins, the
  ``pluginforge`` package that defines the extension contract, and any
  host packages named in configuration.

The directory is re-scanned on every call.  Dropping a new archive in and
restarting the host is enough for it to be picked up.
"""

from __future__ import annotations

import logging
import sys
import zipfile
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_SUFFIXES: tuple[str, ...] = (".whl", ".zip", ".egg")

# Top-level name of the package that defines the extension contract.
HOST_PACKAGE = __name__.split(".", 1)[0]


class ReferenceSet(BaseModel):
    """Everything a compilation unit may import."""

    model_config = ConfigDict(frozen=True)

    archives: list[Path] = Field(default_factory=list)
    archive_modules: dict[str, Path] = Field(default_factory=dict)  # module -> archive
    core_modules: frozenset[str] = frozenset()

    def resolves(self, module: str) -> bool:
        """Whether the top-level package of a dotted *module* is referenced."""
        top = module.split(".", 1)[0]
        return top in self.core_modules or top in self.archive_modules

    @property
    def module_names(self) -> list[str]:
        return sorted(self.core_modules | set(self.archive_modules))


def core_module_names(host_modules: Iterable[str] = ()) -> frozenset[str]:
    """Top-level modules provided by the running host."""
    names = set(sys.stdlib_module_names) | set(sys.builtin_module_names)
    names.add(HOST_PACKAGE)
    names.update(m.split(".", 1)[0] for m in host_modules if m)
    return frozenset(names)


def archive_top_level_modules(archive: Path) -> set[str]:
    """List the top-level importable names inside a zip-format archive."""
    names: set[str] = set()
    with zipfile.ZipFile(archive) as zf:
        for member in zf.namelist():
            parts = PurePosixPath(member).parts
            if not parts:
                continue
            head = parts[0]
            if len(parts) == 1:
                stem, dot, ext = head.rpartition(".")
                if dot and ext in ("py", "pyc") and stem.isidentifier():
                    names.add(stem)
            elif head.isidentifier():
                # Package or namespace directory; skips *.dist-info / *.egg-info
                names.add(head)
    return names


def find_reference_archives(
    reference_dir: Path, suffixes: Iterable[str] = DEFAULT_REFERENCE_SUFFIXES
) -> list[Path]:
    """Return reference files directly inside *reference_dir* (non-recursive)."""
    if not reference_dir.is_dir():
        return []
    wanted = {s.lower() for s in suffixes}
    return sorted(
        p for p in reference_dir.iterdir()
        if p.is_file() and p.suffix.lower() in wanted
    )


def resolve_references(
    reference_dir: Path,
    *,
    suffixes: Iterable[str] = DEFAULT_REFERENCE_SUFFIXES,
    host_modules: Iterable[str] = (),
) -> ReferenceSet:
    """Scan *reference_dir* and build a fresh ReferenceSet.

    Archives that cannot be read are logged and left out of the set; the
    imports they would have satisfied then surface as compile diagnostics.
    """
    archives: list[Path] = []
    archive_modules: dict[str, Path] = {}

    for archive in find_reference_archives(reference_dir, suffixes):
        try:
            provided = archive_top_level_modules(archive)
        except (zipfile.BadZipFile, OSError) as exc:
            logger.warning("Skipping unreadable reference '%s': %s", archive, exc)
            continue
        archives.append(archive)
        for name in sorted(provided):
            # First archive (by name) wins, matching sys.path order at load time.
            archive_modules.setdefault(name, archive)

    logger.debug(
        "Resolved %d reference archive(s) from '%s'.", len(archives), reference_dir
    )
    return ReferenceSet(
        archives=archives,
        archive_modules=archive_modules,
        core_modules=core_module_names(host_modules),
    )
