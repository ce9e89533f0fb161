"""Source aggregation — one directory tree becomes one compilation unit.

Files are enumerated depth-first: a directory's own files (sorted by name)
come before its subdirectories (sorted by name, recursively).  Contents are
concatenated in that order with no per-file isolation, so a syntax error in
any file fails the whole unit at compile time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from pluginforge.core.errors import SourceDecodeError
from pluginforge.models.compilation import CompilationUnit, SourceSegment

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_SUFFIXES: tuple[str, ...] = (".py",)


def iter_source_files(
    directory: Path, suffixes: Iterable[str] = DEFAULT_SOURCE_SUFFIXES
) -> Iterator[Path]:
    """Yield regular files under *directory* in depth-first order.

    An empty *suffixes* accepts every regular file.
    """
    wanted = {s.lower() for s in suffixes}
    entries = sorted(directory.iterdir(), key=lambda p: p.name)
    for path in entries:
        if path.is_file() and (not wanted or path.suffix.lower() in wanted):
            yield path
    for path in entries:
        if path.is_dir():
            yield from iter_source_files(path, wanted)


def aggregate_sources(
    directory: Path, *, suffixes: Iterable[str] = DEFAULT_SOURCE_SUFFIXES
) -> CompilationUnit:
    """Concatenate every source file under *directory* into a CompilationUnit.

    The unit's module name is the last path segment of *directory*.  A
    leading UTF-8 byte order mark is dropped from each file, and each file's
    text is newline-terminated before the next one is appended.

    Raises
    ------
    SourceDecodeError
        If a file is not valid UTF-8.
    """
    module_name = directory.name
    chunks: list[str] = []
    segments: list[SourceSegment] = []
    next_line = 1

    for path in iter_source_files(directory, suffixes):
        try:
            text = path.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as exc:
            raise SourceDecodeError(
                f"Source file '{path}' is not valid UTF-8 text: {exc.reason}",
                module_name=module_name,
                path=str(path),
            ) from exc
        if text and not text.endswith("\n"):
            text += "\n"
        line_count = text.count("\n")
        if line_count:
            segments.append(
                SourceSegment(path=path, start_line=next_line, line_count=line_count)
            )
            next_line += line_count
        chunks.append(text)

    logger.debug(
        "Aggregated %d file(s), %d line(s) for module '%s'.",
        len(segments), next_line - 1, module_name,
    )
    return CompilationUnit(
        module_name=module_name,
        source="".join(chunks),
        segments=segments,
        source_dir=directory,
    )
