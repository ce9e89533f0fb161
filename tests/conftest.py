"""Shared test fixtures for pluginforge."""

from __future__ import annotations

import io
import sys
import textwrap
import uuid
import zipfile
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from rich.console import Console

from pluginforge.config import LoaderConfig
from pluginforge.core.compiler import Compiler
from pluginforge.core.module_loader import LoadedModule, load_image
from pluginforge.core.pipeline import ExtensionPipeline
from pluginforge.core.references import ReferenceSet, resolve_references
from pluginforge.core.reporter import Reporter
from pluginforge.host import HostContext
from pluginforge.models.compilation import CompilationUnit

# A minimal, valid extension.  Format with name/version/order.
EXTENSION_TEMPLATE = '''
from pluginforge.contract import ExtensionBase, api_version


@api_version(2, 1)
class {cls}(ExtensionBase):
    name = "{name}"
    version = "{version}"
    author = "tester"
    order = {order}

    def initialize(self):
        self.host.register_hook("boot", lambda: self.name)
'''


def extension_source(
    cls: str = "Foo", name: str | None = None, version: str = "1.0", order: int = 0
) -> str:
    """Source text for one contract-implementing class."""
    return EXTENSION_TEMPLATE.format(cls=cls, name=name or cls, version=version, order=order)


@pytest.fixture
def ext_source() -> Callable[..., str]:
    """Provide the extension source factory."""
    return extension_source


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def sources_root(tmp_dir: Path) -> Path:
    return tmp_dir / "SourceCodes"


@pytest.fixture
def references_root(tmp_dir: Path) -> Path:
    return tmp_dir / "Reference"


@pytest.fixture
def namespace() -> Iterator[str]:
    """A unique sys.modules namespace; entries are dropped after the test."""
    ns = f"pf_test_{uuid.uuid4().hex[:8]}"
    yield ns
    for key in [k for k in sys.modules if k.startswith(f"{ns}.")]:
        del sys.modules[key]


@pytest.fixture
def config(sources_root: Path, references_root: Path, namespace: str) -> LoaderConfig:
    """Provide a LoaderConfig pointed at temp roots, ignoring any .env file."""
    return LoaderConfig(
        _env_file=None,
        sources_path=sources_root,
        references_path=references_root,
        module_namespace=namespace,
    )


@pytest.fixture
def host() -> HostContext:
    return HostContext(name="test-host")


class CapturingReporter(Reporter):
    """Reporter writing to in-memory consoles."""

    def __init__(self) -> None:
        self._out = io.StringIO()
        self._err = io.StringIO()
        super().__init__(
            out=Console(file=self._out, width=400, color_system=None),
            err=Console(file=self._err, width=400, color_system=None),
        )

    @property
    def stdout(self) -> str:
        return self._out.getvalue()

    @property
    def stderr(self) -> str:
        return self._err.getvalue()

    @property
    def stdout_lines(self) -> list[str]:
        return [line for line in self.stdout.splitlines() if line.strip()]

    @property
    def stderr_lines(self) -> list[str]:
        return [line for line in self.stderr.splitlines() if line.strip()]


@pytest.fixture
def reporter() -> CapturingReporter:
    return CapturingReporter()


@pytest.fixture
def pipeline(
    config: LoaderConfig, host: HostContext, reporter: CapturingReporter
) -> ExtensionPipeline:
    """Provide an ExtensionPipeline wired to temp roots and captured output."""
    return ExtensionPipeline(config=config, host=host, reporter=reporter)


# ---------------------------------------------------------------------------
# Source tree and archive factories
# ---------------------------------------------------------------------------


@pytest.fixture
def write_tree(sources_root: Path) -> Callable[..., Path]:
    """Factory fixture: create ``sources_root/<module>`` with the given files."""

    def _factory(module: str, files: dict[str, str] | None = None) -> Path:
        root = sources_root / module
        root.mkdir(parents=True, exist_ok=True)
        for rel, text in (files or {}).items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(text), encoding="utf-8")
        return root

    return _factory


@pytest.fixture
def make_archive(references_root: Path) -> Callable[..., Path]:
    """Factory fixture: write a zip reference archive into the reference root."""

    def _factory(filename: str, members: dict[str, str]) -> Path:
        references_root.mkdir(parents=True, exist_ok=True)
        path = references_root / filename
        with zipfile.ZipFile(path, "w") as zf:
            for name, text in members.items():
                zf.writestr(name, textwrap.dedent(text))
        return path

    return _factory


@pytest.fixture
def empty_references(tmp_dir: Path) -> ReferenceSet:
    """References with only the host core (stdlib + pluginforge)."""
    return resolve_references(tmp_dir / "no-references")


@pytest.fixture
def load_source(
    empty_references: ReferenceSet, namespace: str
) -> Callable[..., LoadedModule]:
    """Factory fixture: compile and load source text as a module."""

    def _factory(source: str, module_name: str = "mod") -> LoadedModule:
        unit = CompilationUnit(module_name=module_name, source=textwrap.dedent(source))
        result = Compiler().compile(unit, empty_references)
        assert result.success, [str(d) for d in result.diagnostics]
        return load_image(result.image, namespace=namespace)

    return _factory
