"""pluginforge: dynamic extension loader.

Compiles each extension source tree in memory at host startup, loads it
into the running interpreter, discovers classes implementing the extension
contract and brings them up in a deterministic order:

  - one compilation unit per source directory, diagnostics mapped back to files
  - hash-based pyc images, byte-identical across identical compiles
  - discovery by contract, visibility and @api_version marker
  - fail-fast lifecycle: broken extensions halt startup
"""

__version__ = "0.1.0"
__description__ = "Dynamic extension loader: in-memory compile, load, discover, initialize"

from pluginforge.contract import API_VERSION, ApiVersion, ExtensionBase, api_version
from pluginforge.core.pipeline import ExtensionPipeline
from pluginforge.host import HostContext

__all__ = [
    "API_VERSION",
    "ApiVersion",
    "ExtensionBase",
    "ExtensionPipeline",
    "HostContext",
    "api_version",
    "__version__",
]
