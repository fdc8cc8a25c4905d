"""
customhook - domain XML override hook sidecar.

Rewrites a virtual machine's hypervisor domain XML from dotted-path
annotations on the VM instance, creating missing elements along the way.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("customhook")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from customhook.domain import Override, PathMerger, merge  # noqa: E402
from customhook.hooks import HookService  # noqa: E402

__all__ = ["__version__", "__version_info__", "HookService", "Override", "PathMerger", "merge"]
