"""
Domain document merging.

Parses domain XML into an addressable tree, applies dotted-path overrides
and serializes the result.

Example usage:
    import customhook.domain as domain

    merged = domain.merge(
        b"<domain><devices/></domain>",
        [("devices.disk.driver", "qemu")],
    )
"""

from customhook.domain.errors import (
    MergeError,
    ParseError,
    PathError,
    SerializeError,
)
from customhook.domain.merger import (
    MergeResult,
    Override,
    PathMerger,
    SkippedOverride,
    merge,
)
from customhook.domain.paths import (
    ensure_path_exists,
    get_node,
    set_value,
    split_path,
)
from customhook.domain.tree import (
    Container,
    ListNode,
    Node,
    Scalar,
    Tree,
    parse,
    serialize,
)

__all__ = [
    "Container",
    "ListNode",
    "MergeError",
    "MergeResult",
    "Node",
    "Override",
    "ParseError",
    "PathError",
    "PathMerger",
    "Scalar",
    "SerializeError",
    "SkippedOverride",
    "Tree",
    "ensure_path_exists",
    "get_node",
    "merge",
    "parse",
    "serialize",
    "set_value",
    "split_path",
]
