"""
Dotted-path addressing over a document tree.

A path such as ``devices.disk.driver`` names child elements below the root
element, one segment per level. Segments must be valid element names, so
attributes (``-name``) and text (``#text``) cannot be addressed, and there is
no notation for picking one of several repeated siblings.
"""

from __future__ import annotations

import logging as _logging

import customhook.domain.errors as errors
import customhook.domain.tree as tree

_logger = _logging.getLogger(__name__)

SEPARATOR = "."


def split_path(path: str) -> list[str]:
    """
    Split a dotted path into its segments.

    Raises:
        PathError: If the path is empty or has an empty segment.
    """
    if not isinstance(path, str) or not path:
        raise errors.PathError(str(path), "path is empty")
    segments = path.split(SEPARATOR)
    if not all(segments):
        raise errors.PathError(path, "path has an empty segment")
    return segments


def _check_segment(path: str, segment: str) -> None:
    if not tree.is_valid_name(segment):
        raise errors.PathError(path, f"segment {segment!r} is not a valid element name")


def get_node(document: tree.Tree, path: str) -> tree.Node | None:
    """
    Look up the node at ``path``.

    Returns None when any segment is missing or the walk reaches a leaf or
    a list of repeated elements before the last segment.
    """
    node: tree.Node = document.root
    for segment in split_path(path):
        _check_segment(path, segment)
        if not isinstance(node, tree.Container):
            return None
        child = node.get(segment)
        if child is None:
            return None
        node = child
    return node


def ensure_path_exists(document: tree.Tree, path: str) -> tree.Tree:
    """
    Make every proper prefix of ``path`` resolve to a Container.

    For ``a.b.c`` the prefixes ``a`` and ``a.b`` are walked. A missing prefix
    gets an empty Container and a leaf is converted into one, keeping its
    text. The last segment is left to set_value. Calling this again with the
    same path changes nothing.

    A prefix holding repeated elements counts as present, but nothing can be
    inserted below it.

    Args:
        document: Tree to mutate in place.
        path: Dotted path.

    Returns:
        The same tree.

    Raises:
        PathError: If the path is malformed or a prefix cannot be inserted.
    """
    segments = split_path(path)
    parent: tree.Container | None = document.root

    for depth, segment in enumerate(segments[:-1], start=1):
        _check_segment(path, segment)
        prefix = SEPARATOR.join(segments[:depth])

        if parent is None:
            raise errors.PathError(
                path, f"cannot create {prefix!r} below repeated elements"
            )

        node = parent.get(segment)
        if node is None:
            node = tree.Container()
            parent[segment] = node
            _logger.debug("Created container at %s", prefix)
        elif isinstance(node, tree.Scalar):
            node = tree.container_from_scalar(node)
            parent[segment] = node
            _logger.debug("Converted leaf at %s into a container", prefix)

        parent = node if isinstance(node, tree.Container) else None

    return document


def set_value(document: tree.Tree, path: str, value: str) -> tree.Tree:
    """
    Assign a scalar value at ``path``, replacing whatever is there.

    The parent of the last segment must already be a Container (call
    ensure_path_exists first). Replacing an element that had attributes or
    children drops them.

    Args:
        document: Tree to mutate in place.
        path: Dotted path.
        value: Text to store.

    Returns:
        The same tree.

    Raises:
        PathError: If the value cannot be assigned at ``path``.
    """
    segments = split_path(path)
    leaf = segments[-1]
    _check_segment(path, leaf)

    if not isinstance(value, str):
        raise errors.PathError(path, f"value must be a string, got {type(value).__name__}")
    if tree.has_illegal_characters(value):
        raise errors.PathError(path, "value contains characters not allowed in XML")

    parent: tree.Node = document.root
    for depth, segment in enumerate(segments[:-1], start=1):
        _check_segment(path, segment)
        if not isinstance(parent, tree.Container):
            break
        child = parent.get(segment)
        if child is None:
            raise errors.PathError(
                path, f"parent {SEPARATOR.join(segments[:depth])!r} does not exist"
            )
        parent = child

    if isinstance(parent, tree.ListNode):
        raise errors.PathError(path, "parent is a list of repeated elements")
    if not isinstance(parent, tree.Container):
        raise errors.PathError(path, "parent holds a value, not child elements")
    if isinstance(parent.get(leaf), tree.ListNode):
        raise errors.PathError(path, "target is a list of repeated elements")

    parent[leaf] = tree.Scalar(value)
    return document
