"""
Errors raised while merging overrides into a domain document.

- ParseError: the input document is empty or not well-formed (fatal)
- PathError: a dotted path cannot be created or assigned
- SerializeError: the mutated tree cannot be rendered back to XML (fatal)

Whether a PathError is fatal depends on the phase it is raised in: the
ensure phase aborts the merge, the set phase only skips one override.
"""

from __future__ import annotations


class MergeError(Exception):
    """Base class for all document merge errors."""

    pass


class ParseError(MergeError):
    """Input document is empty or not well-formed XML."""

    pass


class PathError(MergeError):
    """A dotted path cannot be ensured or assigned in the document tree."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.reason = message
        super().__init__(f"Invalid path {path!r}: {message}")


class SerializeError(MergeError):
    """Document tree contains a structure the XML serializer cannot represent."""

    pass
