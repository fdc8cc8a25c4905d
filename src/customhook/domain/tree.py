"""
Addressable document tree over domain XML.

The tree is a tagged variant of three node types:
- Scalar: a leaf element holding text
- Container: an element with named children, in document order
- ListNode: repeated sibling elements that share one tag

Mapping from XML:
- An element without child elements and without attributes is a Scalar.
- Any other element is a Container. Attributes are stored as Scalars keyed
  ``-name`` and non-whitespace text is stored under ``#text``.
- Siblings sharing a tag are gathered in one ListNode at the position of the
  first occurrence.

Attribute and text keys start with characters that are not valid in element
names, so dotted paths can never address them.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import re as _re
import typing as _typing
import xml.etree.ElementTree as _ET

import customhook.domain.errors as errors

ATTRIBUTE_PREFIX = "-"
"""Key prefix for attributes stored inside a Container."""

TEXT_KEY = "#text"
"""Key holding the text of an element that also has children or attributes."""

# XML 1.0 NameStartChar and NameChar ranges, minus the colon since prefixes
# need a namespace binding
_NAME_START_CHARS = (
    r"A-Z_a-z\u00c0-\u00d6\u00d8-\u00f6\u00f8-\u02ff\u0370-\u037d\u037f-\u1fff"
    r"\u200c\u200d\u2070-\u218f\u2c00-\u2fef\u3001-\ud7ff\uf900-\ufdcf\ufdf0-\ufffd"
    r"\U00010000-\U000effff"
)
_NAME_CHARS = _NAME_START_CHARS + r"\-.0-9\u00b7\u0300-\u036f\u203f\u2040"
_NAME_PATTERN = "[" + _NAME_START_CHARS + "][" + _NAME_CHARS + "]*"

_NAME_RE = _re.compile(_NAME_PATTERN)
_QUALIFIED_NAME_RE = _re.compile(r"\{[^}]*\}" + _NAME_PATTERN)
_ILLEGAL_CHARS_RE = _re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


@_dataclasses.dataclass
class Scalar:
    """Leaf value."""

    value: str = ""


@_dataclasses.dataclass
class Container:
    """Element with named children (elements, attributes and text)."""

    children: dict[str, Node] = _dataclasses.field(default_factory=dict)

    def __contains__(self, key: object) -> bool:
        return key in self.children

    def __getitem__(self, key: str) -> Node:
        return self.children[key]

    def __setitem__(self, key: str, node: Node) -> None:
        self.children[key] = node

    def get(self, key: str) -> Node | None:
        return self.children.get(key)

    @property
    def attributes(self) -> dict[str, str]:
        """Attribute values keyed by their bare name."""
        return {
            key[len(ATTRIBUTE_PREFIX) :]: node.value
            for key, node in self.children.items()
            if key.startswith(ATTRIBUTE_PREFIX) and isinstance(node, Scalar)
        }

    @property
    def text(self) -> str | None:
        node = self.children.get(TEXT_KEY)
        return node.value if isinstance(node, Scalar) else None


@_dataclasses.dataclass
class ListNode:
    """Repeated sibling elements sharing one tag."""

    items: list[Node] = _dataclasses.field(default_factory=list)


Node: _typing.TypeAlias = Scalar | Container | ListNode


@_dataclasses.dataclass
class Tree:
    """
    A parsed document: the root element's tag and its content.

    The root content is always a Container so that single-segment paths
    have a parent to be assigned into. ``namespaces`` maps the prefixes
    declared in the source document to their URIs, so that serialization
    can write namespaced names with their original prefixes.
    """

    tag: str
    root: Container
    namespaces: dict[str, str] = _dataclasses.field(default_factory=dict)


def is_valid_name(name: str) -> bool:
    """Check whether ``name`` can be used as an unqualified element name."""
    return bool(_NAME_RE.fullmatch(name))


def has_illegal_characters(text: str) -> bool:
    """Check whether ``text`` contains characters XML 1.0 cannot carry."""
    return bool(_ILLEGAL_CHARS_RE.search(text))


def container_from_scalar(scalar: Scalar) -> Container:
    """
    Convert a leaf into a Container, keeping non-whitespace text as ``#text``.

    Used when a leaf has to receive children, e.g. ``<devices/>`` becoming the
    parent of a new ``disk`` element.
    """
    container = Container()
    if scalar.value.strip():
        container[TEXT_KEY] = Scalar(scalar.value)
    return container


# =============================================================================
# Parsing
# =============================================================================


def parse(document: bytes | str | None) -> Tree:
    """
    Parse serialized XML into a document tree.

    Args:
        document: XML document, as bytes or text.

    Returns:
        The parsed Tree.

    Raises:
        ParseError: If the document is None, empty, or not well-formed.
    """
    if document is None or not document.strip():
        raise errors.ParseError("document is empty")

    parser = _ET.XMLPullParser(events=("start", "start-ns"))
    element: _ET.Element | None = None
    namespaces: dict[str, str] = {}
    try:
        parser.feed(document)
        parser.close()
        for event, item in parser.read_events():
            if event == "start-ns":
                prefix, uri = item
                # A prefix rebound in a nested scope keeps its first URI
                namespaces.setdefault(prefix, uri)
            elif element is None:
                element = item
    except _ET.ParseError as e:
        raise errors.ParseError(f"document is not well-formed XML: {e}") from e

    if element is None:
        raise errors.ParseError("document has no root element")

    root = _element_to_node(element)
    if isinstance(root, Scalar):
        root = container_from_scalar(root)
    # _element_to_node never returns a ListNode for a single element
    return Tree(tag=element.tag, root=_typing.cast(Container, root), namespaces=namespaces)


def _element_to_node(element: _ET.Element) -> Node:
    children = list(element)
    if not children and not element.attrib:
        return Scalar(element.text or "")

    container = Container()
    for name, value in element.attrib.items():
        container[ATTRIBUTE_PREFIX + name] = Scalar(value)

    # Text after a child element is kept, joined onto the element's own text
    text = "".join(
        piece
        for piece in [element.text, *(child.tail for child in children)]
        if piece and piece.strip()
    )
    if text:
        container[TEXT_KEY] = Scalar(text)

    for child in children:
        # Comments and processing instructions are dropped by the default parser
        node = _element_to_node(child)
        existing = container.get(child.tag)
        if existing is None:
            container[child.tag] = node
        elif isinstance(existing, ListNode):
            existing.items.append(node)
        else:
            container[child.tag] = ListNode([existing, node])

    return container


# =============================================================================
# Serialization
# =============================================================================


def serialize(tree: Tree, *, indent: bool = False) -> bytes:
    """
    Render a document tree as UTF-8 XML, without an XML declaration.

    Namespace prefixes recorded in ``tree.namespaces`` are declared on the
    root element and used for namespaced names. A namespace without a
    recorded prefix gets a generated one.

    Args:
        tree: Tree to render.
        indent: Pretty-print with two-space indentation.

    Returns:
        Serialized document.

    Raises:
        SerializeError: If a tag, attribute or value cannot be represented.
    """
    if not isinstance(tree.root, Container):
        raise errors.SerializeError(
            f"root content must be a container, got {type(tree.root).__name__}"
        )

    prefixes = _prefixes_by_uri(tree.namespaces)
    _check_tag(tree.tag)
    element = _ET.Element(_prefixed(tree.tag, prefixes))
    for uri, prefix in prefixes.items():
        element.set(f"xmlns:{prefix}" if prefix else "xmlns", uri)
    _fill_element(element, tree.root, prefixes)

    if indent:
        _ET.indent(element, space="  ")

    try:
        text = _ET.tostring(element, encoding="unicode")
    except (TypeError, ValueError) as e:
        raise errors.SerializeError(f"cannot serialize document: {e}") from e
    return text.encode("utf-8")


def _prefixes_by_uri(namespaces: dict[str, str]) -> dict[str, str]:
    prefixes: dict[str, str] = {}
    for prefix, uri in namespaces.items():
        if prefix and not is_valid_name(prefix):
            raise errors.SerializeError(f"invalid namespace prefix: {prefix!r}")
        prefixes.setdefault(uri, prefix)
    return prefixes


def _prefixed(name: str, prefixes: dict[str, str], *, attribute: bool = False) -> str:
    if not name.startswith("{"):
        return name
    uri, local = name[1:].split("}", 1)
    prefix = prefixes.get(uri)
    # Unprefixed attributes are never in a namespace, so the default
    # namespace cannot stand in for a prefix there
    if prefix is None or (attribute and not prefix):
        return name
    return f"{prefix}:{local}" if prefix else local


def _check_tag(tag: str) -> None:
    if not isinstance(tag, str) or not _is_qualified_name(tag):
        raise errors.SerializeError(f"invalid element name: {tag!r}")


def _scalar_text(key: str, node: Node) -> str:
    if not isinstance(node, Scalar):
        raise errors.SerializeError(f"{key!r} must hold a scalar, got {type(node).__name__}")
    if not isinstance(node.value, str):
        raise errors.SerializeError(
            f"{key!r} must hold text, got {type(node.value).__name__}"
        )
    if has_illegal_characters(node.value):
        raise errors.SerializeError(f"{key!r} holds characters not allowed in XML")
    return node.value


def _fill_element(element: _ET.Element, node: Node, prefixes: dict[str, str]) -> None:
    if isinstance(node, Scalar):
        element.text = _scalar_text(element.tag, node)
        return

    if not isinstance(node, Container):
        raise errors.SerializeError(
            f"{element.tag!r} cannot hold a {type(node).__name__} directly"
        )

    for key, child in node.children.items():
        if key == TEXT_KEY:
            element.text = _scalar_text(key, child)
        elif key.startswith(ATTRIBUTE_PREFIX):
            name = key[len(ATTRIBUTE_PREFIX) :]
            if not _is_qualified_name(name):
                raise errors.SerializeError(f"invalid attribute name: {name!r}")
            element.set(_prefixed(name, prefixes, attribute=True), _scalar_text(key, child))
        else:
            _append_child(element, key, child, prefixes)


def _append_child(parent: _ET.Element, tag: str, node: Node, prefixes: dict[str, str]) -> None:
    if isinstance(node, ListNode):
        for item in node.items:
            if isinstance(item, ListNode):
                raise errors.SerializeError(f"{tag!r} contains a nested list")
            _append_child(parent, tag, item, prefixes)
        return

    _check_tag(tag)
    child = _ET.SubElement(parent, _prefixed(tag, prefixes))
    _fill_element(child, node, prefixes)


def _is_qualified_name(name: str) -> bool:
    # Parsed namespaced names arrive in ElementTree's {uri}local form
    return bool(_NAME_RE.fullmatch(name) or _QUALIFIED_NAME_RE.fullmatch(name))
