"""
Visibility, attribute and doc comment normalization.

tree-sitter-rust places outer attributes (``#[...]``) and doc comments
(``///``, ``/** */``) as siblings *before* the item they decorate, so they are
gathered into an ``ItemPrelude`` while walking a declaration list and handed
to the classifier together with the item node.
"""

import re
from dataclasses import dataclass, field
from typing import Iterator

from tree_sitter import Node

from .types import Visibility


_PATH_RE = re.compile(r"^(::)?[A-Za-z_][A-Za-z0-9_]*(::[A-Za-z_][A-Za-z0-9_]*)*$")
_DOC_ATTR_RE = re.compile(r'^doc\s*=\s*r?#*"(?P<text>.*)"#*$', re.DOTALL)

COMMENT_TYPES = ("line_comment", "block_comment")


def node_text(node: Node | None) -> str:
    """Source text of a node ('' for missing nodes)."""
    if node is None or not node.text:
        return ""
    return node.text.decode("utf-8")


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces."""
    return " ".join(text.split())


def normalized_text(node: Node | None) -> str:
    return normalize_whitespace(node_text(node))


@dataclass
class ItemPrelude:
    """Outer attributes and doc lines that precede an item, in source order."""

    attributes: list[Node] = field(default_factory=list)
    docs: list[str] = field(default_factory=list)


def outer_doc_text(comment: Node) -> str | None:
    """Doc text of an outer doc comment, or None for a plain comment."""
    text = node_text(comment).rstrip("\r\n")
    if comment.type == "line_comment":
        if text.startswith("///") and not text.startswith("////"):
            return text[3:].strip()
        return None
    if text.startswith("/**") and not text.startswith("/***") and text != "/**/":
        return text[3:-2].strip()
    return None


def inner_doc_text(comment: Node) -> str | None:
    """Doc text of an inner doc comment (``//!`` or ``/*! */``)."""
    text = node_text(comment).rstrip("\r\n")
    if comment.type == "line_comment" and text.startswith("//!"):
        return text[3:].strip()
    if comment.type == "block_comment" and text.startswith("/*!"):
        return text[3:-2].strip()
    return None


def walk_items(nodes: list[Node]) -> Iterator[tuple[Node, ItemPrelude]]:
    """Yield each item node of a declaration list with its prelude.

    Attributes and doc comments accumulate until the next item; plain
    comments are skipped without resetting the prelude. Inner attributes and
    inner doc comments belong to the enclosing scope and are skipped.
    """
    prelude = ItemPrelude()
    for child in nodes:
        if not child.is_named:
            continue
        if child.type == "attribute_item":
            prelude.attributes.append(child)
            doc = _doc_attribute_text(child)
            if doc is not None:
                prelude.docs.append(doc)
        elif child.type in COMMENT_TYPES:
            doc = outer_doc_text(child)
            if doc is not None:
                prelude.docs.append(doc)
        elif child.type == "inner_attribute_item":
            continue
        else:
            yield child, prelude
            prelude = ItemPrelude()


def inner_docs(nodes: list[Node]) -> list[str]:
    """Inner doc lines (``//!``, ``#![doc = ..]``) found in a declaration list."""
    docs: list[str] = []
    for child in nodes:
        if child.type in COMMENT_TYPES:
            doc = inner_doc_text(child)
            if doc is not None:
                docs.append(doc)
        elif child.type == "inner_attribute_item":
            doc = _doc_attribute_text(child)
            if doc is not None:
                docs.append(doc)
    return docs


def join_docs(lines: list[str]) -> str | None:
    return "\n".join(lines) if lines else None


# ==================== Visibility ====================


def parse_visibility(node: Node) -> Visibility:
    """Visibility of an item, field or variant node."""
    for child in node.children:
        if child.type == "visibility_modifier":
            return visibility_from_text(node_text(child))
    return Visibility.PRIVATE


def visibility_from_text(text: str) -> Visibility:
    compact = "".join(text.split())
    if compact == "pub":
        return Visibility.PUBLIC
    if compact == "crate":
        # Pre-2018 `crate fn` shorthand
        return Visibility.CRATE
    if not (compact.startswith("pub(") and compact.endswith(")")):
        return Visibility.PRIVATE

    scope = compact[4:-1]
    if scope.startswith("in") and scope[2:] in ("crate", "super", "self"):
        scope = scope[2:]
    if scope == "crate":
        return Visibility.CRATE
    if scope == "super":
        return Visibility.SUPER
    if scope == "self":
        return Visibility.SELF_ONLY
    return Visibility.PRIVATE


# ==================== Attributes ====================


def _attribute_node(attr_item: Node) -> Node | None:
    for child in attr_item.named_children:
        if child.type == "attribute":
            return child
    return None


def attribute_path(attr_item: Node) -> str:
    """Path of an attribute (``derive``, ``cfg``, ``tokio::test``)."""
    attr = _attribute_node(attr_item)
    if attr is None:
        return ""
    for child in attr.named_children:
        return "".join(node_text(child).split())
    return ""


def attribute_body(attr_item: Node) -> str:
    """Attribute text without the surrounding ``#[`` ``]``."""
    attr = _attribute_node(attr_item)
    if attr is not None:
        return normalized_text(attr)
    text = node_text(attr_item)
    # Fall back to stripping the delimiters by hand
    if text.startswith("#[") and text.endswith("]"):
        return normalize_whitespace(text[2:-1])
    if text.startswith("#![") and text.endswith("]"):
        return normalize_whitespace(text[3:-1])
    return normalize_whitespace(text)


def _doc_attribute_text(attr_item: Node) -> str | None:
    if attribute_path(attr_item) != "doc":
        return None
    match = _DOC_ATTR_RE.match(attribute_body(attr_item))
    if match is None:
        return None
    return match.group("text").replace('\\"', '"').strip()


def extract_attributes(prelude: ItemPrelude) -> list[str]:
    """Attribute texts other than ``doc`` and ``derive``."""
    return [
        attribute_body(attr)
        for attr in prelude.attributes
        if attribute_path(attr) not in ("doc", "derive")
    ]


def extract_derives(prelude: ItemPrelude) -> list[str]:
    """Trait names listed in ``#[derive(...)]`` attributes.

    An attribute whose argument list cannot be read as comma separated paths
    contributes nothing; other derive attributes are unaffected.
    """
    derives: list[str] = []
    for attr_item in prelude.attributes:
        if attribute_path(attr_item) != "derive":
            continue
        derives.extend(parse_derive_arguments(_attribute_arguments(attr_item)))
    return derives


def _attribute_arguments(attr_item: Node) -> str | None:
    attr = _attribute_node(attr_item)
    if attr is None:
        return None
    arguments = attr.child_by_field_name("arguments")
    if arguments is None:
        return None
    return node_text(arguments)


def parse_derive_arguments(arguments: str | None) -> list[str]:
    """Parse ``(A, b::C)`` into ``["A", "b::C"]``; malformed input gives ``[]``."""
    if arguments is None:
        return []
    text = arguments.strip()
    if not (text.startswith("(") and text.endswith(")")):
        return []

    parts = [part.strip() for part in text[1:-1].split(",")]
    # A single trailing comma is allowed
    if parts and parts[-1] == "" and len(parts) > 1:
        parts.pop()

    names: list[str] = []
    for part in parts:
        compact = "".join(part.split())
        if not _PATH_RE.match(compact):
            return []
        names.append(compact)
    return names
