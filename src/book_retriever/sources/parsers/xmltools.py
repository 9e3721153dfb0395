"""Namespace-agnostic ElementTree helpers shared by the feed parsers."""
from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Iterator


def local_name(tag: str) -> str:
    """Tag name without its ``{namespace}`` prefix."""
    return tag.rsplit("}", 1)[-1]


def children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    """Direct children whose local name is ``name``."""
    for child in element:
        if isinstance(child.tag, str) and local_name(child.tag) == name:
            yield child


def descendants(element: ET.Element, name: str) -> Iterator[ET.Element]:
    """All descendants (element excluded) whose local name is ``name``."""
    for node in element.iter():
        if node is not element and isinstance(node.tag, str) and local_name(node.tag) == name:
            yield node


def path(element: ET.Element, *names: str) -> list[ET.Element]:
    """Follow a chain of local names through direct children."""
    current = [element]
    for name in names:
        current = [child for node in current for child in children(node, name)]
    return current


def text(node: ET.Element | None) -> str | None:
    """Stripped inner text of a node, None when empty."""
    if node is None:
        return None
    value = "".join(node.itertext()).strip()
    return value or None


def texts(nodes: list[ET.Element]) -> list[str]:
    return [value for value in (text(node) for node in nodes) if value]


def first_text(nodes: list[ET.Element]) -> str | None:
    values = texts(nodes)
    return values[0] if values else None


def parse_document(source: str | bytes) -> ET.Element | None:
    """Parse an XML document, None when it is not well-formed."""
    try:
        return ET.fromstring(source)
    except ET.ParseError:
        return None
