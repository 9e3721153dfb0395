"""OPDS (Atom) catalog feed parsing."""
from __future__ import annotations

import logging
from typing import Any

from ...models.record import BookRecord
from ...records.builder import RecordBuilder
from .xmltools import children, first_text, parse_document, path, texts

logger = logging.getLogger(__name__)

ISBN_URN_PREFIXES = ("urn:isbn:", "isbn:")


def _strip_urn(identifier: str | None) -> str | None:
    if identifier is None:
        return None
    lowered = identifier.lower()
    for prefix in ISBN_URN_PREFIXES:
        if lowered.startswith(prefix):
            return identifier[len(prefix):]
    return identifier


def parse_atom(document: str | bytes) -> list[BookRecord]:
    """Turn an OPDS Atom feed into records, one per ``entry``.

    A feed that is not well-formed XML yields an empty list.
    """
    root = parse_document(document)
    if root is None:
        logger.debug("OPDS feed is not well-formed XML")
        return []

    entries = [root] if root.tag.endswith("entry") else list(children(root, "entry"))
    return [RecordBuilder.from_mapping(_entry_fields(entry)) for entry in entries]


def _entry_fields(entry: Any) -> dict[str, Any]:
    cover = None
    for link in children(entry, "link"):
        link_type = link.get("type", "")
        if link_type.startswith("image") and "thumbnail" not in link.get("rel", ""):
            cover = link.get("href")
            break

    return {
        "title": first_text(path(entry, "title")),
        "isbn": _strip_urn(first_text(path(entry, "identifier"))),
        "authors": texts(path(entry, "author", "name")),
        "language": first_text(path(entry, "language")),
        "publisher": first_text(path(entry, "publisher")),
        "pages": first_text(path(entry, "extent")),
        "genres": [label for label in (c.get("label") for c in children(entry, "category")) if label],
        "summary": first_text(path(entry, "summary")) or first_text(path(entry, "content")),
        "cover": cover,
        "opds_link": texts(path(entry, "id")),
        "publicationDate": first_text(path(entry, "published")) or first_text(path(entry, "issued")),
    }
