"""OCLC Classify source."""
from __future__ import annotations

import logging
from typing import Any

from ..models.record import BookRecord
from ..records.builder import RecordBuilder
from .base import IdentifierAsCriterionSource, single_criterion
from .parsers.xmltools import descendants, parse_document

logger = logging.getLogger(__name__)

AUTHOR_SEPARATOR = " | "


def split_contributors(author_attribute: str) -> dict[str, list[str]]:
    """Split a Classify ``author`` attribute into authors, illustrators and translators.

    Classify joins contributors with " | " and tags roles in brackets, e.g.
    ``Verne, Jules, 1828-1905 [Author] | Neuville, Alphonse de [Illustrator]``.
    """
    names = [name.strip() for name in author_attribute.split(AUTHOR_SEPARATOR) if name.strip()]
    return {
        "authors": [
            name for name in names
            if ("Illustrator" not in name and "Translator" not in name) or "Author" in name
        ],
        "illustrators": [name for name in names if "Illustrator" in name],
        "translators": [name for name in names if "Translator" in name],
    }


def parse_classify(document: str | bytes) -> list[BookRecord]:
    """One record per ``work`` element of a Classify response."""
    root = parse_document(document)
    if root is None:
        logger.debug("Classify response is not well-formed XML")
        return []

    records = []
    for work in descendants(root, "work"):
        fields: dict[str, Any] = split_contributors(work.get("author", ""))
        fields.update({
            "format": work.get("format"),
            "title": work.get("title"),
            "oclc_work_id": work.get("owi"),
            "holdings": work.get("holdings"),
            "editions": work.get("editions"),
        })
        records.append(RecordBuilder.from_mapping(fields))
    return records


class OclcClassifySource(IdentifierAsCriterionSource):
    """Online Computer Library Center Classify service."""

    code = "oclc"
    label = "Online Computer Library Center"
    base_url = "http://classify.oclc.org/classify2/Classify"

    def queryable_fields(self) -> list[str]:
        return ["isbn", "ean", "oclc", "author", "title"]

    async def search(self, criteria: dict[str, str]) -> list[BookRecord]:
        if not criteria:
            return []
        params: dict[str, str] = {"summary": "true"}
        pair = single_criterion(criteria)
        if pair is not None:
            field, value = pair[0].lower(), pair[1]
            params["isbn" if field == "ean" else field] = value
        else:
            params.update({field.lower(): value for field, value in criteria.items()})

        document = await self._get_text(self.base_url, params=params)
        if document is None:
            return []
        return parse_classify(document)
