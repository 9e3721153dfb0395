"""Open Library Books API source."""
from __future__ import annotations

import logging
from typing import Any

from ..errors import UnsupportedCriterionError
from ..models.record import BookRecord
from ..records.builder import RecordBuilder
from .base import IdentifierAsCriterionSource, SingleCriterionSource

logger = logging.getLogger(__name__)

# Criterion name -> Open Library bibkey prefix
BIBKEY_TYPES: dict[str, str] = {
    "isbn": "ISBN",
    "ean": "ISBN",
    "olid": "OLID",
    "oclc": "OCLC",
    "lccn": "LCCN",
}


def _names(items: list[dict[str, Any]] | None) -> list[str]:
    return [item["name"] for item in items or [] if isinstance(item, dict) and item.get("name")]


class OpenLibrarySource(SingleCriterionSource, IdentifierAsCriterionSource):
    """Open Library Books API.

    Looks up one identifier at a time (ISBN, OLID, OCLC or LCCN number).
    """

    code = "open-library"
    label = "Open Library Books"
    base_url = "https://openlibrary.org/api/books"

    def queryable_fields(self) -> list[str]:
        return list(BIBKEY_TYPES)

    async def search_one(self, field: str, value: str) -> list[BookRecord]:
        bibkey_type = BIBKEY_TYPES.get(field.lower())
        if bibkey_type is None:
            raise UnsupportedCriterionError(self.code, field)

        data = await self._get_json(
            self.base_url,
            params={"bibkeys": f"{bibkey_type}:{value}", "format": "json", "jscmd": "data"},
        )
        if not isinstance(data, dict) or not data:
            return []

        return [
            RecordBuilder.from_mapping(self._normalize(book))
            for book in data.values()
            if isinstance(book, dict)
        ]

    def _normalize(self, book: dict[str, Any]) -> dict[str, Any]:
        identifiers = book.get("identifiers") or {}
        return {
            "publisher": _names(book.get("publishers")),
            "isbn": identifiers.get("isbn_13") or identifiers.get("isbn_10"),
            "google_id": identifiers.get("google"),
            "lccn_id": identifiers.get("lccn"),
            "amazon_id": identifiers.get("amazon"),
            "oclc_id": identifiers.get("oclc"),
            "librarything_id": identifiers.get("librarything"),
            "project_gutenberg_id": identifiers.get("project_gutenberg"),
            "goodreads_id": identifiers.get("goodreads"),
            "openlibrary_id": identifiers.get("openlibrary"),
            "links": [link.get("url") for link in book.get("links") or [] if isinstance(link, dict) and link.get("url")],
            "weight": book.get("weight"),
            "title": book.get("title"),
            "subtitle": book.get("subtitle"),
            "openlibrary_link": book.get("url"),
            "pages": book.get("number_of_pages"),
            "cover": (book.get("cover") or {}).get("large"),
            "genres": _names(book.get("subjects")),
            "authors": _names(book.get("authors")),
            "publicationDate": book.get("publish_date"),
        }
