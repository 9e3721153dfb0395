"""Google Books volumes API source."""
from __future__ import annotations

import logging
from typing import Any

from ..models.record import BookRecord
from ..records.builder import RecordBuilder
from .base import IdentifierOnlySource

logger = logging.getLogger(__name__)


class GoogleBooksSource(IdentifierOnlySource):
    """Google Books (volumes API, ISBN lookup).

    Works without credentials; an ``api_key`` parameter raises the quota.
    """

    code = "google-books"
    label = "Google Books"
    base_url = "https://www.googleapis.com/books/v1/volumes"

    def __init__(self, api_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key

    def configure(self, parameters: dict[str, str]) -> None:
        self.api_key = parameters.get("api_key") or self.api_key

    async def search_by_identifier(self, identifier: str) -> list[BookRecord]:
        params = {"q": f"isbn:{identifier.replace('-', '')}"}
        if self.api_key:
            params["key"] = self.api_key

        data = await self._get_json(self.base_url, params=params)
        if not isinstance(data, dict):
            return []

        return [
            RecordBuilder.from_mapping(self._normalize(item))
            for item in data.get("items") or []
            if isinstance(item, dict)
        ]

    def _normalize(self, item: dict[str, Any]) -> dict[str, Any]:
        volume = item.get("volumeInfo") or {}
        identifiers = {
            entry.get("type"): entry.get("identifier")
            for entry in volume.get("industryIdentifiers") or []
            if isinstance(entry, dict)
        }
        images = volume.get("imageLinks") or {}
        return {
            "googlebooks_link": item.get("selfLink"),
            "title": volume.get("title"),
            "subtitle": volume.get("subtitle"),
            "authors": volume.get("authors"),
            "publisher": volume.get("publisher"),
            "description": volume.get("description"),
            "pages": volume.get("pageCount"),
            "genres": volume.get("categories"),
            "cover": images.get("extraLarge") or images.get("large") or images.get("thumbnail"),
            "language": volume.get("language"),
            "publicationDate": volume.get("publishedDate"),
            "isbn": identifiers.get("ISBN_13") or identifiers.get("ISBN_10"),
        }
