"""ISBNdb API source (requires an API key)."""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from ..errors import MissingParameterError
from ..models.record import BookRecord
from ..records.builder import RecordBuilder
from .base import IdentifierOnlySource

logger = logging.getLogger(__name__)


class ISBNdbSource(IdentifierOnlySource):
    """ISBNdb, ISBN/EAN lookup only."""

    code = "isbndb"
    label = "ISBNdb"
    base_url = "https://api2.isbndb.com/book/"
    required_parameters = ("api_key",)

    def __init__(self, api_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key

    def configure(self, parameters: dict[str, str]) -> None:
        MissingParameterError.raise_if_missing(
            self,
            {"api_key": parameters.get("api_key")},
            "Get a key at https://isbndb.com/isbn-database",
        )
        self.api_key = parameters["api_key"]

    async def search_by_identifier(self, identifier: str) -> list[BookRecord]:
        MissingParameterError.raise_if_missing(self, {"api_key": self.api_key})

        data = await self._get_json(
            f"{self.base_url}{quote(identifier)}",
            headers={"Authorization": self.api_key or ""},
        )
        book = data.get("book") if isinstance(data, dict) else None
        if not isinstance(book, dict) or not book:
            return []

        return [RecordBuilder.from_mapping({
            "publisher": book.get("publisher"),
            "language": book.get("language"),
            "title": book.get("title_long") or book.get("title"),
            "isbn": book.get("isbn13"),
            "authors": book.get("authors") or [],
            "dimension": book.get("dimensions"),
            "pages": book.get("pages"),
            "binding": book.get("binding"),
            "cover": book.get("image"),
            "keywords": book.get("subjects") or [],
            "publicationDate": book.get("date_published"),
        })]
