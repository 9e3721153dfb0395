"""Sources backed by OPDS (Atom) catalog search feeds."""
from __future__ import annotations

from abc import abstractmethod
from typing import Any
from urllib.parse import quote_plus

from ..models.record import BookRecord
from .base import IdentifierOnlySource
from .parsers.opds import parse_atom


class OpdsCatalogSource(IdentifierOnlySource):
    """ISBN lookup through an OPDS catalog search feed."""

    async def search_by_identifier(self, identifier: str) -> list[BookRecord]:
        document = await self._get_text(self.search_url(identifier))
        if document is None:
            return []
        return parse_atom(document)

    @abstractmethod
    def search_url(self, isbn: str) -> str:
        """Feed URL answering a search for ``isbn``."""


class FeedBooksSource(OpdsCatalogSource):
    """FeedBooks catalog; the ``language`` parameter narrows the search."""

    code = "feedbooks"
    label = "FeedBooks"
    base_url = "https://www.feedbooks.com/search.atom"

    def __init__(self, language: str = "en", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.language = language

    def configure(self, parameters: dict[str, str]) -> None:
        self.language = parameters.get("language") or "en"

    def search_url(self, isbn: str) -> str:
        return f"{self.base_url}?lang={quote_plus(self.language)}&query={quote_plus(isbn)}"


class EbooksGratuitsSource(OpdsCatalogSource):
    """EbooksGratuits free French ebooks catalog."""

    code = "ebooksgratuits"
    label = "EbooksGratuits"
    base_url = "https://www.ebooksgratuits.com/opds/feed.php"

    def search_url(self, isbn: str) -> str:
        return f"{self.base_url}?mode=search&query={quote_plus(isbn)}"
