"""Eyrolles bookshop (HTML scraping)."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any
from urllib.parse import quote

from bs4 import BeautifulSoup

from ..models.record import BookRecord
from ..records.builder import RecordBuilder
from .base import IdentifierOnlySource
from .parsers.html import inner_text, itemprop, meta_content, parse_html, two_cell_rows

logger = logging.getLogger(__name__)


class EyrollesSource(IdentifierOnlySource):
    """Eyrolles product pages.

    The search URL redirects to the product page when the ISBN is known and
    answers 404 otherwise.
    """

    code = "eyrolles"
    label = "Eyrolles (HTML)"
    base_url = "https://www.eyrolles.com"
    search_pattern = "https://www.eyrolles.com/Accueil/Livre/{isbn}/"

    async def search_by_identifier(self, identifier: str) -> list[BookRecord]:
        resp = await self._get(self.search_pattern.format(isbn=quote(identifier)), follow_redirects=False)
        if resp.status_code == 404:
            return []
        location = resp.headers.get("location")
        if not location:
            return []

        url = location if location.startswith("http") else f"{self.base_url}{location}"
        page = await self._get_text(url)
        if page is None:
            return []

        fields = self.parse_product_page(page)
        if fields is None:
            return []
        return [RecordBuilder.from_mapping(fields)]

    def parse_product_page(self, page: str) -> dict[str, Any] | None:
        """Raw fields of a product page, None when it is not a product page."""
        soup = parse_html(page)
        header = soup.find("h1")
        if header is None:
            return None

        table = two_cell_rows(soup)
        subtitle = itemprop(soup, "alternativeHeadline", "h2")
        description = itemprop(soup, "about", "div")
        return {
            "eyrolles_link": meta_content(soup, "og:url"),
            "cover": meta_content(soup, "og:image"),
            "title": inner_text(header),
            "subtitle": inner_text(subtitle),
            "publisher": table.get("Éditeur(s)"),
            "authors": self._authors(soup),
            "pages": table.get("Nb. de pages"),
            "dimension": table.get("Format"),
            "format": table.get("Couverture"),
            "weight": table.get("Poids"),
            "isbn": table.get("EAN13"),
            "collection": table.get("Collection"),
            "publicationDate": self._publication(table.get("Parution")),
            "description": inner_text(description),
        }

    def _authors(self, soup: BeautifulSoup) -> list[str]:
        node = itemprop(soup, "author", "span")
        if node is None:
            return []
        names = [name for name in (inner_text(span) for span in node.find_all("span")) if name]
        if names:
            return names
        whole = inner_text(node)
        return [whole] if whole else []

    def _publication(self, value: str | None) -> datetime | None:
        if not value:
            return None
        try:
            return datetime.strptime(value.strip(), "%d/%m/%Y")
        except ValueError:
            return None
