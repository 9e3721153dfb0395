"""Library catalogs answering SRU searchRetrieve requests with MODS records."""
from __future__ import annotations

from collections.abc import Mapping
from typing import ClassVar

from ..models.record import BookRecord
from .base import IdentifierAsCriterionSource
from .parsers.sru import parse_sru


class SruCatalogSource(IdentifierAsCriterionSource):
    """Multi-criteria search through an SRU endpoint.

    Subclasses declare how criteria names map to CQL indexes.
    """

    CQL_INDEXES: ClassVar[dict[str, str]] = {}
    max_records: ClassVar[int] = 5

    def queryable_fields(self) -> list[str]:
        return list(self.CQL_INDEXES)

    def cql_query(self, criteria: Mapping[str, str]) -> str:
        """CQL query for the criteria this catalog can map; others are ignored."""
        clauses = []
        for field, value in criteria.items():
            index = self.CQL_INDEXES.get(field.lower())
            if index is None:
                continue
            escaped = value.replace('"', '\\"')
            clauses.append(f'{index}="{escaped}"')
        return " and ".join(clauses)

    async def search(self, criteria: dict[str, str]) -> list[BookRecord]:
        query = self.cql_query(criteria)
        if not query:
            return []
        document = await self._get_text(
            self.base_url,
            params={
                "version": "1.1",
                "operation": "searchRetrieve",
                "recordSchema": "mods",
                "maximumRecords": str(self.max_records),
                "query": query,
            },
        )
        if document is None:
            return []
        return parse_sru(document)


class LibraryOfCongressSource(SruCatalogSource):
    """The Library of Congress catalog (Z39.50/SRU gateway)."""

    code = "loc"
    label = "The Library of Congress"
    base_url = "http://lx2.loc.gov:210/lcdb"
    CQL_INDEXES = {
        "isbn": "dc.identifier",
        "ean": "dc.identifier",
        "upc": "dc.identifier",
        "lccn": "dc.identifier",
        "title": "dc.title",
        "publisher": "dc.publisher",
        "language": "dc.language",
    }


class LibraryHubSource(SruCatalogSource):
    """Jisc Library Hub Discover, the UK and Irish union catalogue (formerly COPAC)."""

    code = "library-hub"
    label = "Jisc Library Hub Discover"
    base_url = "https://discover.libraryhub.jisc.ac.uk/sru-api"
    max_records = 1
    CQL_INDEXES = {
        "isbn": "bath.isbn",
        "author": "dc.author",
        "authors": "dc.author",
        "title": "dc.title",
        "ean": "bath.isbn",
        "issn": "bath.issn",
        "publisher": "dc.publisher",
        "language": "dc.language",
    }
