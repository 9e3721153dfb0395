"""Book metadata sources and the pool that aggregates them."""
from __future__ import annotations

from book_retriever.sources.base import (
    BaseSource,
    BookSource,
    ConfigurableSource,
    HttpClientAware,
    IdentifierAsCriterionSource,
    IdentifierOnlySource,
    SingleCriterionSource,
    accepts_criteria,
)
from book_retriever.sources.config import (
    SourceConfiguration,
    SourceConfigurator,
    SourceSettings,
    StaticSourceConfiguration,
)
from book_retriever.sources.eyrolles import EyrollesSource
from book_retriever.sources.google_books import GoogleBooksSource
from book_retriever.sources.isbndb import ISBNdbSource
from book_retriever.sources.oclc import OclcClassifySource
from book_retriever.sources.opds_catalogs import EbooksGratuitsSource, FeedBooksSource, OpdsCatalogSource
from book_retriever.sources.openlibrary import OpenLibrarySource
from book_retriever.sources.pool import (
    PoolConfig,
    PoolSearchResult,
    SourcePool,
    SourceSearchResult,
    create_default_pool,
    default_sources,
)
from book_retriever.sources.sru_catalogs import LibraryHubSource, LibraryOfCongressSource, SruCatalogSource

__all__ = [
    # Interfaces
    "BookSource",
    "BaseSource",
    "ConfigurableSource",
    "HttpClientAware",
    "IdentifierAsCriterionSource",
    "IdentifierOnlySource",
    "SingleCriterionSource",
    "accepts_criteria",
    # Configuration
    "SourceConfiguration",
    "SourceConfigurator",
    "SourceSettings",
    "StaticSourceConfiguration",
    # Pool
    "PoolConfig",
    "PoolSearchResult",
    "SourcePool",
    "SourceSearchResult",
    "create_default_pool",
    "default_sources",
    # Adapters
    "EbooksGratuitsSource",
    "EyrollesSource",
    "FeedBooksSource",
    "GoogleBooksSource",
    "ISBNdbSource",
    "LibraryHubSource",
    "LibraryOfCongressSource",
    "OclcClassifySource",
    "OpdsCatalogSource",
    "OpenLibrarySource",
    "SruCatalogSource",
]
