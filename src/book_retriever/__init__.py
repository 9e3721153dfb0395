"""Book Retriever - bibliographic metadata lookup.

Queries several book metadata sources (library catalogs, bookshops, ebook
feeds, web APIs), normalizes what they return into canonical book records
and merges the answers.
"""

__version__ = "0.3.0"

# Lazy imports to avoid circular dependencies
def __getattr__(name: str):
    if name == "BookRecord":
        from book_retriever.models import BookRecord
        return BookRecord
    if name == "RecordBuilder":
        from book_retriever.records import RecordBuilder
        return RecordBuilder
    if name == "SourcePool":
        from book_retriever.sources import SourcePool
        return SourcePool
    if name == "sources":
        from book_retriever import sources
        return sources
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
