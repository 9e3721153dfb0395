"""book-retriever utilities."""

from .dates import (
    ParsedDate,
    coerce_date,
    is_numeric,
    parse_date,
)

__all__ = [
    "ParsedDate",
    "coerce_date",
    "is_numeric",
    "parse_date",
]
