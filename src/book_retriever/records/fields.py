"""Classification table for raw field names.

Every source adapter hands over a loose mapping of field name to value.
The table below decides, for each name, which canonical attribute it
feeds. Names that are not listed fall into the ``additional`` bag.
"""

from __future__ import annotations

from enum import Enum


class FieldCategory(str, Enum):
    """How a raw field is folded into a record."""

    PLURAL = "plural"  # direct assignment to a list attribute
    SINGULAR = "singular"  # append-and-dedupe into the matching list attribute
    DATE = "date"
    INTEGER = "integer"
    STRING = "string"
    ADDITIONAL = "additional"


# Raw field name -> BookRecord attribute
PLURAL_FIELDS: dict[str, str] = {
    "authors": "authors",
    "illustrators": "illustrators",
    "translators": "translators",
    "genres": "genres",
    "keywords": "keywords",
}

SINGULAR_FIELDS: dict[str, str] = {
    "author": "authors",
    "illustrator": "illustrators",
    "translator": "translators",
    "genre": "genres",
    "keyword": "keywords",
}

DATE_FIELDS: dict[str, str] = {
    "publicationDate": "publication_date",
}

INTEGER_FIELDS: dict[str, str] = {
    "pages": "pages",
}

STRING_FIELDS: dict[str, str] = {
    "isbn": "isbn",
    "title": "title",
    "series": "series",
    "format": "format",
    "dimension": "dimension",
    "cover": "cover",
}

FIELD_CATEGORIES: dict[str, FieldCategory] = {
    **{name: FieldCategory.PLURAL for name in PLURAL_FIELDS},
    **{name: FieldCategory.SINGULAR for name in SINGULAR_FIELDS},
    **{name: FieldCategory.DATE for name in DATE_FIELDS},
    **{name: FieldCategory.INTEGER for name in INTEGER_FIELDS},
    **{name: FieldCategory.STRING for name in STRING_FIELDS},
}

ATTRIBUTES: dict[str, str] = {
    **PLURAL_FIELDS,
    **SINGULAR_FIELDS,
    **DATE_FIELDS,
    **INTEGER_FIELDS,
    **STRING_FIELDS,
}


def classify_field(name: str) -> FieldCategory:
    """Return the category of a raw field name.

    Matching is exact and case-sensitive; unknown names are ADDITIONAL.
    """
    return FIELD_CATEGORIES.get(name, FieldCategory.ADDITIONAL)


def attribute_for(name: str) -> str | None:
    """Return the BookRecord attribute a raw field name feeds, if any."""
    return ATTRIBUTES.get(name)
