"""Fold loose field/value pairs into a canonical BookRecord.

Sources disagree on field names, scalar vs list values, date formats and
singular/plural conventions. ``RecordBuilder`` absorbs that: each
``with_field`` call is routed through the classification table in
``records.fields`` and applied in a fixed order, so the same mapping
always yields the same record whatever order the pairs arrive in.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

from ..models.record import BookRecord
from ..utils.dates import coerce_date, is_numeric
from .fields import (
    DATE_FIELDS,
    INTEGER_FIELDS,
    PLURAL_FIELDS,
    SINGULAR_FIELDS,
    STRING_FIELDS,
    FieldCategory,
    classify_field,
)

logger = logging.getLogger(__name__)

LIST_SEPARATOR = ", "


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _as_strings(value: Any) -> list[str]:
    return [item if isinstance(item, str) else str(item) for item in _as_list(value) if item is not None]


def _unique(values: list[Any]) -> list[Any]:
    """Drop repeated values, keeping first-seen order."""
    seen: list[Any] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


class RecordBuilder:
    """Accumulates field contributions for exactly one BookRecord.

    Example:
        builder = RecordBuilder()
        builder.with_field("title", "Dune").with_field("author", "Frank Herbert")
        record = builder.build()
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {
            "authors": [],
            "illustrators": [],
            "translators": [],
            "genres": [],
            "keywords": [],
        }
        self._additional: dict[str, set[str]] = {}
        self._handlers: dict[FieldCategory, Callable[[str, Any], bool]] = {
            FieldCategory.PLURAL: self._handle_plural,
            FieldCategory.SINGULAR: self._handle_singular,
            FieldCategory.DATE: self._handle_date,
            FieldCategory.INTEGER: self._handle_integer,
            FieldCategory.STRING: self._handle_string,
        }

    def with_field(self, field: str, value: Any) -> RecordBuilder:
        """Apply one raw (field, value) pair.

        Returns:
            The builder itself, for chaining
        """
        if isinstance(value, tuple):
            value = list(value)
        if isinstance(value, list):
            present = [item for item in value if item is not None]
            if value and not present:
                return self
            value = present
        if value is None:
            return self
        value = self._prepare(field, value)

        category = classify_field(field)
        handler = self._handlers.get(category)
        if handler is not None:
            if handler(field, value):
                return self
            if category is FieldCategory.DATE:
                logger.debug("Dropping unparseable %s value %r", field, value)
                return self

        self._append_additional(field, value)
        return self

    def build(self) -> BookRecord:
        """Return the record built so far.

        The builder's state is copied, so later ``with_field`` calls do not
        leak into a record that has already been handed out.
        """
        values = {
            key: list(value) if isinstance(value, list) else value
            for key, value in self._values.items()
        }
        additional = {key: set(items) for key, items in self._additional.items()}
        return BookRecord(**values, additional=additional)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BookRecord:
        """Build a record from a whole raw mapping at once.

        Falsy values ("", [], None, 0) are dropped before classification.
        """
        builder = cls()
        for field, value in data.items():
            if not value:
                continue
            builder.with_field(field, value)
        return builder.build()

    def _prepare(self, field: str, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        if field in STRING_FIELDS:
            return LIST_SEPARATOR.join(str(item) for item in value if item is not None)
        if len(value) == 1 and field in INTEGER_FIELDS:
            return value[0]
        return value

    def _handle_plural(self, field: str, value: Any) -> bool:
        self._values[PLURAL_FIELDS[field]] = _as_strings(value)
        return True

    def _handle_singular(self, field: str, value: Any) -> bool:
        attribute = SINGULAR_FIELDS[field]
        self._values[attribute] = _unique([*self._values[attribute], *_as_strings(value)[:1]])
        return True

    def _handle_date(self, field: str, value: Any) -> bool:
        coerced = coerce_date(value)
        if not isinstance(coerced, date):
            return False
        self._values[DATE_FIELDS[field]] = coerced
        return True

    def _handle_integer(self, field: str, value: Any) -> bool:
        if isinstance(value, list) and len(value) == 1:
            value = value[0]
        if not is_numeric(value):
            return False
        try:
            self._values[INTEGER_FIELDS[field]] = int(float(value))
        except (ValueError, OverflowError):
            return False
        return True

    def _handle_string(self, field: str, value: Any) -> bool:
        if isinstance(value, list):
            value = LIST_SEPARATOR.join(str(item) for item in value if item is not None)
        self._values[STRING_FIELDS[field]] = str(value)
        return True

    def _append_additional(self, field: str, value: Any) -> None:
        values = _as_strings(value)
        if values:
            self._additional.setdefault(field, set()).update(values)


def build_record(data: Mapping[str, Any]) -> BookRecord:
    """Shortcut for ``RecordBuilder.from_mapping``."""
    return RecordBuilder.from_mapping(data)
