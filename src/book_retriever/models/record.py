"""Canonical book record model."""
from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class BookRecord(BaseModel):
    """One book found by a source, normalized to the canonical shape.

    Records are produced by ``RecordBuilder`` and are frozen once built,
    collections included: list attributes are tuples and ``additional`` is
    a read-only mapping of frozensets.
    Equality is structural: two records are equal when every canonical
    attribute, ``additional`` included, holds the same value.
    """

    model_config = ConfigDict(frozen=True)

    isbn: str | None = Field(default=None)
    title: str | None = Field(default=None)
    authors: tuple[str, ...] = Field(default=())
    pages: int | None = Field(default=None)
    series: str | None = Field(default=None)
    illustrators: tuple[str, ...] = Field(default=())
    translators: tuple[str, ...] = Field(default=())
    genres: tuple[str, ...] = Field(default=())
    keywords: tuple[str, ...] = Field(default=())
    publication_date: datetime | date | None = Field(default=None)
    format: str | None = Field(default=None)
    dimension: str | None = Field(default=None)
    cover: str | None = Field(default=None, description="Cover image URL")
    additional: Mapping[str, frozenset[str]] = Field(
        default_factory=dict,
        validate_default=True,
        description="Any field the classifier does not recognize",
    )

    @field_validator("additional", mode="after")
    @classmethod
    def _freeze_additional(cls, additional: Mapping[str, frozenset[str]]) -> Mapping[str, frozenset[str]]:
        return MappingProxyType(dict(additional))

    @field_serializer("additional")
    def _serialize_additional(self, additional: Mapping[str, frozenset[str]]) -> dict[str, list[str]]:
        return {key: sorted(values) for key, values in additional.items()}

    def is_empty(self) -> bool:
        """True when no attribute carries a value."""
        return not any(getattr(self, name) for name in type(self).model_fields)
