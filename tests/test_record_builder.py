"""Tests for RecordBuilder field routing."""

from datetime import date, datetime

import pytest

from book_retriever.models import BookRecord
from book_retriever.records import RecordBuilder, build_record


class TestWithField:
    def test_chaining_returns_builder(self):
        builder = RecordBuilder()
        assert builder.with_field("title", "Dune") is builder

    def test_plural_assignment_replaces(self):
        record = (
            RecordBuilder()
            .with_field("authors", ["A", "B"])
            .with_field("authors", ["C"])
            .build()
        )
        assert record.authors == ("C",)

    def test_plural_scalar_is_wrapped(self):
        record = RecordBuilder().with_field("genres", "Science fiction").build()
        assert record.genres == ("Science fiction",)

    def test_plural_keeps_values_as_given(self):
        record = RecordBuilder().with_field("keywords", ["a", "a"]).build()
        assert record.keywords == ("a", "a")

    def test_singular_accumulates_and_dedupes(self):
        builder = RecordBuilder()
        for name in ["a", "b", "a"]:
            builder.with_field("author", name)
        assert builder.build().authors == ("a", "b")

    def test_singular_after_plural_appends(self):
        record = (
            RecordBuilder()
            .with_field("authors", ["Frank Herbert"])
            .with_field("author", "Brian Herbert")
            .with_field("author", "Frank Herbert")
            .build()
        )
        assert record.authors == ("Frank Herbert", "Brian Herbert")

    def test_string_field_joins_lists(self):
        record = RecordBuilder().with_field("title", ["Dune", "Messiah"]).build()
        assert record.title == "Dune, Messiah"

    def test_string_field_stringifies(self):
        record = RecordBuilder().with_field("isbn", 9780441013593).build()
        assert record.isbn == "9780441013593"

    def test_integer_field(self):
        assert RecordBuilder().with_field("pages", "412").build().pages == 412
        assert RecordBuilder().with_field("pages", 412.7).build().pages == 412
        assert RecordBuilder().with_field("pages", ["96"]).build().pages == 96

    def test_non_numeric_pages_fall_through_to_additional(self):
        record = RecordBuilder().with_field("pages", "xii, 412 p.").build()
        assert record.pages is None
        assert record.additional == {"pages": {"xii, 412 p."}}

    def test_date_field(self):
        record = RecordBuilder().with_field("publicationDate", "13.06.2019").build()
        assert record.publication_date == datetime(2019, 6, 13)

    def test_date_value_passthrough(self):
        record = RecordBuilder().with_field("publicationDate", date(1965, 8, 1)).build()
        assert record.publication_date == date(1965, 8, 1)

    def test_unparseable_date_is_dropped(self):
        record = RecordBuilder().with_field("publicationDate", "garbage").build()
        assert record.publication_date is None
        assert record.additional == {}

    def test_unknown_field_goes_to_additional(self):
        record = (
            RecordBuilder()
            .with_field("publisher", "Chilton")
            .with_field("publisher", ["Ace", "Chilton"])
            .build()
        )
        assert record.additional == {"publisher": {"Chilton", "Ace"}}

    def test_additional_values_are_strings(self):
        record = RecordBuilder().with_field("holdings", 1234).build()
        assert record.additional == {"holdings": {"1234"}}

    def test_none_values_are_ignored(self):
        record = (
            RecordBuilder()
            .with_field("title", "Dune")
            .with_field("title", None)
            .with_field("isbn", ["978", None])
            .with_field("author", None)
            .with_field("publisher", [None])
            .build()
        )
        assert record.title == "Dune"
        assert record.isbn == "978"
        assert record.authors == ()
        assert record.additional == {}

    def test_tuple_values_are_lists(self):
        record = RecordBuilder().with_field("authors", ("a", "b")).build()
        assert record.authors == ("a", "b")


class TestBuild:
    def test_empty_builder_gives_empty_record(self):
        record = RecordBuilder().build()
        assert record == BookRecord()
        assert record.is_empty()

    def test_built_record_is_isolated_from_builder(self):
        builder = RecordBuilder().with_field("author", "a").with_field("publisher", "P")
        first = builder.build()
        builder.with_field("author", "b").with_field("publisher", "Q")

        assert first.authors == ("a",)
        assert first.additional == {"publisher": {"P"}}
        assert builder.build().authors == ("a", "b")


class TestFromMapping:
    def test_full_mapping(self):
        record = RecordBuilder.from_mapping({
            "title": "Dune",
            "authors": ["Frank Herbert"],
            "pages": "412",
            "isbn": "9780441013593",
            "publicationDate": "1965",
            "publisher": "Chilton Books",
            "genre": "Science fiction",
        })
        assert record.title == "Dune"
        assert record.authors == ("Frank Herbert",)
        assert record.pages == 412
        assert record.isbn == "9780441013593"
        assert record.publication_date == datetime(1965, 1, 1)
        assert record.genres == ("Science fiction",)
        assert record.additional == {"publisher": {"Chilton Books"}}

    @pytest.mark.parametrize("value", ["", [], None, 0, False])
    def test_falsy_values_are_dropped(self, value):
        record = RecordBuilder.from_mapping({"title": value, "publisher": value, "pages": value})
        assert record == BookRecord()

    def test_never_raises_on_odd_values(self):
        record = RecordBuilder.from_mapping({
            "pages": {"nested": True},
            "publicationDate": ["not", "a", "date"],
            "authors": [None, 3, "x"],
            "cover": ["http://a", "http://b"],
        })
        assert record.authors == ("3", "x")
        assert record.cover == "http://a, http://b"
        assert record.publication_date is None
        assert record.additional == {"pages": {"{'nested': True}"}}

    def test_same_mapping_same_record(self):
        data = {"title": "Dune", "author": "Frank Herbert", "publisher": "Ace"}
        assert build_record(data) == build_record(dict(data))
