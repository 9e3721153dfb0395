"""Tests for the SourcePool aggregator."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from book_retriever.errors import MissingParameterError, SourceQueryError
from book_retriever.models import BookRecord
from book_retriever.sources.base import BookSource, IdentifierOnlySource, SingleCriterionSource
from book_retriever.sources.config import SourceSettings, StaticSourceConfiguration
from book_retriever.sources.isbndb import ISBNdbSource
from book_retriever.sources.openlibrary import OpenLibrarySource
from book_retriever.sources.pool import (
    PoolConfig,
    SourcePool,
    create_default_pool,
    deduplicate,
    default_sources,
)

A = BookRecord(title="A")
B = BookRecord(title="B")
C = BookRecord(title="C")


class FakeSource:
    """In-memory source answering every query with the same records."""

    def __init__(self, code, records=(), fields=("isbn",), delay=0.0, error=None):
        self.code = code
        self.label = code.upper()
        self.records = list(records)
        self.fields = list(fields)
        self.delay = delay
        self.error = error
        self.calls = []
        self.closed = False

    async def _answer(self, query):
        self.calls.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.records)

    async def search(self, criteria):
        return await self._answer(criteria)

    async def search_by_identifier(self, identifier):
        return await self._answer(identifier)

    def queryable_fields(self):
        return list(self.fields)

    async def close(self):
        self.closed = True


class ConfigurableFakeSource(FakeSource):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.configured_with = []

    def configure(self, parameters):
        self.configured_with.append(parameters)


def _configuration(**active):
    return StaticSourceConfiguration(
        sources={code: SourceSettings(active=flag) for code, flag in active.items()}
    )


@pytest.fixture
def s1():
    return FakeSource("s1", [A, A, B], fields=("isbn", "title"))


@pytest.fixture
def s2():
    return FakeSource("s2", [A, C], fields=("title", "author"))


class TestMerge:
    @pytest.mark.asyncio
    async def test_dedupes_within_source_and_concatenates(self, s1, s2):
        pool = SourcePool([s1, s2], StaticSourceConfiguration())
        assert await pool.search_by_identifier("9780441013593") == [A, B, A, C]

    @pytest.mark.asyncio
    async def test_search_with_criteria(self, s1, s2):
        pool = SourcePool([s1, s2], StaticSourceConfiguration())
        assert await pool.search({"title": "Dune"}) == [A, B, A, C]
        assert s1.calls == [{"title": "Dune"}]

    @pytest.mark.asyncio
    async def test_sequential_matches_parallel(self, s1, s2):
        pool = SourcePool([s1, s2], StaticSourceConfiguration(), PoolConfig(parallel=False))
        assert await pool.search_by_identifier("x") == [A, B, A, C]

    @pytest.mark.asyncio
    async def test_order_follows_configuration_not_completion(self):
        slow = FakeSource("slow", [A], delay=0.05)
        fast = FakeSource("fast", [C])
        pool = SourcePool([slow, fast], StaticSourceConfiguration())
        assert await pool.search_by_identifier("x") == [A, C]

    @pytest.mark.asyncio
    async def test_deduplication_can_be_disabled(self, s1):
        pool = SourcePool([s1], StaticSourceConfiguration(), PoolConfig(deduplicate=False))
        assert await pool.search_by_identifier("x") == [A, A, B]

    @pytest.mark.asyncio
    async def test_no_sources(self):
        pool = SourcePool([], StaticSourceConfiguration())
        assert await pool.search_by_identifier("x") == []
        assert pool.queryable_fields() == []

    def test_deduplicate_keeps_first_occurrence(self):
        assert deduplicate([B, A, B, C, A]) == [B, A, C]


class TestActivation:
    @pytest.mark.asyncio
    async def test_inactive_source_is_not_queried(self, s1, s2):
        pool = SourcePool([s1, s2], _configuration(s2=False))
        assert await pool.search_by_identifier("x") == [A, B]
        assert s2.calls == []

    def test_queryable_fields_union_of_active_sources(self, s1, s2):
        pool = SourcePool([s1, s2], StaticSourceConfiguration())
        assert pool.queryable_fields() == ["isbn", "title", "author"]

        pool = SourcePool([s1, s2], _configuration(s2=False))
        assert pool.queryable_fields() == ["isbn", "title"]

    def test_active_sources_is_lazy_and_ordered(self, s1, s2):
        pool = SourcePool([s1, s2], StaticSourceConfiguration())
        active = pool.active_sources()
        assert next(active) is s1
        assert next(active) is s2
        with pytest.raises(StopIteration):
            next(active)

    def test_pool_identity(self):
        pool = SourcePool([], StaticSourceConfiguration())
        assert pool.code == "__pool__"
        assert pool.label == "__pool__"
        assert isinstance(pool, BookSource)


class TestFailureIsolation:
    @pytest.mark.asyncio
    async def test_raising_source_contributes_nothing(self, s2):
        broken = FakeSource("broken", error=RuntimeError("boom"))
        other = FakeSource("other", [C])
        pool = SourcePool([broken, other], StaticSourceConfiguration())

        result = await pool.search_by_identifier_detailed("x")
        assert result.results == [C]
        assert result.sources_failed == ["broken"]
        assert result.sources_searched == ["other"]
        assert result.by_source["broken"].error == "boom"
        assert result.by_source["broken"].error_type == "RuntimeError"

    @pytest.mark.asyncio
    async def test_timed_out_source_contributes_nothing(self):
        slow = FakeSource("slow", [A], delay=1.0)
        other = FakeSource("other", [C])
        pool = SourcePool([slow, other], StaticSourceConfiguration(), PoolConfig(timeout_per_source=0.01))

        result = await pool.search_by_identifier_detailed("x")
        assert result.results == [C]
        assert result.failures == {"slow": "timeout"}
        assert result.by_source["slow"].error_type == "timeout"

    @pytest.mark.asyncio
    async def test_non_list_answer_is_a_failure(self):
        odd = FakeSource("odd")
        odd.search_by_identifier = AsyncMock(return_value=None)
        pool = SourcePool([odd, FakeSource("other", [C])], StaticSourceConfiguration())

        result = await pool.search_by_identifier_detailed("x")
        assert result.results == [C]
        assert result.sources_failed == ["odd"]
        assert result.by_source["odd"].error_type == "TypeError"

    @pytest.mark.asyncio
    async def test_raise_on_failure(self):
        broken = FakeSource("broken", error=RuntimeError("boom"))
        other = FakeSource("other", [C])
        pool = SourcePool([broken, other], StaticSourceConfiguration(), PoolConfig(raise_on_failure=True))

        with pytest.raises(SourceQueryError) as exc_info:
            await pool.search_by_identifier("x")
        assert exc_info.value.failures == {"broken": "boom"}
        assert other.calls == ["x"]

    @pytest.mark.asyncio
    async def test_missing_parameter_propagates(self):
        pool = SourcePool([ISBNdbSource(), FakeSource("other", [C])], StaticSourceConfiguration())
        with patch.object(ISBNdbSource, "_get", new_callable=AsyncMock) as mock_get:
            with pytest.raises(MissingParameterError):
                await pool.search_by_identifier("9780441013593")
            mock_get.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_parameter_stops_before_any_query(self):
        first = FakeSource("first", [A])
        pool = SourcePool([first, ISBNdbSource()], StaticSourceConfiguration())

        with pytest.raises(MissingParameterError) as exc_info:
            await pool.search_by_identifier("9780441013593")
        assert exc_info.value.parameters == ["api_key"]
        assert first.calls == []


class TestCapabilities:
    @pytest.mark.asyncio
    async def test_multi_criteria_skip_single_criterion_sources(self):
        class OneField(SingleCriterionSource):
            code = "one-field"

            def queryable_fields(self):
                return ["isbn"]

            async def search_by_identifier(self, identifier):
                return []

            search_one = AsyncMock(return_value=[A])

        class IsbnOnly(IdentifierOnlySource):
            code = "isbn-only"
            search_by_identifier = AsyncMock(return_value=[B])

        multi = FakeSource("multi", [C])
        pool = SourcePool([OneField(), IsbnOnly(), multi], StaticSourceConfiguration())

        result = await pool.search_detailed({"title": "Dune", "author": "Herbert"})
        assert result.results == [C]
        assert result.sources_searched == ["multi"]
        assert result.sources_failed == []
        OneField.search_one.assert_not_called()
        IsbnOnly.search_by_identifier.assert_not_called()

        result = await pool.search_detailed({"isbn": "9780441013593"})
        assert result.results == [A, B, C]

    @pytest.mark.asyncio
    async def test_undeclared_field_skips_single_criterion_source(self):
        other = FakeSource("other", [C], fields=("title",))
        pool = SourcePool(
            [OpenLibrarySource(), other],
            StaticSourceConfiguration(),
            PoolConfig(raise_on_failure=True),
        )

        result = await pool.search_detailed({"title": "Dune"})
        assert result.results == [C]
        assert result.sources_failed == []
        assert result.by_source["open-library"].skipped


class TestConfiguration:
    @pytest.mark.asyncio
    async def test_sources_configured_once_before_querying(self):
        source = ConfigurableFakeSource("conf", [A])
        configuration = StaticSourceConfiguration(
            sources={"conf": SourceSettings(parameters={"language": "fr"})}
        )
        pool = SourcePool([source], configuration)

        await pool.search_by_identifier("x")
        await pool.search({"isbn": "x"})
        assert source.configured_with == [{"language": "fr"}]


class TestNesting:
    @pytest.mark.asyncio
    async def test_pool_of_pools(self, s1, s2):
        inner = SourcePool([s1, s2], StaticSourceConfiguration())
        outer = SourcePool([inner, FakeSource("s3", [B])], StaticSourceConfiguration())

        # the inner pool's merged answer is deduplicated as one source
        assert await outer.search_by_identifier("x") == [A, B, C, B]
        assert outer.queryable_fields() == ["isbn", "title", "author"]

    @pytest.mark.asyncio
    async def test_close_closes_members(self, s1, s2):
        inner = SourcePool([s2], StaticSourceConfiguration())
        async with SourcePool([s1, inner], StaticSourceConfiguration()):
            pass
        assert s1.closed
        assert s2.closed


class TestDefaults:
    def test_default_sources_order(self):
        codes = [source.code for source in default_sources()]
        assert codes == [
            "open-library",
            "google-books",
            "isbndb",
            "feedbooks",
            "ebooksgratuits",
            "loc",
            "library-hub",
            "oclc",
            "eyrolles",
        ]

    def test_default_pool_leaves_out_unconfigured_key_sources(self):
        pool = create_default_pool(StaticSourceConfiguration())
        assert "isbndb" not in [source.code for source in pool.sources]

        configured = StaticSourceConfiguration(
            sources={"isbndb": SourceSettings(parameters={"api_key": "k"})}
        )
        pool = create_default_pool(configured)
        assert "isbndb" in [source.code for source in pool.sources]
