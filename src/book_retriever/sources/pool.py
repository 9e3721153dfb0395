"""Source pool: one query fanned out to many book sources.

The pool queries every active source, drops duplicates within each
source's own answer, and concatenates the answers in configured source
order. A failing or slow source only loses its own contribution.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

import httpx
from pydantic import BaseModel, Field

from ..errors import MissingParameterError, SourceQueryError, SourceTimeoutError
from ..logging import get_logger
from .base import accepts_criteria
from .config import SourceConfiguration, SourceConfigurator

if TYPE_CHECKING:
    from ..models.record import BookRecord
    from .base import BookSource

log = get_logger(__name__)

SourceCall = Callable[["BookSource"], Awaitable[list["BookRecord"]]]


class PoolConfig(BaseModel):
    """Configuration for the source pool."""
    parallel: bool = Field(default=True, description="Query sources concurrently")
    timeout_per_source: float = Field(default=30.0, description="Timeout per source in seconds")
    max_concurrent_searches: int = Field(default=4, description="Max concurrent source queries")
    deduplicate: bool = Field(default=True, description="Remove duplicates within each source's results")
    raise_on_failure: bool = Field(default=False, description="Raise SourceQueryError after the query if any source failed")


@dataclass
class SourceSearchResult:
    """Result from a single source query."""
    source_code: str
    records: list[BookRecord]
    search_time_ms: float
    duplicates_removed: int = 0
    skipped: bool = False
    error: str | None = None
    error_type: str | None = None
    exception: BaseException | None = field(default=None, repr=False)


@dataclass
class PoolSearchResult:
    """Combined result of one pool query."""
    results: list[BookRecord] = field(default_factory=list)
    by_source: dict[str, SourceSearchResult] = field(default_factory=dict)
    sources_searched: list[str] = field(default_factory=list)
    sources_failed: list[str] = field(default_factory=list)
    total_search_time_ms: float = 0.0

    @property
    def failures(self) -> dict[str, str]:
        return {
            code: self.by_source[code].error or "unknown error"
            for code in self.sources_failed
        }


def deduplicate(records: list[BookRecord]) -> list[BookRecord]:
    """Drop records equal to an earlier one, keeping first occurrences in order.

    Equality is structural (every canonical attribute), so this is a
    quadratic scan rather than a hash lookup: ``additional`` is a mapping.
    """
    unique: list[BookRecord] = []
    for record in records:
        if record not in unique:
            unique.append(record)
    return unique


class SourcePool:
    """
    Aggregates several book sources behind the source interface.

    Provides:
    - Activation filtering through a SourceConfiguration
    - Concurrent (or sequential) queries with a per-source timeout
    - Per-source deduplication, merge in configured order
    - Failure isolation, with failures reported on the detailed result

    A pool is itself a source, so pools can be nested.
    """

    code: ClassVar[str] = "__pool__"
    label: ClassVar[str] = "__pool__"

    def __init__(
        self,
        sources: Iterable[BookSource],
        configuration: SourceConfiguration,
        config: PoolConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the pool.

        Args:
            sources: Sources in the order their results are merged
            configuration: Activation policy and per-source parameters
            config: Pool behavior (concurrency, timeout, failure handling)
            http_client: Optional client shared with every HTTP-aware source
        """
        self.sources: tuple[BookSource, ...] = tuple(sources)
        self.configuration = configuration
        self.config = config or PoolConfig()
        self._configurator = SourceConfigurator(configuration, http_client)
        self._configured: set[int] = set()

    def active_sources(self) -> Iterator[BookSource]:
        """Lazily yield the sources the configuration marks active, in order."""
        return (source for source in self.sources if self.configuration.is_active(source))

    def queryable_fields(self) -> list[str]:
        """Union of the active sources' queryable fields, first-seen order."""
        fields: list[str] = []
        for source in self.active_sources():
            for name in source.queryable_fields():
                if name not in fields:
                    fields.append(name)
        return fields

    async def search(self, criteria: dict[str, str]) -> list[BookRecord]:
        return (await self.search_detailed(criteria)).results

    async def search_by_identifier(self, identifier: str) -> list[BookRecord]:
        return (await self.search_by_identifier_detailed(identifier)).results

    async def search_detailed(self, criteria: dict[str, str]) -> PoolSearchResult:
        """Search every active source with free-form criteria.

        Sources whose capabilities cannot answer the criteria (single-criterion
        or identifier-only sources given several criteria, or a field they do
        not declare) are skipped.
        """
        return await self._run(
            lambda source: source.search(dict(criteria)),
            supports=lambda source: accepts_criteria(source, criteria),
            query={"criteria": sorted(criteria)},
        )

    async def search_by_identifier_detailed(self, identifier: str) -> PoolSearchResult:
        """Look an identifier up in every active source."""
        return await self._run(
            lambda source: source.search_by_identifier(identifier),
            query={"identifier": identifier},
        )

    async def close(self) -> None:
        """Close every source that holds resources."""
        for source in self.sources:
            close = getattr(source, "close", None)
            if close is not None:
                await close()

    async def __aenter__(self) -> SourcePool:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> bool:
        await self.close()
        return False

    def _configure(self, source: BookSource) -> None:
        key = id(source)
        if key in self._configured:
            return
        self._configurator.configure(source)
        self._configured.add(key)

    async def _run(
        self,
        call: SourceCall,
        query: dict,
        supports: Callable[[BookSource], bool] | None = None,
    ) -> PoolSearchResult:
        start_time = time.time()
        active = list(self.active_sources())
        for source in active:
            self._configure(source)

        if self.config.parallel:
            outcomes = await self._search_parallel(call, active, supports)
        else:
            outcomes = await self._search_sequential(call, active, supports)

        result = PoolSearchResult()
        for source, outcome in zip(active, outcomes):
            code = _source_code(source)
            result.by_source[code] = outcome
            if outcome.error is not None:
                result.sources_failed.append(code)
                continue
            if not outcome.skipped:
                result.sources_searched.append(code)
            result.results.extend(outcome.records)

        result.total_search_time_ms = (time.time() - start_time) * 1000
        # missing parameters are configuration errors, not source failures
        for outcome in outcomes:
            if isinstance(outcome.exception, MissingParameterError):
                raise outcome.exception

        log.info(
            "pool.query.done",
            **query,
            sources=len(active),
            failed=result.sources_failed,
            records=len(result.results),
            time_ms=round(result.total_search_time_ms, 1),
        )

        if self.config.raise_on_failure and result.sources_failed:
            raise SourceQueryError(result.failures)
        return result

    async def _search_parallel(
        self,
        call: SourceCall,
        sources: list[BookSource],
        supports: Callable[[BookSource], bool] | None,
    ) -> list[SourceSearchResult]:
        """Query sources concurrently; results keep the order of ``sources``."""
        sem = asyncio.Semaphore(self.config.max_concurrent_searches)

        async def search_one(source: BookSource) -> SourceSearchResult:
            async with sem:
                return await self._query_source(call, source, supports)

        return list(await asyncio.gather(*(search_one(source) for source in sources)))

    async def _search_sequential(
        self,
        call: SourceCall,
        sources: list[BookSource],
        supports: Callable[[BookSource], bool] | None,
    ) -> list[SourceSearchResult]:
        """Query sources one after another."""
        return [await self._query_source(call, source, supports) for source in sources]

    async def _query_source(
        self,
        call: SourceCall,
        source: BookSource,
        supports: Callable[[BookSource], bool] | None,
    ) -> SourceSearchResult:
        code = _source_code(source)
        start = time.time()

        if supports is not None and not supports(source):
            log.debug("pool.source.skipped", source=code)
            return SourceSearchResult(source_code=code, records=[], search_time_ms=0.0, skipped=True)

        log.debug("pool.source.start", source=code)
        error: str
        error_type: str
        exception: BaseException | None = None
        try:
            records = await asyncio.wait_for(call(source), timeout=self.config.timeout_per_source)
            if not isinstance(records, list):
                raise TypeError(f"expected a list of records, got {type(records).__name__}")
        except (asyncio.TimeoutError, TimeoutError):
            error, error_type = "timeout", "timeout"
            exception = SourceTimeoutError(code, f"no answer within {self.config.timeout_per_source}s")
        except Exception as e:
            error, error_type, exception = str(e) or type(e).__name__, type(e).__name__, e
        else:
            latency_ms = (time.time() - start) * 1000
            unique = deduplicate(records) if self.config.deduplicate else list(records)
            log.debug(
                "pool.source.done",
                source=code,
                records=len(unique),
                duplicates_removed=len(records) - len(unique),
                time_ms=round(latency_ms, 1),
            )
            return SourceSearchResult(
                source_code=code,
                records=unique,
                search_time_ms=latency_ms,
                duplicates_removed=len(records) - len(unique),
            )

        latency_ms = (time.time() - start) * 1000
        log.warning("pool.source.failed", source=code, error=error, error_type=error_type)
        return SourceSearchResult(
            source_code=code,
            records=[],
            search_time_ms=latency_ms,
            error=error,
            error_type=error_type,
            exception=exception,
        )


def _source_code(source: object) -> str:
    return str(getattr(source, "code", type(source).__name__))


def default_sources(http_client: httpx.AsyncClient | None = None) -> tuple[BookSource, ...]:
    """The standard adapters, in merge order."""
    from .eyrolles import EyrollesSource
    from .google_books import GoogleBooksSource
    from .isbndb import ISBNdbSource
    from .oclc import OclcClassifySource
    from .opds_catalogs import EbooksGratuitsSource, FeedBooksSource
    from .openlibrary import OpenLibrarySource
    from .sru_catalogs import LibraryHubSource, LibraryOfCongressSource

    return (
        OpenLibrarySource(http_client=http_client),
        GoogleBooksSource(http_client=http_client),
        ISBNdbSource(http_client=http_client),
        FeedBooksSource(http_client=http_client),
        EbooksGratuitsSource(http_client=http_client),
        LibraryOfCongressSource(http_client=http_client),
        LibraryHubSource(http_client=http_client),
        OclcClassifySource(http_client=http_client),
        EyrollesSource(http_client=http_client),
    )


def create_default_pool(
    configuration: SourceConfiguration | None = None,
    config: PoolConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> SourcePool:
    """Create a pool over the default adapters.

    Without a configuration, one is read from ``BOOK_RETRIEVER_*`` environment
    variables. Adapters whose required parameters are not configured are left
    out rather than failing every query.
    """
    from .config import StaticSourceConfiguration

    sources = default_sources(http_client)
    if configuration is None:
        configuration = StaticSourceConfiguration.from_env([source.code for source in sources])

    usable = []
    for source in sources:
        required = getattr(source, "required_parameters", ())
        provided = configuration.parameters(source)
        missing = [name for name in required if not (provided.get(name) or getattr(source, name, None))]
        if missing:
            log.info("pool.source.unconfigured", source=source.code, missing=missing)
            continue
        usable.append(source)
    return SourcePool(usable, configuration, config=config, http_client=http_client)
