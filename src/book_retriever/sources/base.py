"""Base interfaces for book metadata sources."""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, runtime_checkable

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..models.record import BookRecord


IDENTIFIER_FIELDS = frozenset({"isbn", "ean"})


@runtime_checkable
class BookSource(Protocol):
    """Protocol defining the interface all book sources must implement."""

    code: str
    label: str

    async def search(self, criteria: dict[str, str]) -> list[BookRecord]:
        """Search for books matching free-form criteria.

        Args:
            criteria: Field name to searched value (title, author, isbn, ...)

        Returns:
            List of records found
        """
        ...

    async def search_by_identifier(self, identifier: str) -> list[BookRecord]:
        """Search for books by identifier (ISBN/EAN).

        Args:
            identifier: The identifier to look up

        Returns:
            List of records found
        """
        ...

    def queryable_fields(self) -> list[str]:
        """Criteria names this source understands."""
        ...


@runtime_checkable
class ConfigurableSource(Protocol):
    """A source that takes parameters such as API keys or a language."""

    def configure(self, parameters: dict[str, str]) -> None:
        ...


@runtime_checkable
class HttpClientAware(Protocol):
    """A source that can share an externally managed HTTP client."""

    def set_http_client(self, client: httpx.AsyncClient) -> None:
        ...


class RetryableStatusError(httpx.HTTPStatusError):
    """5xx response, worth another attempt."""


class BaseSource(ABC):
    """Abstract base class for book sources."""

    code: ClassVar[str] = "base"
    label: ClassVar[str] = "Base source"
    base_url: ClassVar[str] = ""
    timeout: ClassVar[float] = 30.0
    user_agent: ClassVar[str] = "book-retriever/0.3 (+bibliographic metadata lookup)"
    required_parameters: ClassVar[tuple[str, ...]] = ()

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        """Initialize the source.

        Args:
            http_client: Optional shared client; when omitted the source
                creates (and later closes) its own
        """
        self._client = http_client
        self._owns_client = http_client is None

    @abstractmethod
    async def search(self, criteria: dict[str, str]) -> list[BookRecord]:
        """Search for books matching the criteria."""

    @abstractmethod
    async def search_by_identifier(self, identifier: str) -> list[BookRecord]:
        """Search for books by identifier."""

    @abstractmethod
    def queryable_fields(self) -> list[str]:
        """Criteria names this source understands."""

    def set_http_client(self, client: httpx.AsyncClient) -> None:
        self._client = client
        self._owns_client = False

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent},
            )
            self._owns_client = True
        return self._client

    async def _get(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool = True,
    ) -> httpx.Response:
        """GET with retries on transport errors, timeouts and 5xx responses.

        4xx responses are returned as-is; callers decide what they mean.
        """
        client = self._http()
        request_headers = {"User-Agent": self.user_agent, **(headers or {})}

        @retry(
            reraise=True,
            stop=stop_after_attempt(3),
            wait=wait_exponential_jitter(initial=0.5, max=4.0),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.TransportError, RetryableStatusError)),
        )
        async def _do() -> httpx.Response:
            resp = await client.get(
                url,
                params=params,
                headers=request_headers,
                follow_redirects=follow_redirects,
            )
            if resp.status_code >= 500:
                raise RetryableStatusError(
                    f"{self.code}: server error {resp.status_code}",
                    request=resp.request,
                    response=resp,
                )
            return resp

        return await _do()

    async def _get_text(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> str | None:
        """Body of a 200 response, None for any other status."""
        resp = await self._get(url, params=params, headers=headers)
        if resp.status_code != 200:
            logger.debug("%s: %s answered %s", self.code, url, resp.status_code)
            return None
        return resp.text

    async def _get_json(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Decoded JSON of a 200 response, None on other statuses or bad JSON."""
        text = await self._get_text(url, params=params, headers=headers)
        if text is None:
            return None
        try:
            return json.loads(text)
        except ValueError as e:
            logger.debug("%s: malformed JSON from %s: %s", self.code, url, e)
            return None

    async def close(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> BaseSource:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> bool:
        await self.close()
        return False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} code={self.code!r}>"


def single_criterion(criteria: Mapping[str, str]) -> tuple[str, str] | None:
    """The only (field, value) pair of ``criteria``, or None if there are more or none."""
    if len(criteria) != 1:
        return None
    return next(iter(criteria.items()))


class IdentifierOnlySource(BaseSource):
    """A source that can only look books up by ISBN/EAN.

    ``search`` accepts a single isbn/ean criterion and answers nothing else.
    """

    def queryable_fields(self) -> list[str]:
        return ["isbn"]

    async def search(self, criteria: dict[str, str]) -> list[BookRecord]:
        pair = single_criterion(criteria)
        if pair is None or pair[0].lower() not in IDENTIFIER_FIELDS:
            return []
        return await self.search_by_identifier(pair[1])


class SingleCriterionSource(BaseSource):
    """A source whose API searches on one field at a time."""

    async def search(self, criteria: dict[str, str]) -> list[BookRecord]:
        pair = single_criterion(criteria)
        if pair is None:
            return []
        return await self.search_one(*pair)

    @abstractmethod
    async def search_one(self, field: str, value: str) -> list[BookRecord]:
        """Search on exactly one field."""


class IdentifierAsCriterionSource(BaseSource):
    """A source whose identifier lookup is a plain isbn criterion search."""

    async def search_by_identifier(self, identifier: str) -> list[BookRecord]:
        return await self.search({"isbn": identifier})


def accepts_criteria(source: object, criteria: Mapping[str, str]) -> bool:
    """Whether a source can answer ``criteria`` at all, judged by its capabilities."""
    if isinstance(source, (IdentifierOnlySource, SingleCriterionSource)) and len(criteria) != 1:
        return False
    if isinstance(source, IdentifierOnlySource):
        return next(iter(criteria)).lower() in IDENTIFIER_FIELDS
    if isinstance(source, SingleCriterionSource):
        # single-field APIs only answer the fields they declare
        return next(iter(criteria)).lower() in {name.lower() for name in source.queryable_fields()}
    return bool(criteria)
