"""Exception hierarchy for book-retriever."""
from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .sources.base import BookSource


class BookRetrieverError(Exception):
    """Base exception for book-retriever errors."""


class MissingParameterError(BookRetrieverError):
    """Raised when a source is missing required configuration parameters."""

    def __init__(self, source: BookSource, missing: list[str], details: str = "") -> None:
        self.source = source
        self.parameters = list(missing)
        self.details = details
        message = self.parameters_message
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)

    @property
    def parameters_message(self) -> str:
        code = getattr(self.source, "code", type(self.source).__name__)
        return (
            f"The source {code} has required parameters.\n"
            f"Missing parameters are: {', '.join(self.parameters)}"
        )

    @classmethod
    def raise_if_missing(
        cls,
        source: BookSource,
        parameters: Mapping[str, str | None],
        details: str = "",
    ) -> None:
        """Raise if any of the given parameters is None or empty."""
        missing = [name for name, value in parameters.items() if not value]
        if missing:
            raise cls(source, missing, details)


class SourceError(BookRetrieverError):
    """A single source failed to answer a query."""

    def __init__(self, source_code: str, message: str) -> None:
        self.source_code = source_code
        super().__init__(f"{source_code}: {message}")


class SourceTimeoutError(SourceError):
    """A source did not answer within its timeout."""


class UnsupportedCriterionError(SourceError):
    """A source was asked to search on a field it cannot map."""

    def __init__(self, source_code: str, field: str) -> None:
        self.field = field
        super().__init__(source_code, f'the field "{field}" is not handled by this source')


class SourceQueryError(BookRetrieverError):
    """One or more sources of a pool failed during a query."""

    def __init__(self, failures: dict[str, str]) -> None:
        self.failures = dict(failures)
        summary = "; ".join(f"{code}: {error}" for code, error in self.failures.items())
        super().__init__(f"{len(self.failures)} source(s) failed: {summary}")
