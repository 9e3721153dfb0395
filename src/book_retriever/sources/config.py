"""Source activation and per-source parameters."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

import httpx
import yaml
from pydantic import BaseModel, Field

from ..errors import MissingParameterError
from .base import ConfigurableSource, HttpClientAware

logger = logging.getLogger(__name__)

ENV_PREFIX = "BOOK_RETRIEVER_"


@runtime_checkable
class SourceConfiguration(Protocol):
    """Decides which sources are queried and what parameters they get."""

    def is_active(self, source: object) -> bool:
        ...

    def parameters(self, source: object) -> dict[str, str]:
        ...


def _code(source: object) -> str:
    return str(getattr(source, "code", type(source).__name__))


def env_key(code: str) -> str:
    """Environment variable stem for a source code: ``open-library`` -> ``OPEN_LIBRARY``."""
    return code.replace("-", "_").replace(".", "_").upper()


class SourceSettings(BaseModel):
    """Settings for one source."""

    active: bool = Field(default=True)
    parameters: dict[str, str] = Field(default_factory=dict)


class StaticSourceConfiguration(BaseModel):
    """Configuration held in memory, loadable from YAML or the environment.

    YAML layout::

        default_active: true
        sources:
          isbndb:
            parameters:
              api_key: "..."
          eyrolles:
            active: false
    """

    default_active: bool = Field(default=True, description="Activation of unlisted sources")
    sources: dict[str, SourceSettings] = Field(default_factory=dict)

    def is_active(self, source: object) -> bool:
        settings = self.sources.get(_code(source))
        if settings is None:
            return self.default_active
        return settings.active

    def parameters(self, source: object) -> dict[str, str]:
        settings = self.sources.get(_code(source))
        return dict(settings.parameters) if settings else {}

    @classmethod
    def from_yaml(cls, path: Path | str) -> StaticSourceConfiguration:
        """Load a configuration from a YAML file."""
        with open(Path(path)) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def from_env(
        cls,
        codes: list[str],
        prefix: str = ENV_PREFIX,
        dotenv: bool = True,
    ) -> StaticSourceConfiguration:
        """Build a configuration from environment variables.

        ``<PREFIX><CODE>_ACTIVE`` toggles a source (0/false/no/off disable it);
        any other ``<PREFIX><CODE>_<NAME>`` becomes parameter ``name``.

        Args:
            codes: Source codes to look up
            prefix: Variable prefix
            dotenv: Load a ``.env`` file first
        """
        if dotenv:
            from dotenv import load_dotenv

            load_dotenv()

        sources: dict[str, SourceSettings] = {}
        for code in codes:
            stem = f"{prefix}{env_key(code)}_"
            settings = SourceSettings()
            found = False
            for name, value in os.environ.items():
                if not name.startswith(stem):
                    continue
                found = True
                key = name[len(stem):].lower()
                if key == "active":
                    settings.active = value.strip().lower() not in {"0", "false", "no", "off"}
                else:
                    settings.parameters[key] = value
            if found:
                sources[code] = settings
        return cls(sources=sources)


class SourceConfigurator:
    """Applies a SourceConfiguration (and a shared HTTP client) to sources."""

    def __init__(
        self,
        configuration: SourceConfiguration,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.configuration = configuration
        self.http_client = http_client

    def configure(self, source: object) -> None:
        """Pass parameters to configurable sources and share the HTTP client.

        Raises:
            MissingParameterError: when a source requires a parameter the
                configuration does not provide
        """
        parameters = self.configuration.parameters(source)
        required = getattr(source, "required_parameters", ())
        if required:
            MissingParameterError.raise_if_missing(
                source,
                {name: parameters.get(name) or getattr(source, name, None) for name in required},
            )

        if isinstance(source, ConfigurableSource) and parameters:
            logger.debug("Configuring %s with %s", _code(source), sorted(parameters))
            source.configure(parameters)

        if self.http_client is not None and isinstance(source, HttpClientAware):
            source.set_http_client(self.http_client)
