"""CLI interface for Book Retriever."""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .errors import MissingParameterError, SourceQueryError
from .logging import configure_logging

app = typer.Typer(
    name="book-retriever",
    help="Look up book metadata across library catalogs, bookshops and web APIs",
    add_completion=False,
)
console = Console()


def get_configuration(config_path: Path | None):
    """Load source configuration from a YAML file, or from the environment."""
    from .sources.config import StaticSourceConfiguration
    from .sources.pool import default_sources

    if config_path is not None:
        return StaticSourceConfiguration.from_yaml(config_path)
    return StaticSourceConfiguration.from_env([source.code for source in default_sources()])


def setup_logging(log_level: str) -> None:
    try:
        configure_logging(log_level, json=False)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level")


def build_pool(config_path: Path | None, sequential: bool, timeout: float):
    """Create the default pool for a command."""
    from .sources.pool import PoolConfig, create_default_pool

    return create_default_pool(
        configuration=get_configuration(config_path),
        config=PoolConfig(parallel=not sequential, timeout_per_source=timeout),
    )


def parse_criteria(values: list[str]) -> dict[str, str]:
    """Turn ``field=value`` options into a criteria mapping."""
    criteria: dict[str, str] = {}
    for item in values:
        field, sep, value = item.partition("=")
        if not sep or not field.strip() or not value.strip():
            raise typer.BadParameter(f"expected field=value, got {item!r}", param_hint="--criterion")
        criteria[field.strip()] = value.strip()
    return criteria


def _run_query(pool, method: str, arg):
    async def run():
        try:
            return await getattr(pool, method)(arg)
        finally:
            await pool.close()

    try:
        return asyncio.run(run())
    except MissingParameterError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except SourceQueryError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(2)


def _show(result, as_json: bool) -> None:
    if as_json:
        payload = {
            "results": [record.model_dump(mode="json") for record in result.results],
            "sources_searched": result.sources_searched,
            "sources_failed": result.failures,
        }
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if result.sources_failed:
        failed = ", ".join(f"{code} ({error})" for code, error in result.failures.items())
        console.print(f"[red]Failed sources: {failed}[/red]")

    if not result.results:
        console.print("[yellow]No books found[/yellow]")
        return

    table = Table(title=f"Books ({len(result.results)})")
    table.add_column("Source", style="dim")
    table.add_column("Title")
    table.add_column("Authors")
    table.add_column("ISBN")
    table.add_column("Published")

    for code in result.sources_searched:
        for record in result.by_source[code].records:
            table.add_row(
                code,
                record.title or "",
                ", ".join(record.authors),
                record.isbn or "",
                record.publication_date.isoformat() if record.publication_date else "",
            )

    console.print(table)


@app.command()
def isbn(
    identifier: str = typer.Argument(..., help="ISBN or EAN to look up"),
    config: Path = typer.Option(None, "--config", "-c", help="YAML source configuration"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
    sequential: bool = typer.Option(False, "--sequential", help="Query sources one at a time"),
    timeout: float = typer.Option(30.0, "--timeout", "-t", help="Timeout per source in seconds"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level"),
):
    """Look a book up by ISBN in every active source."""
    setup_logging(log_level)
    pool = build_pool(config, sequential, timeout)
    result = _run_query(pool, "search_by_identifier_detailed", identifier)
    _show(result, as_json)


@app.command()
def search(
    criterion: list[str] = typer.Option(..., "--criterion", "-c", help="Search criterion as field=value"),
    config: Path = typer.Option(None, "--config", help="YAML source configuration"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
    sequential: bool = typer.Option(False, "--sequential", help="Query sources one at a time"),
    timeout: float = typer.Option(30.0, "--timeout", "-t", help="Timeout per source in seconds"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level"),
):
    """Search every active source with free-form criteria."""
    criteria = parse_criteria(criterion)
    setup_logging(log_level)
    pool = build_pool(config, sequential, timeout)
    result = _run_query(pool, "search_detailed", criteria)
    _show(result, as_json)


@app.command("sources")
def list_sources(
    config: Path = typer.Option(None, "--config", "-c", help="YAML source configuration"),
):
    """List the available sources and whether they are active."""
    from .sources.pool import default_sources

    configuration = get_configuration(config)

    table = Table(title="Sources")
    table.add_column("Code")
    table.add_column("Label")
    table.add_column("Fields")
    table.add_column("Active")

    for source in default_sources():
        active = configuration.is_active(source)
        table.add_row(
            source.code,
            source.label,
            ", ".join(source.queryable_fields()),
            "[green]yes[/green]" if active else "[dim]no[/dim]",
        )

    console.print(table)


if __name__ == "__main__":
    app()
