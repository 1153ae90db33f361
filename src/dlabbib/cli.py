"""Command-line interface for dlabbib."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import httpx
import structlog
import typer
from rich.console import Console
from rich.table import Table

from dlabbib.errors import (
    ConfigurationError,
    DlabError,
    InvalidInput,
    UpstreamError,
    ValidationRejected,
)
from dlabbib.flags import ordered_keys
from dlabbib.models import (
    CanonicalRecord,
    ImportBatchResult,
    LibraryItem,
    RecordType,
    UpdateStatus,
)
from dlabbib.services import FlagUpdater, ImportPipeline, LibraryBrowser, ZoteroClient
from dlabbib.services.mapper import split_full_name
from dlabbib.settings import Settings, get_settings
from dlabbib.utils import normalize_doi

console = Console()
app = typer.Typer(help="dlabbib – HAL imports and DLAB flags for a Zotero library")


@app.callback()
def main() -> None:
    """Configure logging from the resolved settings."""
    settings = get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger,
    )


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # Resolved per logger so stdout stays clean for --json output.
    return structlog.PrintLogger(sys.stderr)


def _client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.request_timeout)


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]{message}[/red]")
    return typer.Exit(code=1)


@app.command()
def config(
    json_output: bool = typer.Option(False, "--json", help="Output settings as JSON"),
) -> None:
    """Display the resolved settings."""
    settings = get_settings()
    payload = settings.public_dump()
    if json_output:
        typer.echo(json.dumps(payload, indent=2))
        return
    table = Table(title="dlabbib Settings")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in payload.items():
        table.add_row(key, "—" if value is None else str(value))
    console.print(table)


@app.command("import-hal")
def import_hal(
    identifiers: Optional[list[str]] = typer.Argument(None, help="HAL identifiers"),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, help="File with one HAL id per line"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the aggregate as JSON"),
) -> None:
    """Import HAL documents into the Zotero library."""
    raw = list(identifiers or [])
    if file is not None:
        raw.extend(file.read_text(encoding="utf-8").splitlines())

    async def runner() -> ImportBatchResult:
        settings = get_settings()
        async with _client(settings) as client:
            pipeline = ImportPipeline.from_settings(client, settings)
            return await pipeline.run(raw)

    try:
        result = asyncio.run(runner())
    except (InvalidInput, ConfigurationError) as exc:
        raise _fail(str(exc)) from exc
    if json_output:
        typer.echo(result.model_dump_json(indent=2))
        return
    _print_import_result(result)


def _print_import_result(result: ImportBatchResult) -> None:
    table = Table(title="HAL import")
    table.add_column("Requested", justify="right")
    table.add_column("Fetched", justify="right")
    table.add_column("Importable", justify="right")
    table.add_column("Imported", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Failures", justify="right")
    table.add_row(
        *(
            str(value)
            for value in (
                result.requested,
                result.fetched,
                result.importable,
                result.imported,
                result.skipped,
                result.failures,
            )
        )
    )
    console.print(table)
    if not result.errors:
        return
    errors = Table(title="Errors")
    errors.add_column("Subject")
    errors.add_column("Stage")
    errors.add_column("Message", overflow="fold")
    for entry in result.errors:
        errors.add_row(entry.subject_id, entry.stage, entry.message)
    console.print(errors)


@app.command("set-flags")
def set_flags(
    key: str = typer.Argument(..., help="Zotero item key"),
    flag: list[str] = typer.Option(..., "--flag", help="name=value, value being yes or no"),
) -> None:
    """Update DLAB workflow flags on one item."""
    updates: dict[str, str] = {}
    for entry in flag:
        name, sep, value = entry.partition("=")
        if not sep:
            raise typer.BadParameter(f"Expected name=value, got {entry!r}", param_hint="--flag")
        updates[name.strip()] = value.strip()

    async def runner():
        settings = get_settings()
        async with _client(settings) as client:
            updater = FlagUpdater(ZoteroClient(client, settings))
            return await updater.update(key, updates)

    try:
        outcome = asyncio.run(runner())
    except (InvalidInput, ConfigurationError) as exc:
        raise _fail(str(exc)) from exc
    if not outcome.ok:
        hint = " – re-read the item and try again" if outcome.status is UpdateStatus.CONFLICT else ""
        raise _fail(f"{outcome.status.value}: {outcome.message}{hint}")
    console.print(f"[green]Updated[/green] {key}")
    _print_flags(outcome.flags)


@app.command()
def flags(key: str = typer.Argument(..., help="Zotero item key")) -> None:
    """Show the DLAB workflow flags of one item."""

    async def runner() -> dict[str, str]:
        settings = get_settings()
        async with _client(settings) as client:
            return await LibraryBrowser(ZoteroClient(client, settings)).flags_for(key)

    try:
        current = asyncio.run(runner())
    except DlabError as exc:
        raise _fail(str(exc)) from exc
    _print_flags(current)


def _print_flags(current: dict[str, str]) -> None:
    if not current:
        console.print("[yellow]No DLAB flags set.")
        return
    table = Table(title="DLAB flags")
    table.add_column("Flag")
    table.add_column("Value")
    for name, value in current.items():
        table.add_row(name, value)
    console.print(table)


@app.command()
def add(
    item_type: RecordType = typer.Option(..., "--type", help="Zotero item type"),
    title: str = typer.Option(..., help="Title"),
    author: list[str] = typer.Option(..., "--author", "-a", help='"Last, First" or "First Last"'),
    date: str = typer.Option(..., help="Publication date or year"),
    publisher: str = typer.Option("", help="Publisher"),
    place: str = typer.Option("", help="Place of publication"),
    book_title: str = typer.Option("", help="Book title (book sections)"),
    journal: str = typer.Option("", help="Journal name (articles)"),
    pages: str = typer.Option("", help="Pages"),
    isbn: str = typer.Option("", help="ISBN"),
    doi: str = typer.Option("", help="DOI"),
    note: str = typer.Option("", help="Free text kept in the Extra field"),
) -> None:
    """Create one item in Zotero from manually entered fields."""
    record = CanonicalRecord(
        record_type=item_type,
        title=title.strip(),
        authors=[creator for creator in map(split_full_name, author) if creator is not None],
        date=date.strip(),
        publisher=publisher.strip(),
        place=place.strip(),
        book_title=book_title.strip(),
        publication_name=journal.strip(),
        pages=pages.strip(),
        isbn=isbn.strip(),
        doi=normalize_doi(doi),
        extra_text=note.strip(),
    )

    async def runner():
        settings = get_settings()
        async with _client(settings) as client:
            return await ImportPipeline.from_settings(client, settings).create_record(record)

    try:
        summary = asyncio.run(runner())
    except (ValidationRejected, ConfigurationError) as exc:
        raise _fail(str(exc)) from exc
    if summary.errors or not summary.imported:
        message = summary.errors[0].message if summary.errors else "Zotero rejected the item"
        raise _fail(message)
    console.print(f"[green]Created[/green]: {record.title} ({', '.join(a.full_name for a in record.authors)})")


@app.command("list")
def list_items(
    limit: int = typer.Option(50, min=1, help="Maximum items to show"),
    item_type: Optional[list[RecordType]] = typer.Option(None, "--type", help="Restrict item types"),
) -> None:
    """List recent library items with their DLAB flags."""

    async def runner() -> list[LibraryItem]:
        settings = get_settings()
        async with _client(settings) as client:
            browser = LibraryBrowser(ZoteroClient(client, settings))
            types = [value.value for value in item_type] if item_type else None
            return await browser.list_items(limit=limit, item_types=types)

    try:
        items = asyncio.run(runner())
    except (ConfigurationError, UpstreamError) as exc:
        raise _fail(str(exc)) from exc
    if not items:
        console.print("[yellow]No items found.")
        return
    table = Table(title=f"Library ({len(items)} items)")
    table.add_column("Key")
    table.add_column("Type")
    table.add_column("Year")
    table.add_column("Title", overflow="fold")
    table.add_column("Authors", overflow="fold")
    table.add_column("Flags", overflow="fold")
    for item in items:
        table.add_row(
            item.key,
            item.item_type,
            item.year or "—",
            item.title,
            item.creators_text or "—",
            ", ".join(f"{name}={item.flags[name]}" for name in ordered_keys(item.flags)) or "—",
        )
    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """Launch the HTTP API."""
    import uvicorn

    uvicorn.run(
        "dlabbib.web.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


if __name__ == "__main__":  # pragma: no cover
    app()
