# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

if TYPE_CHECKING:
    from trailvault.core.config import Settings

app = typer.Typer(
    name="trailvault",
    help="Weekly archives of CloudTrail events for a monitored bucket",
    no_args_is_help=True,
)


@app.callback()
def main() -> None:
    """Build weekly audit archives from CloudTrail log files."""


@app.command()
def ingest(
    files: Annotated[
        list[Path],
        typer.Argument(help="CloudTrail log files (.json or .json.gz)"),
    ],
    resource: Annotated[
        str | None,
        typer.Option("--resource", "-r", help="Monitored bucket name"),
    ] = None,
    db_path: Annotated[
        Path | None,
        typer.Option("--db", help="SQLite archive database path"),
    ] = None,
    backend: Annotated[
        str | None,
        typer.Option("--backend", help="Archive store backend: sqlite or memory"),
    ] = None,
) -> None:
    """Merge the monitored bucket's events from log files into weekly archives."""
    from trailvault.core.config import get_settings, validate_settings
    from trailvault.core.exceptions import ConfigurationError
    from trailvault.core.logging import setup_logging

    settings = get_settings()
    overrides: dict[str, object] = {}
    if resource is not None:
        overrides["monitored_resource"] = resource
    if db_path is not None:
        overrides["db_path"] = db_path
    if backend is not None:
        overrides["store_backend"] = backend
    if overrides:
        settings = settings.model_copy(update=overrides)

    try:
        validate_settings(settings)
    except ConfigurationError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(2) from exc

    missing = [f for f in files if not f.is_file()]
    if missing:
        for f in missing:
            typer.echo(f"File not found: {f}", err=True)
        raise typer.Exit(1)

    setup_logging(settings.log_level, settings.log_format)
    complete = asyncio.run(_async_ingest(files, settings))
    if not complete:
        raise typer.Exit(1)


async def _async_ingest(files: list[Path], settings: Settings) -> bool:
    from trailvault.archive.processor import BatchProcessor
    from trailvault.core.exceptions import ParseError
    from trailvault.storage.factory import open_archive_store

    store = await open_archive_store(settings)
    complete = True
    try:
        processor = BatchProcessor(store, settings)
        for path in files:
            try:
                report = await processor.process_log_file(path.read_bytes())
            except ParseError as exc:
                typer.echo(f"{path}: {exc}", err=True)
                complete = False
                continue
            typer.echo(json.dumps({"file": str(path), **report.to_dict()}, indent=2))
            complete = complete and report.complete
    finally:
        await store.close()
    return complete
