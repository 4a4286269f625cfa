#!/usr/bin/env python3
"""
Command line entry point for the Orpheus backend.
"""

import asyncio
from datetime import UTC, datetime
from pathlib import Path

import aiofiles
import click
import uvicorn

from orpheus import __version__
from orpheus.config import settings
from orpheus.errors import GenerationError
from orpheus.factory import build_pipeline
from orpheus.logging import configure_logging, get_logger
from orpheus.models import Artifact, GenerationRequest
from orpheus.pipeline.progress import RunState
from orpheus.pipeline.runs import RunRegistry

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="orpheus")
def cli() -> None:
    """Orpheus CLI - serve the API or generate a podcast from a paper."""
    pass


@cli.command()
@click.option("--host", default=settings.api_host, help="Host to bind to")
@click.option("--port", default=settings.api_port, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str, port: int, reload: bool, log_level: str) -> None:
    """Start the Orpheus API server."""
    configure_logging(debug=(log_level == "debug"))
    logger.info("Starting Orpheus API server", host=host, port=port, reload=reload)

    uvicorn.run(
        "orpheus.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


async def _read_document(path: Path) -> bytes:
    async with aiofiles.open(path, "rb") as f:
        return await f.read()


async def _generate(request_kwargs: dict, path: Path, user_id: str) -> Artifact:
    request = GenerationRequest(file=await _read_document(path), **request_kwargs)
    registry = RunRegistry(build_pipeline())

    def report(state: RunState) -> None:
        click.echo(f"[{state.progress_percent:3d}%] {state.current_stage.value}")

    try:
        return await registry.run(request, user_id, listener=report)
    finally:
        await registry.aclose()


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--title", required=True, help="Paper title")
@click.option("--user-id", required=True, help="Owner of the generated podcast")
@click.option("--abstract", default="", help="Paper abstract")
@click.option("--authors", default="", help="Comma-separated author list")
@click.option("--year", "publishing_year", type=int, default=lambda: datetime.now(UTC).year)
@click.option("--field", "field_of_research", default="", help="Field of research")
@click.option("--keywords", default="", help="Comma-separated keywords")
@click.option("--doi", default=None, help="DOI of the paper")
@click.option("--private", "is_private", is_flag=True, default=False, help="Hide from the feed")
def generate(
    document: Path,
    title: str,
    user_id: str,
    abstract: str,
    authors: str,
    publishing_year: int,
    field_of_research: str,
    keywords: str,
    doi: str | None,
    is_private: bool,
) -> None:
    """Generate a podcast from DOCUMENT and print the created record's ID."""
    configure_logging(debug=settings.debug)

    request_kwargs = {
        "title": title,
        "abstract": abstract,
        "authors": authors,
        "publishing_year": publishing_year,
        "field_of_research": field_of_research,
        "keywords": keywords,
        "doi": doi,
        "is_public": not is_private,
    }
    try:
        artifact = asyncio.run(_generate(request_kwargs, document, user_id))
    except GenerationError as e:
        raise click.ClickException(f"{e.user_message} ({e})") from e

    click.echo(f"Podcast created: {artifact.id}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
