"""CLI entrypoint for the resolver service."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import httpx
import typer

from furl_resolver.config import load_config
from furl_resolver.logging_utils import configure_logging
from furl_resolver.service import ResolutionService

from .config import get_settings

app = typer.Typer(help="furl full URL resolver command line interface")


def build_client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


@app.command()
def show_config() -> None:
    """Print the active configuration."""

    settings = get_settings()
    payload = {
        "service": json.loads(settings.model_dump_json()),
        "resolver": asdict(load_config()),
    }
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Interface to bind"),
    port: Optional[int] = typer.Option(None, help="Port to listen on"),
) -> None:
    """Run the HTTP API."""

    import uvicorn

    from .main import create_app

    settings = get_settings()
    uvicorn.run(create_app(settings), host=host or settings.host, port=port or settings.port)


async def _resolve_all(urls: List[str]) -> Tuple[List[Tuple[str, int, str]], Dict]:
    async with build_client() as client:
        service = ResolutionService(client, config=load_config())
        outcomes = await asyncio.gather(*(service.resolve(url) for url in urls))
        return [(url, outcome.code, outcome.text) for url, outcome in zip(urls, outcomes)], service.stats()


@app.command()
def resolve(
    urls: Optional[List[str]] = typer.Argument(None, help="URLs to resolve"),
    input_file: Optional[Path] = typer.Option(
        None, "--input", exists=True, readable=True, help="File with one URL per line"
    ),
    show_stats: bool = typer.Option(False, "--stats", help="Print cache and response stats afterwards"),
    log_level: str = typer.Option("WARNING", help="Logging level"),
) -> None:
    """Resolve URLs to their final destinations."""

    configure_logging(level=log_level.upper())
    targets = list(urls or [])
    if input_file:
        targets.extend(line.strip() for line in input_file.read_text().splitlines() if line.strip())
    if not targets:
        raise typer.BadParameter("Provide at least one URL or --input file")

    results, stats = asyncio.run(_resolve_all(targets))
    for url, code, text in results:
        typer.echo(f"{url} => {code} {text}")
    if show_stats:
        typer.echo(json.dumps(stats, indent=2))

    if any(code != 200 for _, code, _ in results):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
