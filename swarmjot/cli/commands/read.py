"""``swarmjot fetch`` and ``swarmjot read`` — retrieve content by reference.

Both go through the gateway chain (local node first, then the public
gateways).  ``read`` additionally decodes an article page and renders it.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import typer
from rich.markdown import Markdown
from rich.panel import Panel

from swarmjot.cli.runtime import console, engine_session, run
from swarmjot.core.fetcher import ContentUnavailableError
from swarmjot.core.reference import normalize


async def _fetch(reference: str, content_type: str | None, path: str | None, output: Path | None) -> None:
    reference = normalize(reference, strict=True)
    async with engine_session() as engine:
        try:
            data = await engine.fetch(reference, content_type, path=path)
        except ContentUnavailableError as exc:
            console.print(f"[bold red]Unavailable:[/bold red] {exc.reference}")
            for url in exc.attempted:
                console.print(f"  [dim]tried[/dim] {url}")
            raise typer.Exit(code=1) from exc

    if output is not None:
        output.write_bytes(data)
        console.print(f"[green]Wrote {len(data)} bytes to {output}[/green]")
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()


def fetch_cmd(
    reference: str = typer.Argument(..., help="Reference, optionally bzz:// prefixed or with a /path."),
    content_type: str = typer.Option(None, "--content-type", "-t", help="Declared content type."),
    path: str = typer.Option(None, "--path", "-p", help="Path inside the manifest."),
    output: Path = typer.Option(None, "--output", "-o", help="Write to a file instead of stdout."),
) -> None:
    """Fetch raw content by reference."""
    run(_fetch(reference, content_type, path, output))


async def _read(reference: str) -> None:
    reference = normalize(reference, strict=True)
    async with engine_session() as engine:
        article = await engine.read_article(reference)
        share = engine.fetcher.share_url(reference)

    meta = article.metadata
    created = datetime.fromtimestamp(meta.created_at / 1000, tz=timezone.utc)
    header = (
        f"[bold]{article.title}[/bold]\n"
        f"By {meta.author or 'unknown'}"
        + (f" in {meta.category}" if meta.category else "")
        + f" on {created:%Y-%m-%d}"
        + (f"\nTags: {', '.join(meta.tags)}" if meta.tags else "")
    )
    console.print(Panel(header, border_style="cyan", padding=(1, 2)))
    console.print(Markdown(article.body))
    console.print(f"\n[dim]{share}[/dim]")


def read_cmd(
    reference: str = typer.Argument(..., help="Reference of a published article."),
) -> None:
    """Fetch an article page and render it."""
    run(_read(reference))
