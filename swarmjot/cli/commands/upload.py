"""``swarmjot upload`` and ``swarmjot upload-dir`` — write files to the network.

A web page or text file is uploaded as a named resource; anything else, or
any file given ``--raw``, is stored as raw data.  A directory is uploaded as
one collection; with ``--key`` it is also published as a website behind a
stable feed address.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path

import typer

from swarmjot.cli.runtime import console, engine_session, run


def _guess_type(path: Path) -> str:
    return mimetypes.guess_type(path.name)[0] or "application/octet-stream"


async def _upload(path: Path, content_type: str | None, raw: bool, batch: str | None) -> None:
    async with engine_session() as engine:
        resource = engine.create_resource(path.name, path.read_bytes(), content_type or _guess_type(path))
        as_data = raw or resource.is_raw
        reference = await (resource.save_raw(batch) if as_data else resource.save(batch))
        share = engine.fetcher.share_url(reference)

    console.print(f"[bold green]Uploaded:[/bold green] {path.name}")
    console.print(f"  Reference: [cyan]{reference}[/cyan]")
    if not as_data:
        console.print(f"  URL:       {share}")


def upload_cmd(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    content_type: str = typer.Option(None, "--content-type", "-t", help="Override the guessed MIME type."),
    raw: bool = typer.Option(False, "--raw", help="Upload as raw data (no manifest)."),
    batch: str = typer.Option(None, "--batch", help="Postage batch id to use."),
) -> None:
    """Upload a single file and print its reference."""
    run(_upload(path, content_type, raw, batch))


async def _upload_dir(directory: Path, batch: str | None, key: str | None, topic: str) -> None:
    async with engine_session() as engine:
        collection = engine.create_collection()
        for file in sorted(p for p in directory.rglob("*") if p.is_file()):
            collection.add(file.relative_to(directory).as_posix(), file.read_bytes(), _guess_type(file))
        if len(collection) == 0:
            console.print(f"[yellow]Nothing to upload in {directory}[/yellow]")
            raise typer.Exit(code=1)

        if key:
            result = await engine.create_website(key, collection, topic=topic).publish(batch)
            share = engine.fetcher.share_url(result.address)
        else:
            manifest = await collection.save(batch)
            share = engine.fetcher.share_url(manifest)

    console.print(f"[bold green]Uploaded {len(collection)} files[/bold green] from {directory}")
    if key:
        console.print(f"  Website:  [cyan]{result.address}[/cyan] (update #{result.feed_index})")
        console.print(f"  Manifest: {result.manifest_reference}")
    else:
        console.print(f"  Manifest: [cyan]{manifest}[/cyan]")
    console.print(f"  URL:      {share}")


def upload_dir_cmd(
    directory: Path = typer.Argument(..., exists=True, file_okay=False),
    batch: str = typer.Option(None, "--batch", help="Postage batch id to use."),
    key: str = typer.Option(None, "--key", envvar="SWARMJOT_SIGNING_KEY", help="Hex signing key; publishes a website."),
    topic: str = typer.Option("website", "--topic", help="Website topic name."),
) -> None:
    """Upload a directory as one collection (or a website with --key)."""
    run(_upload_dir(directory, batch, key, topic))
