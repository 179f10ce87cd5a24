"""Shared CLI plumbing — logging, engine sessions and error reporting."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Coroutine, TypeVar

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler

from swarmjot.bridge.bee import BeeApiError
from swarmjot.config import SwarmjotConfig
from swarmjot.core.article_codec import ContentMalformedError
from swarmjot.core.builders import UploadFailedError
from swarmjot.core.engine import ContentEngine
from swarmjot.core.fetcher import ContentUnavailableError
from swarmjot.core.kvstore import SQLiteStore
from swarmjot.core.postage import NoUsableCapacityError
from swarmjot.core.production_guard import ProductionConfigError
from swarmjot.core.reference import InvalidReferenceError

console = Console()

T = TypeVar("T")

ENGINE_ERRORS: tuple[type[Exception], ...] = (
    BeeApiError,
    ContentMalformedError,
    ContentUnavailableError,
    InvalidReferenceError,
    NoUsableCapacityError,
    ProductionConfigError,
    UploadFailedError,
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def load_config() -> SwarmjotConfig:
    return SwarmjotConfig()


def make_http_client(config: SwarmjotConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.request_timeout_seconds)


@asynccontextmanager
async def engine_session(config: SwarmjotConfig | None = None) -> AsyncIterator[ContentEngine]:
    """Engine over the configured node with persisted local state."""
    config = config or load_config()
    store = SQLiteStore(config.state_path)
    client = make_http_client(config)
    try:
        yield ContentEngine(config, http_client=client, store=store)
    finally:
        await client.aclose()
        store.close()


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` to completion; engine errors exit with status 1."""
    try:
        return asyncio.run(coro)
    except ENGINE_ERRORS as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc
