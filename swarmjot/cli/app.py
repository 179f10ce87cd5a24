"""Main Typer application — imports and registers all CLI commands.

Entry point: ``swarmjot`` (configured via pyproject.toml scripts).

Commands: stamps, status, upload, upload-dir, fetch, read, publish-article,
keygen, demo.
"""

from __future__ import annotations

import typer

from swarmjot import __version__
from swarmjot.cli.commands.demo import demo_cmd
from swarmjot.cli.commands.keygen import keygen_cmd
from swarmjot.cli.commands.node import stamps_cmd, status_cmd
from swarmjot.cli.commands.publish import publish_article_cmd
from swarmjot.cli.commands.read import fetch_cmd, read_cmd
from swarmjot.cli.commands.upload import upload_cmd, upload_dir_cmd
from swarmjot.cli.runtime import configure_logging, console, load_config

app = typer.Typer(
    name="swarmjot",
    help="swarmjot: publish and read articles on a content-addressed storage network.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Configure logging before any command runs."""
    configure_logging("DEBUG" if verbose else load_config().log_level)


# Register subcommands
app.command(name="stamps", help="List the node's postage batches.")(stamps_cmd)
app.command(name="status", help="Show node and gateway status.")(status_cmd)
app.command(name="upload", help="Upload a single file.")(upload_cmd)
app.command(name="upload-dir", help="Upload a directory as a collection or website.")(upload_dir_cmd)
app.command(name="fetch", help="Fetch raw content by reference.")(fetch_cmd)
app.command(name="read", help="Read a published article.")(read_cmd)
app.command(name="publish-article", help="Publish a markdown file as an article.")(publish_article_cmd)
app.command(name="keygen", help="Generate a website signing key.")(keygen_cmd)
app.command(name="demo", help="Run an offline publish/read/layout round trip.")(demo_cmd)


@app.command(name="version", help="Print the swarmjot version.")
def version_cmd() -> None:
    console.print(f"swarmjot {__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
