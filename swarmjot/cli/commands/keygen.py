"""``swarmjot keygen`` — generate an Ed25519 key-pair for website publishing."""

from __future__ import annotations

from rich.panel import Panel

from swarmjot.bridge.crypto_bridge import generate_keypair, key_fingerprint
from swarmjot.cli.runtime import console


def keygen_cmd() -> None:
    """Generate a signing key; the public key becomes the website owner."""
    private_key, public_key = generate_keypair()
    console.print(
        Panel(
            f"[bold]Private key[/bold] (keep secret, set SWARMJOT_SIGNING_KEY):\n"
            f"{private_key}\n\n"
            f"[bold]Public key[/bold] (website owner):\n{public_key}\n\n"
            f"[dim]Fingerprint: {key_fingerprint(public_key)}[/dim]",
            title="New signing key",
            border_style="cyan",
            padding=(1, 2),
        )
    )
