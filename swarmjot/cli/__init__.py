"""swarmjot CLI — Typer-based command-line interface.

Provides the ``swarmjot`` command with subcommands for inspecting the node,
uploading files and directories, reading and publishing articles, generating
signing keys, and running an offline demo.

All output uses Rich for formatted terminal display.
"""
