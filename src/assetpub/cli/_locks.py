"""The locks command."""

from __future__ import annotations

import click

from ..lock import LockManager
from ._helpers import main, _lock_path_option


@main.command()
@_lock_path_option
@click.option("--paths", "show_paths", is_flag=True, default=False,
              help="Print marker file paths instead of asset keys.")
def locks(lock_path, show_paths):
    """List locked assets.

    To republish a locked asset, delete its marker file.
    """
    if not lock_path:
        raise click.ClickException(
            "No lock directory specified. Use --lock-path or set ASSETPUB_LOCK_PATH."
        )
    manager = LockManager(lock_path)
    for key in manager.list():
        click.echo(manager.marker(key) if show_paths else key)
