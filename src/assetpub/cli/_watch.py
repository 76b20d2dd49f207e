"""Watch mode for the publish command."""

from __future__ import annotations

import datetime

import click

from ..exceptions import PublishError


def _import_watchfiles():
    """Import watchfiles on first use of ``publish --watch``."""
    try:
        import watchfiles
    except ImportError:
        raise click.ClickException(
            "publish --watch republishes on change through watchfiles, which is not installed.\n"
            "Add it with: pip install 'assetpub[watch]'"
        )
    return watchfiles


def _run_publish_cycle(publisher, paths, *, hash_by_name, level, force_copy):
    """Publish every path once, bypassing the publisher's cache."""
    publisher.cache.clear()
    now = datetime.datetime.now().strftime("%H:%M:%S")
    for path in paths:
        url = publisher.publish(path, hash_by_name, level, force_copy)
        click.echo(f"[{now}] {path} -> {url}")


def watch_and_publish(publisher, paths, *, debounce, hash_by_name, level):
    """Watch *paths* and republish them on every change batch.

    Directories are force-copied on each change.  Locked assets are
    never republished; use --watch without --lock-path.
    """
    watchfiles = _import_watchfiles()

    click.echo(f"Watching {', '.join(paths)} -> {publisher.base_url} (debounce {debounce}ms)")
    try:
        _run_publish_cycle(publisher, paths, hash_by_name=hash_by_name,
                           level=level, force_copy=False)
    except PublishError as exc:
        click.echo(f"ERROR: Initial publish failed: {exc}", err=True)

    try:
        for _changes in watchfiles.watch(*paths, debounce=debounce):
            try:
                _run_publish_cycle(publisher, paths, hash_by_name=hash_by_name,
                                   level=level, force_copy=True)
            except PublishError as exc:
                click.echo(f"ERROR: Publish failed: {exc}", err=True)
    except KeyboardInterrupt:
        click.echo("\nStopped watching.")
