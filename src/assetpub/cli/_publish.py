"""The publish and hash commands."""

from __future__ import annotations

import json

import click

from .._exclude import read_patterns
from ..exceptions import PublishError
from ..publisher import AssetRequest, destination_name
from ._helpers import (
    main,
    _base_path_option,
    _base_url_option,
    _build_config,
    _hash_by_name_option,
    _lock_path_option,
    _open_publisher,
    _parse_mode,
    _status,
)


@main.command()
@click.argument("paths", nargs=-1, required=True)
@_base_path_option
@_base_url_option
@_lock_path_option
@_hash_by_name_option
@click.option("--level", "-l", type=int, default=-1, show_default=True,
              help="Recursion depth for directories (-1: all, 0: top-level files only).")
@click.option("--force-copy", is_flag=True, default=False,
              help="Copy directories even if already published.")
@click.option("--exclude", multiple=True,
              help="Exclude a name or /relative/path (repeatable, replaces the defaults).")
@click.option("--file-type", "file_types", multiple=True,
              help="Only copy files with this extension from directories (repeatable).")
@click.option("--ignore", "ignore_patterns", multiple=True,
              help="Ignore files matching pattern (gitignore syntax, repeatable).")
@click.option("--ignore-from", type=click.Path(exists=True, dir_okay=False),
              help="Read ignore patterns from file.")
@click.option("--link/--no-link", "link_assets", default=None,
              help="Symlink instead of copying (local destinations only).")
@click.option("--file-mode", callback=_parse_mode, help="Octal mode for copied files.")
@click.option("--dir-mode", callback=_parse_mode, help="Octal mode for created directories.")
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Print results as JSON.")
@click.option("--watch", is_flag=True, default=False,
              help="Watch the sources and republish on every change.")
@click.option("--debounce", type=int, default=1000, show_default=True,
              help="Debounce delay in ms for --watch.")
@click.pass_context
def publish(ctx, paths, base_path, base_url, lock_path, hash_by_name, level,
            force_copy, exclude, file_types, ignore_patterns, ignore_from,
            link_assets, file_mode, dir_mode, as_json, watch, debounce):
    """Publish PATHS and print their public URLs, one per line.

    \b
    Examples:
        assetpub publish -b /var/www/assets -u https://example.com/assets app.css
        assetpub publish -b ftp://user:pw@ftp.example.com/assets static/
        assetpub publish --file-type js --file-type css --level 0 static/
    """
    patterns = list(ignore_patterns)
    if ignore_from:
        patterns.extend(read_patterns(ignore_from))

    config = _build_config(
        path=base_path,
        url=base_url,
        lock_path=lock_path,
        exclude=tuple(exclude) or None,
        file_types=tuple(file_types) or None,
        ignore_patterns=tuple(patterns) or None,
        link_assets=link_assets,
        new_file_mode=file_mode,
        new_dir_mode=dir_mode,
    )
    publisher = _open_publisher(config)
    _status(ctx, f"Publishing to {publisher.base_path} ({publisher.base_url})")

    if watch:
        from ._watch import watch_and_publish
        watch_and_publish(publisher, list(paths), debounce=debounce,
                          hash_by_name=hash_by_name, level=level)
        return

    results = []
    for path in paths:
        try:
            asset = publisher.publish_request(
                AssetRequest(path, hash_by_name, level, force_copy),
            )
        except PublishError as exc:
            raise click.ClickException(str(exc))
        results.append(asset)
        if not as_json:
            click.echo(asset.url)

    if as_json:
        click.echo(json.dumps([
            {"path": a.source_path, "dest_dir": a.dest_dir, "url": a.url}
            for a in results
        ], indent=2))


@main.command("hash")
@click.argument("path")
@_hash_by_name_option
@click.option("--salt", envvar="ASSETPUB_HASH_SALT", default="",
              help="Hash salt (or set ASSETPUB_HASH_SALT).")
def hash_cmd(path, hash_by_name, salt):
    """Print the directory name PATH is published under."""
    try:
        click.echo(destination_name(path, hash_by_name, salt))
    except PublishError as exc:
        raise click.ClickException(str(exc))
