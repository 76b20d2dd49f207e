"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

import logging

import click

from ..config import PublisherConfig
from ..exceptions import ConfigError, TransferError
from ..publisher import AssetPublisher


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _setup_logging(verbose: bool) -> None:
    """Send the ``assetpub`` logger to stderr (DEBUG with -v, else WARNING)."""
    logger = logging.getLogger("assetpub")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    for h in list(logger.handlers):
        if getattr(h, "_assetpub_cli", False):
            logger.removeHandler(h)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    handler._assetpub_cli = True
    logger.addHandler(handler)


def _parse_mode(ctx, param, value):
    """Click callback: parse an octal permission mode such as ``644``."""
    if value is None:
        return None
    try:
        return int(value, 8)
    except ValueError:
        raise click.BadParameter(f"not an octal mode: {value}")


def _base_path_option(f):
    """Shared --base-path/-b option."""
    return click.option(
        "--base-path", "-b", envvar="ASSETPUB_BASE_PATH",
        help="Directory or ftp(s):// address receiving assets (or set ASSETPUB_BASE_PATH).",
    )(f)


def _base_url_option(f):
    """Shared --base-url/-u option."""
    return click.option(
        "--base-url", "-u", envvar="ASSETPUB_BASE_URL",
        help="Public URL of the base path (or set ASSETPUB_BASE_URL).",
    )(f)


def _lock_path_option(f):
    """Shared --lock-path option."""
    return click.option(
        "--lock-path", type=click.Path(file_okay=False), envvar="ASSETPUB_LOCK_PATH",
        help="Directory for lock markers; enables locking (or set ASSETPUB_LOCK_PATH).",
    )(f)


def _hash_by_name_option(f):
    """Shared --hash-by-name flag."""
    return click.option(
        "--hash-by-name", is_flag=True, default=False,
        help="Name the published directory after the asset's basename.",
    )(f)


def _build_config(**values) -> PublisherConfig:
    """Build a config from the environment, with CLI *values* on top."""
    try:
        return PublisherConfig.from_env(**values)
    except ConfigError as exc:
        raise click.ClickException(str(exc))


def _open_publisher(config: PublisherConfig) -> AssetPublisher:
    try:
        return AssetPublisher.from_config(config)
    except (ConfigError, TransferError) as exc:
        raise click.ClickException(str(exc))


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.pass_context
def main(ctx, verbose):
    """assetpub: publish assets under stable, hashed URLs.

    Copies files and directories into a web-visible directory (local or
    FTP) under a name derived from a hash of their source path, and
    prints the public URL.

    \b
    Quick start:
      export ASSETPUB_BASE_PATH=/var/www/assets
      export ASSETPUB_BASE_URL=https://example.com/assets
      assetpub publish static/app.css
      assetpub publish --level 0 static/images

    \b
    Commands:
      publish     Publish files or directories and print their URLs
      hash        Print the directory name an asset is published under
      locks       List lock markers
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _setup_logging(verbose)
