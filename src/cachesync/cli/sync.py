"""Sync command."""

import click

from ..config import SyncConfig
from ..sync import SyncState, create
from .scope import command_scope, verbose_option


@click.command("sync")
@click.option(
    "--keep",
    type=click.IntRange(min=1),
    default=None,
    help="Number of caches to keep published (default: $CACHESYNC_KEEP or 2)",
)
@click.option(
    "--staging-dir",
    default=None,
    help="Work directory holding the temp_cache_download staging directory "
    "(default: $CACHESYNC_STAGING_DIR or .)",
)
@click.option("--bucket", default=None, help="R2 bucket name (default: $R2_BUCKET_NAME)")
@verbose_option
def sync_cmd(keep: int | None, staging_dir: str | None, bucket: str | None, verbose: bool) -> None:
    """Publish the newest OpenRS2 cache and prune old ones.

    Credentials are read from the R2_ACCOUNT_ID, R2_ACCESS_KEY_ID and
    R2_SECRET_ACCESS_KEY variables, taken from the environment or from
    a .env file in the current directory.

    \b
    Exit code is zero when the cache was published or was already
    up to date, and 1 on failure.
    """
    with command_scope(verbose):
        config = SyncConfig.from_env().with_overrides(
            bucket=bucket,
            staging_dir=staging_dir,
            keep=keep,
        )
        result = create(config).run()
        if result.state == SyncState.NOOP:
            click.echo("Nothing to publish.")
            return
        click.echo(f"Published {result.name} ({result.uploaded} file(s)).")
        for entry in result.removed:
            click.echo(f"Removed {entry.name}.")
