"""CLI commands for git mirror cache management"""

import sys

import click

from synchro.cli.utils.logging import logger
from synchro.git import ExecutionFailure

from .options import add_debug_option, cache_root_option, make_registry


@click.group(name="cache")
def cache():
    """Manage the git mirror cache."""
    pass


@add_debug_option
@cache.command("populate")
@click.argument("remotes", nargs=-1, required=True)
@cache_root_option
def populate(remotes, cache_root):
    """Create or refresh the mirrors of REMOTES.

    Example:

      synchro cache populate https://example.com/org/apache.git
    """
    registry = make_registry(cache_root)
    logger.info(f"Cache directory: {registry.cache_root}")

    unique_remotes = list(dict.fromkeys(remotes))
    success_count = 0
    failed = []

    for remote in unique_remotes:
        logger.info(f"Caching {remote}")
        try:
            registry.get_or_create(remote).cache()
            success_count += 1
        except ExecutionFailure as e:
            logger.error(f"Failed to cache {remote}: {e}")
            failed.append((remote, e.stderr.strip() or str(e)))

    logger.info(f"Successfully cached {success_count}/{len(unique_remotes)} repositories")

    if failed:
        logger.warning(f"Failed to cache {len(failed)} repositories:")
        for remote, error in failed:
            logger.warning(f"  {remote}: {error}")
        sys.exit(1)


@add_debug_option
@cache.command("branches")
@click.argument("remote")
@click.option(
    "--update",
    is_flag=True,
    default=False,
    help="Refresh the mirror before listing.",
)
@cache_root_option
def branches(remote, update, cache_root):
    """List the branches of REMOTE known to its mirror."""
    synchro = make_registry(cache_root).get_or_create(remote)
    try:
        names = synchro.branches(update_cache=update)
    except ExecutionFailure as e:
        logger.error(f"Could not list branches of {remote}: {e}")
        sys.exit(1)
    for name in names:
        click.echo(name)


@cache.command("list")
@cache_root_option
def list_cache(cache_root):
    """Describe the mirrors in the cache."""
    registry = make_registry(cache_root)
    mirrors = registry.store.describe()

    if not mirrors:
        click.echo(f"No mirrors in {registry.cache_root}")
        return

    for mirror in mirrors:
        head = mirror["head"][:7] if mirror["head"] else "-"
        click.echo(
            f"{mirror['url']}\n"
            f"  path: {registry.cache_root / mirror['name']}\n"
            f"  default branch: {mirror['default_branch'] or '-'} ({head})\n"
            f"  branches: {mirror['branches']}"
        )
