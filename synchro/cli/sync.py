"""cli command to synchronize a single working directory"""

import sys
from pathlib import Path

import click

from synchro.cli.utils.logging import logger
from synchro.git import ExecutionFailure

from .options import (
    cache_root_option,
    make_registry,
    no_cache_option,
    trace_option,
    update_cache_option,
)


@click.command(name="sync")
@click.argument("remote")
@click.argument("path", type=click.Path(file_okay=False, path_type=Path))
@click.argument("ref", default="HEAD")
@cache_root_option
@no_cache_option
@update_cache_option
@trace_option
def sync(remote, path, ref, cache_root, no_cache, update_cache, trace):
    """Synchronize PATH to REF (default HEAD) of the git repository REMOTE.

    PATH is cloned if it is not a git working directory yet, fetched
    otherwise, and reset to the commit REF resolves to. Local changes in
    PATH are discarded.

    Example:

      synchro sync https://example.com/org/apache.git modules/apache v1.2.0
    """
    registry = make_registry(cache_root, no_cache)
    synchro = registry.get_or_create(remote)

    try:
        commit = synchro.sync(path, ref, update_cache=update_cache)
    except ExecutionFailure as e:
        logger.error(
            click.style("[ERROR]", fg="red", bold=True)
            + f" Could not synchronize {path}: {e}",
            exc_info=trace,
        )
        if e.stderr:
            logger.error(e.stderr.rstrip())
        sys.exit(1)

    logger.info(f"Synchronized {path} to {ref} ({commit[:7]})")
