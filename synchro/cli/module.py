"""cli commands to deploy the modules of a manifest"""

import sys
from pathlib import Path

import click

from synchro.action import deploy_modules
from synchro.cli.utils.logging import logger
from synchro.git import SynchroRegistry
from synchro.model import Manifest, ManifestParseError

from .options import (
    add_debug_option,
    cache_root_option,
    make_registry,
    no_cache_option,
    trace_option,
    update_cache_option,
)

manifest_argument = click.argument(
    "manifest_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)


def _load_manifest(manifest_path: Path) -> Manifest:
    try:
        return Manifest.from_file(manifest_path)
    except ManifestParseError as e:
        logger.error(f"Failed to load manifest: {e}")
        sys.exit(1)


@click.group(name="module")
def module():
    """Operate on the modules of a manifest."""
    pass


@add_debug_option
@module.command("deploy")
@manifest_argument
@click.argument("names", nargs=-1)
@cache_root_option
@no_cache_option
@update_cache_option
@trace_option
def deploy(manifest_path, names, cache_root, no_cache, update_cache, trace):
    """Deploy the modules of MANIFEST_PATH, or only those in NAMES.

    Every module is attempted even if others fail. Exits with status 1 if
    any module could not be synchronized.

    Example:

      synchro module deploy synchro.yaml apache nginx
    """
    manifest = _load_manifest(manifest_path)
    registry = make_registry(cache_root, no_cache)

    try:
        modules = manifest.git_modules(registry, list(names))
    except KeyError as e:
        logger.error(e.args[0])
        sys.exit(1)

    if not modules:
        logger.info("No modules found in manifest")
        return

    report = deploy_modules(modules, update_cache=update_cache, trace=trace)

    logger.info(f"Deployed {len(report.succeeded)}/{report.total} modules")
    if not report.ok:
        logger.warning(f"Failed to deploy {len(report.failed)} modules:")
        for name in report.failed:
            logger.warning(f"  {name}")
        sys.exit(1)


@module.command("list")
@manifest_argument
def list_modules(manifest_path):
    """List the modules of MANIFEST_PATH with their ref and location."""
    manifest = _load_manifest(manifest_path)
    # Listing does no git work, a registry without cache will do
    for mod in manifest.git_modules(SynchroRegistry()):
        click.echo(f"{mod.name:<24} {mod.ref:<16} {mod.full_path}  ({mod.remote})")
