"""Options shared by synchro commands"""

from pathlib import Path
from typing import Optional

import click

from synchro.config import get_git_cache_dir
from synchro.git import SynchroRegistry

from .utils.logging import configure_logging


def _set_debug(ctx, param, value: bool):
    """Callback for the debug flag.

    Any command level may turn debug on, only the top level may turn it off.
    """
    root_ctx = ctx.find_root()
    root_ctx.ensure_object(dict)
    root_ctx.obj.setdefault("DEBUG", False)

    if value is True or len(ctx.command_path.split()) == 1:
        root_ctx.obj["DEBUG"] = value

    configure_logging(root_ctx.obj["DEBUG"])
    return root_ctx.obj["DEBUG"]


def add_debug_option(cmd: click.Command) -> click.Command:
    """Add a --debug/--no-debug flag to a command or group"""
    if not any(param.name == "debug" for param in cmd.params):
        cmd.params.insert(
            0,
            click.Option(
                ["--debug/--no-debug"],
                is_eager=True,
                expose_value=False,
                callback=_set_debug,
                help="Enable debug mode",
            ),
        )
    return cmd


cache_root_option = click.option(
    "--cache-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    envvar="SYNCHRO_CACHE_ROOT",
    help="Directory holding the git mirrors. Defaults to the configured git_cache.",
)

no_cache_option = click.option(
    "--no-cache",
    is_flag=True,
    default=False,
    help="Clone and fetch straight from the remotes, without mirrors.",
)

update_cache_option = click.option(
    "--cache-update/--no-cache-update",
    "update_cache",
    default=True,
    help="Refresh the git mirror before synchronizing.",
)

trace_option = click.option(
    "--trace",
    is_flag=True,
    default=False,
    help="Show the traceback of failed synchronizations.",
)


def make_registry(cache_root: Optional[Path], no_cache: bool = False) -> SynchroRegistry:
    if no_cache:
        return SynchroRegistry()
    if cache_root is None:
        cache_root = get_git_cache_dir()
    return SynchroRegistry(cache_root=cache_root)
