"""synchro CLI"""

import click

from synchro import __version__
from synchro.cli.cache import cache
from synchro.cli.module import module
from synchro.cli.sync import sync

from .options import add_debug_option


@click.group()
@click.version_option(__version__, prog_name="synchro")
@click.pass_context
def cli(ctx):
    """
    Synchronize git working directories through a shared mirror cache.
    """
    ctx.ensure_object(dict)


cli.add_command(add_debug_option(sync))
cli.add_command(module)
cli.add_command(cache)

add_debug_option(cli)

if __name__ == "__main__":
    cli(obj={})
