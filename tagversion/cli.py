#!/usr/bin/env python3

import click

from tagversion.config import load_config, configure_logging
from tagversion.commands.resolve import resolve_handler
from tagversion.commands.head import head_cmd
from tagversion.commands.tags import tags_handler
from tagversion.commands.sync import sync_handler
from tagversion.commands.content import show_handler, ls_handler
from tagversion.commands.toplevel import toplevel_handler
from tagversion.commands.config import config_cmd


@click.group()
@click.version_option(package_name='tagversion')
@click.option('-C', '--dir', 'directory', default=None, type=click.Path(file_okay=False),
              help='Repository directory (default: top level of the current working tree)')
@click.option('-v', '--verbose', is_flag=True, help='Log debug output to stderr')
@click.pass_context
def cli(ctx, directory, verbose):
    """tagversion - Semantic versions for any commit, derived from git tags.

    Tagged commits resolve to their tag (v1.2.0 -> 1.2.0); every other
    commit resolves to the nearest tagged ancestor plus its own sha
    (1.2.0-4f1c0e...). Commits with no tagged ancestor resolve to 0.0.0.
    """
    config = load_config()
    configure_logging(config, verbose=verbose)
    ctx.obj = {'dir': directory, 'config': config}


# Version resolution
cli.add_command(resolve_handler, name='resolve')
cli.add_command(tags_handler, name='tags')
cli.add_command(head_cmd)

# Repository content and maintenance
cli.add_command(sync_handler, name='sync')
cli.add_command(show_handler, name='show')
cli.add_command(ls_handler, name='ls')
cli.add_command(toplevel_handler, name='toplevel')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
