"""
Handles the 'toplevel' command.
"""

import click

from ..cli_utils import standard_command, add_common_options
from ..utils import top_level


@click.command(name='toplevel')
@click.argument('path', default='.', required=False, type=click.Path())
@add_common_options('format', 'quiet')
@standard_command
def toplevel_handler(path, format, quiet):
    """Print the top-level directory of the working tree containing PATH."""
    return top_level(path)
