"""
Handles the 'sync' command: clone or fetch a repository.
"""

import os

import click

from ..api import Repo, RepoConfig
from ..cli_utils import standard_command, add_common_options


@click.command(name='sync')
@click.option('--url', default='', help='Remote URL (default: origin of an existing clone)')
@click.option('--token', envvar='TAGVERSION_AUTH_TOKEN', default='',
              help='Token for HTTP basic auth (or TAGVERSION_AUTH_TOKEN env)')
@add_common_options('format', 'quiet')
@click.pass_obj
@standard_command
def sync_handler(obj, url, token, format, quiet):
    """Clone a repository, or fetch all branches and tags into an existing clone.

    Uses the directory given with -C/--dir (default: current directory).

    \b
        tagversion -C /tmp/checkouts/app sync --url https://github.com/org/app.git
        tagversion -C /tmp/checkouts/app sync
    """
    directory = obj.get('dir') or os.getcwd()
    repo = Repo(
        RepoConfig(dir=directory, url=url, auth_basic_token=token),
        settings=obj.get('config'),
    )
    repo.ensure_up_to_date()

    return {
        'dir': repo.dir,
        'url': repo.url,
        'head': repo.head_sha(),
    }
