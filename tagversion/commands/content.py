"""
Handles the 'show' and 'ls' commands: content at a revision.

Both read from the object store; the working tree is never checked out
or modified.
"""

import sys

import click

from ..cli_utils import standard_command, add_common_options, repo_dir
from ..infra.git_client import GitClient
from ..render import render_tree_table


def _client(obj) -> GitClient:
    return GitClient.from_config(obj.get('config'))


@click.command(name='show')
@click.argument('path')
@click.option('-r', '--ref', default='HEAD', help='Revision to read from (default: HEAD)')
@click.pass_obj
@standard_command
def show_handler(obj, path, ref):
    """Print a file as it is stored at a revision.

    \b
        tagversion show README.md
        tagversion show helm/values.yaml --ref v1.2.0
    """
    directory = repo_dir(obj)
    git = _client(obj)
    sha = git.resolve_revision(directory, ref)
    content = git.show_file(directory, sha, path)

    sys.stdout.flush()
    sys.stdout.buffer.write(content)
    sys.stdout.buffer.flush()
    return None


@click.command(name='ls')
@click.argument('path', default='.', required=False)
@click.option('-r', '--ref', default='HEAD', help='Revision to read from (default: HEAD)')
@add_common_options('pretty', 'format', 'fields', 'quiet')
@click.pass_obj
@standard_command
def ls_handler(obj, path, ref, pretty, format, fields, quiet):
    """List a directory as it is stored at a revision.

    \b
        tagversion ls
        tagversion ls helm --ref origin/main --pretty
    """
    directory = repo_dir(obj)
    git = _client(obj)
    sha = git.resolve_revision(directory, ref)
    entries = git.list_tree(directory, sha, path)

    if pretty:
        render_tree_table(entries, title=f"{path} @ {ref}")
        return None
    return entries
