"""
Handles the 'head' command group: branch, commit and tag of HEAD.
"""

import click

from ..cli_utils import standard_command, add_common_options, version_service


@click.group(name='head')
def head_cmd():
    """Inspect the checked out HEAD.

    \b
        tagversion head branch     # main
        tagversion head sha        # 4f1c0e...
        tagversion head tag        # v1.2.0
    """
    pass


@head_cmd.command('branch')
@add_common_options('format', 'quiet')
@click.pass_obj
@standard_command
def head_branch(obj, format, quiet):
    """Print the checked out branch (fails when HEAD is detached)."""
    return version_service(obj).head_branch()


@head_cmd.command('sha')
@add_common_options('format', 'quiet')
@click.pass_obj
@standard_command
def head_sha(obj, format, quiet):
    """Print the commit id of HEAD."""
    return version_service(obj).head_sha()


@head_cmd.command('tag')
@add_common_options('prefix', 'format', 'quiet')
@click.pass_obj
@standard_command
def head_tag(obj, tag_prefix, format, quiet):
    """Print the tag of HEAD.

    Without a prefix, namespaced version tags (module-a/v1.0.0) are ignored.
    With --prefix module-a only module-a/... tags count. Exits with an error
    when HEAD has no such tag, or more than one.
    """
    return version_service(obj).head_tag(tag_prefix)
