"""
Handles the 'tags' command: version tags of the repository.
"""

import click

from ..cli_utils import standard_command, add_common_options, version_service
from ..render import render_tags_table, render_versions_table
from ..versioning import filter_version_tags, version_sort_key


@click.command(name='tags')
@click.option('--all', 'show_all', is_flag=True, help='List every tag, not only version tags')
@add_common_options('prefix', 'pretty', 'format', 'fields', 'quiet')
@click.pass_obj
@standard_command
def tags_handler(obj, show_all, tag_prefix, pretty, format, fields, quiet):
    """List version tags and the commits they mark.

    Output is JSONL by default; use --pretty for a table.

    Examples:

    \b
        tagversion tags
        tagversion tags -p module-a --pretty
        tagversion tags --all -f csv
    """
    service = version_service(obj)

    if show_all:
        tags = service.tag_refs()
        if pretty:
            render_tags_table(tags)
            return None
        return tags

    prefix = service.active_prefix(tag_prefix)
    tag_index = service.tag_index()
    versions = filter_version_tags(tag_index, prefix)

    if pretty:
        render_versions_table(versions, tag_index, prefix)
        return None

    return [
        {'commit': sha, 'version': version, 'prefix': prefix}
        for sha, version in sorted(versions.items(), key=lambda kv: version_sort_key(kv[1]))
    ]
