"""
Handles the 'resolve' command: the version of a reference.

Prints the bare version ("1.2.3") for tagged commits and the pseudo-version
("1.2.3-<sha>") otherwise, ready to use in release scripts:

    VERSION=$(tagversion resolve HEAD)
"""

import click

from ..cli_utils import standard_command, add_common_options, version_service
from ..render import render_resolved


@click.command(name='resolve')
@click.argument('ref', default='HEAD', required=False)
@add_common_options('prefix', 'pretty', 'format', 'quiet')
@click.pass_obj
@standard_command
def resolve_handler(obj, ref, tag_prefix, pretty, format, quiet):
    """Resolve the version of a branch, tag or commit.

    REF: Any git revision (default: HEAD), e.g. v1.2.0, main,
    origin/feature-x, a commit hash, HEAD~3.

    Examples:

    \b
        tagversion resolve                     # 1.2.0-4f1c...
        tagversion resolve v1.2.0              # 1.2.0
        tagversion resolve origin/main -f json
        tagversion resolve HEAD -p module-a    # versions from module-a/vX.Y.Z tags
        tagversion resolve main --pretty
    """
    resolved = version_service(obj).resolve(ref, tag_prefix)
    if pretty:
        render_resolved(resolved)
        return None
    if format:
        return resolved
    return resolved.value
