"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
import click
from functools import wraps
from typing import Any
from rich.console import Console

from .errors import TagVersionError
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception,
)
from .format_utils import FORMATS, format_output, get_format_from_env

err_console = Console(stderr=True)


def _as_dict(item: Any) -> Any:
    if hasattr(item, 'to_dict'):
        return item.to_dict()
    return item


def output_result(result: Any, output_format: str = None, fields=None) -> None:
    """
    Standard output handler for results.

    Plain strings are printed as-is unless a format is requested, so
    `tagversion resolve HEAD` can be used directly in shell scripts.
    Everything else is formatted (JSONL by default).

    Args:
        result: str, domain object, dict, or a list of those
        output_format: One of FORMATS, or None
        fields: Columns for CSV/TSV
    """
    if isinstance(result, str) and output_format is None:
        print(result, flush=True)
        return

    if isinstance(result, (list, tuple)):
        items = [_as_dict(item) for item in result]
    elif isinstance(result, str):
        items = [{'value': result}]
    else:
        items = [_as_dict(result)]

    for line in format_output(iter(items), output_format or 'jsonl', fields):
        print(line, flush=True)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Clean data output on stdout
    - Automatic --quiet/-q handling to suppress data output
    - Errors as a red message on stderr plus a JSON object on stdout
    - Exit codes from tagversion.exit_codes
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        quiet = kwargs.get('quiet', False)
        output_format = kwargs.get('format') or get_format_from_env()
        fields_str = kwargs.get('fields', None)
        fields = fields_str.split(',') if fields_str else None

        try:
            result = func(*args, **kwargs)

            if not quiet and result is not None:
                output_result(result, output_format, fields)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            err_console.print("[red]Interrupted by user[/red]")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except TagVersionError as e:
            exit_code = get_exit_code_for_exception(e)
            err_console.print(f"[red]Error:[/red] {e}", highlight=False)
            if not quiet:
                error_obj = e.to_dict()
                error_obj['exit_code'] = exit_code
                print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(exit_code)
        except Exception as e:
            exit_code = get_exit_code_for_exception(e)
            err_console.print(f"[red]Command failed:[/red] {e}", highlight=False)
            if not quiet:
                error_obj = {
                    "error": str(e),
                    "type": type(e).__name__,
                    "exit_code": exit_code,
                }
                print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(exit_code)

    return wrapper


# Standard options that many commands share
common_options = {
    'quiet': click.option('-q', '--quiet', is_flag=True,
                          help='Suppress data output, keep only the exit code'),
    'format': click.option('-f', '--format',
                           type=click.Choice(list(FORMATS)),
                           help='Output format (default: plain text or jsonl, or from TAGVERSION_FORMAT env)'),
    'fields': click.option('--fields',
                           help='Comma-separated list of fields to include (for CSV/TSV)'),
    'prefix': click.option('-p', '--prefix', 'tag_prefix', default=None,
                           help='Version tag namespace, e.g. "module-a" for "module-a/v1.2.3" '
                                '(default: TAGVERSION_TAG_PREFIX env, then config)'),
    'pretty': click.option('--pretty', is_flag=True,
                           help='Display as a formatted table'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('quiet', 'format')
        def my_command(quiet, format):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator


def repo_dir(obj) -> str:
    """Repository directory for a command: -C/--dir, else the enclosing working tree."""
    from .utils import top_level
    return obj.get('dir') or top_level('.')


def version_service(obj):
    """VersionService for the repository selected on the command line."""
    from .services.version_service import VersionService
    return VersionService(repo_dir(obj), config=obj.get('config'))
