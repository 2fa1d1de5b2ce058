"""
Rendering functions for tagversion output.

This module handles all pretty-printing and table formatting.
Commands return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Dict, List, Optional

from .domain.version import ResolvedVersion, TagRef, TreeEntry
from .versioning import version_sort_key

console = Console()


def render_table(headers: List[str], rows: List[List[str]], title: Optional[str] = None) -> None:
    """
    Render a generic table with the given headers and rows.

    Args:
        headers: List of column headers
        rows: List of rows, where each row is a list of values
        title: Optional table title
    """
    if not rows:
        console.print("[yellow]No data to display.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    for header in headers:
        table.add_column(header)

    for row in rows:
        table.add_row(*[str(cell) for cell in row])

    console.print(table)


def render_versions_table(versions: Dict[str, str], tag_index: Dict[str, List[str]], prefix: str = "") -> None:
    """Render tagged commits with their version and tag names."""
    title = f"Versions (prefix: {prefix})" if prefix else "Versions"
    rows = [
        [sha[:12], version, ", ".join(tag_index.get(sha, []))]
        for sha, version in sorted(versions.items(), key=lambda kv: version_sort_key(kv[1]))
    ]
    render_table(["Commit", "Version", "Tags"], rows, title=title)


def render_tags_table(tags: List[TagRef]) -> None:
    """Render every tag of the repository."""
    rows = [
        [tag.name, tag.commit[:12], "annotated" if tag.annotated else "lightweight"]
        for tag in sorted(tags, key=lambda t: t.name)
    ]
    render_table(["Tag", "Commit", "Kind"], rows, title="Tags")


def render_tree_table(entries: List[TreeEntry], title: Optional[str] = None) -> None:
    """Render a directory listing."""
    rows = [
        [
            f"[blue]{entry.name}/[/blue]" if entry.is_dir else entry.name,
            entry.type,
            entry.mode,
            "" if entry.size is None else entry.size,
        ]
        for entry in entries
    ]
    render_table(["Name", "Type", "Mode", "Size"], rows, title=title)


def render_resolved(resolved: ResolvedVersion) -> None:
    """Render a resolved version with the commit and tag it came from."""
    rows = [
        ["Ref", resolved.ref or ""],
        ["Commit", resolved.commit],
        ["Version", f"[bold green]{resolved.value}[/bold green]"],
        ["Base version", resolved.base_version],
        ["Exact", "yes" if resolved.exact else "no"],
    ]
    if resolved.prefix:
        rows.append(["Prefix", resolved.prefix])
    render_table(["Field", "Value"], rows)
