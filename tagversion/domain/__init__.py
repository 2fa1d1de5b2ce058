"""
Domain layer for tagversion.

Contains pure domain objects with no I/O or side effects:
- Commit / CommitGraph: Immutable history nodes and the arena holding them
- TagRef: A tag name bound to the commit it points at
- ResolvedVersion: Exact or pseudo-version of a commit
- TreeEntry: Directory listing entry at a revision
"""

from .commit import Commit, CommitGraph
from .version import TagRef, ResolvedVersion, TreeEntry

__all__ = [
    'Commit',
    'CommitGraph',
    'TagRef',
    'ResolvedVersion',
    'TreeEntry',
]
