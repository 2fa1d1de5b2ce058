"""
Infrastructure layer for tagversion.

Wraps the external `git` executable:
- GitClient: Tags, revisions, history and content reads, clone/fetch
"""

from .git_client import GitClient, GitResult

__all__ = [
    'GitClient',
    'GitResult',
]
