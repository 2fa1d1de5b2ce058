"""
Version domain objects for tagversion.

- TagRef: a tag name bound to the commit it finally points at
- ResolvedVersion: the outcome of resolving a reference
- TreeEntry: an entry of a directory listing at a revision
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TagRef:
    """
    A tag pointing at a commit.

    Annotated tags are stored with the commit they dereference to, never
    with the id of the tag object itself.
    """

    name: str
    commit: str
    annotated: bool = False

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'commit': self.commit,
            'annotated': self.annotated,
        }


@dataclass(frozen=True)
class ResolvedVersion:
    """
    Version of a commit.

    Exact versions come from a version tag on the commit itself ("1.2.3").
    Otherwise it is a pseudo-version glued from the nearest tagged
    ancestor's version (or the default version) and the commit id
    ("1.2.3-<sha>").

    Attributes:
        value: The formatted version
        base_version: Bare version of the commit or of its nearest tagged ancestor
        commit: Full id of the resolved commit
        exact: True when the commit itself carries the version tag
        ref: The reference the caller asked for, if any
        prefix: Tag namespace active during resolution ("" for plain tags)
    """

    value: str
    base_version: str
    commit: str
    exact: bool
    ref: Optional[str] = None
    prefix: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'ref': self.ref,
            'commit': self.commit,
            'version': self.value,
            'base_version': self.base_version,
            'exact': self.exact,
            'prefix': self.prefix,
        }

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TreeEntry:
    """An entry of a directory at a revision."""

    name: str
    path: str
    type: str  # "blob", "tree" or "commit" (submodule)
    mode: str
    size: Optional[int] = None

    @property
    def is_dir(self) -> bool:
        return self.type == "tree"

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'path': self.path,
            'type': self.type,
            'mode': self.mode,
            'size': self.size,
        }
