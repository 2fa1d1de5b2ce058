"""
Commit domain objects for tagversion.

A Commit is an immutable node of the history: its id, its parent ids and
its committer timestamp. The timestamp only orders the ancestor search; it
never affects which commits are reachable.

CommitGraph is an arena of commits addressed by id. One is built per
resolution call; it loads history from the repository in batches as the
search asks for commits, so a search that stops early reads little.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, Optional, Set, Tuple


@dataclass(frozen=True)
class Commit:
    """
    A commit in the history.

    Attributes:
        sha: Full commit id
        parents: Parent commit ids, in the order git records them
        committed_at: Committer timestamp (seconds since the epoch)
    """

    sha: str
    parents: Tuple[str, ...] = ()
    committed_at: int = 0

    @property
    def is_root(self) -> bool:
        return not self.parents

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'sha': self.sha,
            'parents': list(self.parents),
            'committed_at': self.committed_at,
        }

    def __str__(self) -> str:
        return self.sha


class CommitGraph:
    """
    Arena of commits, optionally filled on demand.

    Parents that are not part of the graph (shallow clones, partial
    histories) resolve to a parentless commit with timestamp 0, so a
    search treats them as roots.

    With a loader, looking up a commit the graph does not hold yet calls
    loader(sha) once for that sha and adds whatever commits it returns.
    Commits are only ever added, never replaced.

    Example:
        graph = CommitGraph([
            Commit("b", parents=("a",), committed_at=200),
            Commit("a", committed_at=100),
        ])
        graph.get("b").parents   # ("a",)
    """

    def __init__(
        self,
        commits: Iterable[Commit] = (),
        loader: Optional[Callable[[str], Iterable[Commit]]] = None,
    ):
        self._commits: Dict[str, Commit] = {}
        self._loader = loader
        self._requested: Set[str] = set()
        self.add(commits)

    def add(self, commits: Iterable[Commit]) -> None:
        for commit in commits:
            self._commits.setdefault(commit.sha, commit)

    def get(self, sha: str) -> Commit:
        commit = self.find(sha)
        if commit is None:
            return Commit(sha=sha)
        return commit

    def find(self, sha: str) -> Optional[Commit]:
        commit = self._commits.get(sha)
        if commit is None and self._loader is not None and sha not in self._requested:
            self._requested.add(sha)
            self.add(self._loader(sha))
            commit = self._commits.get(sha)
        return commit

    def __contains__(self, sha: object) -> bool:
        return sha in self._commits

    def __len__(self) -> int:
        return len(self._commits)

    def __iter__(self) -> Iterator[Commit]:
        return iter(list(self._commits.values()))
