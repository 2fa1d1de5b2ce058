"""
Git client infrastructure for tagversion.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from the version resolution logic

Only read-only plumbing is used to inspect a repository. Clone and fetch
are the only commands that write, and they never touch the working tree
of an existing clone.
"""

import base64
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union
import logging

from ..domain.commit import Commit, CommitGraph
from ..domain.version import TagRef, TreeEntry
from ..errors import (
    ExecutionFailedError,
    FileNotFoundInRevisionError,
    FolderNotFoundError,
    ReferenceNotFoundError,
    RepositoryNotFoundError,
)
from ..utils import is_git_repo

logger = logging.getLogger(__name__)

# Fragments of git's stderr that mean the remote repository does not exist.
REPOSITORY_NOT_FOUND_MARKERS = (
    "repository not found",
    "does not appear to be a git repository",
    "could not find repository",
    "does not exist",
)

# Username for token based HTTP basic auth; git hosts only check the password.
BASIC_AUTH_USERNAME = "can-be-anything-but-not-empty"


@dataclass
class GitResult:
    """Result of a git invocation."""
    args: List[str]
    stdout: Union[str, bytes]
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def error_text(self) -> str:
        return self.stderr.strip() or f"exit status {self.returncode}"


class GitClient:
    """
    Abstraction over git commands.

    Provides methods for the git operations version resolution needs,
    with consistent error handling and return types.

    Example:
        client = GitClient()
        sha = client.resolve_revision("/path/to/repo", "v1.0.0")
        graph = client.commit_graph("/path/to/repo", sha)
    """

    def __init__(
        self,
        timeout: Optional[float] = 60,
        git: str = "git",
        remote_timeout: Optional[float] = None,
        history_batch_size: int = 256,
    ):
        """
        Initialize GitClient.

        Args:
            timeout: Timeout in seconds for local commands (default: 60)
            git: git executable
            remote_timeout: Timeout in seconds for clone and fetch
                (default: None, wait as long as the transfer takes)
            history_batch_size: Commits read per `git log` call when
                loading history
        """
        self.timeout = timeout
        self.git = git
        self.remote_timeout = remote_timeout
        self.history_batch_size = history_batch_size

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "GitClient":
        """Create a client from the 'general' section of a config dict."""
        general = (config or {}).get('general', {})
        return cls(
            timeout=general.get('git_timeout', 60) or None,
            remote_timeout=general.get('remote_timeout') or None,
        )

    def _run(
        self,
        args: Sequence[str],
        cwd: Optional[str] = None,
        text: bool = True,
        extra_config: Optional[Dict[str, str]] = None,
        remote: bool = False,
    ) -> GitResult:
        """
        Run a git command.

        Args:
            args: git arguments (without the executable)
            cwd: Working directory
            text: Decode stdout as UTF-8; raw bytes otherwise
            extra_config: One-shot git config, passed through the
                environment so values never show up in the process list
            remote: Talks to a remote; remote_timeout applies instead of timeout

        Returns:
            GitResult, also for non-zero exit codes

        Raises:
            ExecutionFailedError: git could not be started or timed out
        """
        cmd = [self.git] + list(args)
        timeout = self.remote_timeout if remote else self.timeout

        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        env["LC_ALL"] = "C"
        if extra_config:
            env["GIT_CONFIG_COUNT"] = str(len(extra_config))
            for i, (key, value) in enumerate(extra_config.items()):
                env[f"GIT_CONFIG_KEY_{i}"] = key
                env[f"GIT_CONFIG_VALUE_{i}"] = value

        logger.debug(f"Running in '{cwd}': {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                timeout=timeout,
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            raise ExecutionFailedError(f"git {args[0]} timed out after {timeout}s") from e
        except OSError as e:
            raise ExecutionFailedError(f"failed to run git {args[0]}: {e}") from e

        stderr = result.stderr.decode("utf-8", errors="replace")
        stdout: Union[str, bytes] = result.stdout
        if text:
            stdout = result.stdout.decode("utf-8", errors="replace")

        return GitResult(args=cmd, stdout=stdout, stderr=stderr, returncode=result.returncode)

    def _check(self, result: GitResult, what: str) -> GitResult:
        if not result.ok:
            raise ExecutionFailedError(f"{what}: {result.error_text()}")
        return result

    def is_git_repo(self, path: str) -> bool:
        """Check if path is a git repository."""
        return is_git_repo(path)

    def remote_url(self, path: str, remote: str = "origin") -> Optional[str]:
        """
        Get remote URL.

        Args:
            path: Path to git repository
            remote: Remote name (default: "origin")

        Returns:
            Remote URL or None if not found
        """
        result = self._run(["config", "--get", f"remote.{remote}.url"], cwd=path)
        if result.ok and result.stdout.strip():
            return result.stdout.strip()
        return None

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def _tag_rows(self, path: str) -> List[List[str]]:
        fmt = "%(objecttype)%00%(objectname)%00%(refname)%00%(*objecttype)%00%(*objectname)"
        result = self._check(
            self._run(["for-each-ref", f"--format={fmt}", "refs/tags"], cwd=path),
            "failed to list tags",
        )
        rows = []
        for line in result.stdout.splitlines():
            if line:
                rows.append(line.split("\0"))
        return rows

    @staticmethod
    def _tag_name(refname: str) -> str:
        return refname[len("refs/tags/"):] if refname.startswith("refs/tags/") else refname

    def lightweight_tags(self, path: str) -> List[TagRef]:
        """
        List lightweight tags, i.e. tag refs pointing directly at a commit.

        Raises:
            ExecutionFailedError: Tags cannot be enumerated
        """
        tags = []
        for objecttype, objectname, refname, _, _ in self._tag_rows(path):
            if objecttype == "commit":
                tags.append(TagRef(name=self._tag_name(refname), commit=objectname))
        return tags

    def annotated_tags(self, path: str) -> List[TagRef]:
        """
        List annotated tags dereferenced to the commit they point at.

        Tags of tags are followed down to the commit. Tags of trees or
        blobs do not name a commit and are skipped.

        Raises:
            ExecutionFailedError: Tags cannot be enumerated or dereferenced
        """
        tags = []
        for objecttype, _, refname, peeled_type, peeled_name in self._tag_rows(path):
            if objecttype != "tag":
                continue
            name = self._tag_name(refname)

            if peeled_type == "tag":
                result = self._run(["rev-parse", "--verify", "--quiet", f"{refname}^{{commit}}"], cwd=path)
                if not result.ok:
                    logger.debug(f"Skipping tag {name}: does not point at a commit")
                    continue
                peeled_type, peeled_name = "commit", result.stdout.strip()

            if peeled_type != "commit":
                logger.debug(f"Skipping tag {name}: points at a {peeled_type}")
                continue

            tags.append(TagRef(name=name, commit=peeled_name, annotated=True))
        return tags

    def tags(self, path: str) -> List[TagRef]:
        """All tags of the repository, lightweight first."""
        return self.lightweight_tags(path) + self.annotated_tags(path)

    # ------------------------------------------------------------------
    # Revisions and history
    # ------------------------------------------------------------------

    def resolve_revision(self, path: str, ref: str) -> str:
        """
        Resolve any git revision (branch, remote branch, tag, sha, HEAD~2, ...)
        to a full commit id.

        Raises:
            ReferenceNotFoundError: ref does not name a commit
        """
        if not ref or ref.startswith("-"):
            raise ReferenceNotFoundError(repr(ref))

        result = self._run(
            ["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"],
            cwd=path,
        )
        if not result.ok or not result.stdout.strip():
            raise ReferenceNotFoundError(repr(ref))
        return result.stdout.strip()

    def head_sha(self, path: str) -> str:
        """Full commit id of HEAD."""
        return self.resolve_revision(path, "HEAD")

    def head_branch(self, path: str) -> str:
        """
        Short name of the branch HEAD points at.

        Raises:
            ReferenceNotFoundError: HEAD is detached
            ExecutionFailedError: HEAD cannot be read
        """
        result = self._run(["symbolic-ref", "--quiet", "--short", "HEAD"], cwd=path)
        if result.returncode == 1:
            raise ReferenceNotFoundError("HEAD is detached")
        self._check(result, "failed to read HEAD")
        return result.stdout.strip()

    def _log_args(self, sha: str) -> List[str]:
        return [
            "log", "--no-color", f"--max-count={self.history_batch_size}",
            "--format=%H%x09%ct%x09%P", sha, "--",
        ]

    def commit_graph(self, path: str, sha: str) -> CommitGraph:
        """
        The ancestry of a commit (inclusive), read as the search needs it.

        The first batch of history is read right away. Each later lookup
        of a commit outside the loaded batches reads the next batch of
        `history_batch_size` commits starting at that commit. A commit
        that cannot be read (shallow clone boundary) loads nothing and
        counts as a root.

        Raises:
            ExecutionFailedError: The history of sha cannot be read
        """
        result = self._check(
            self._run(self._log_args(sha), cwd=path),
            f"failed to read history of {sha}",
        )

        def load(missing: str) -> List[Commit]:
            batch = self._run(self._log_args(missing), cwd=path)
            if not batch.ok:
                logger.debug(f"Treating {missing} as a root: {batch.error_text()}")
                return []
            return self._parse_log(batch.stdout)

        return CommitGraph(self._parse_log(result.stdout), loader=load)

    @staticmethod
    def _parse_log(output: str) -> List[Commit]:
        commits = []
        for line in output.splitlines():
            if not line.strip():
                continue
            fields = line.split("\t")
            commit_sha = fields[0].strip()
            try:
                committed_at = int(fields[1]) if len(fields) > 1 and fields[1] else 0
            except ValueError:
                committed_at = 0
            parents = tuple(fields[2].split()) if len(fields) > 2 else ()
            commits.append(Commit(sha=commit_sha, parents=parents, committed_at=committed_at))
        return commits

    # ------------------------------------------------------------------
    # Content at a revision
    # ------------------------------------------------------------------

    def object_type(self, path: str, sha: str, file_path: str) -> Optional[str]:
        """Type of the object at file_path in commit sha, or None if missing."""
        result = self._run(["cat-file", "-t", f"{sha}:{file_path}"], cwd=path)
        if not result.ok:
            return None
        return result.stdout.strip()

    def show_file(self, path: str, sha: str, file_path: str) -> bytes:
        """
        Read a file as it is stored in a commit.

        Raises:
            FileNotFoundInRevisionError: file_path is not a file in sha
        """
        file_path = normalize_tree_path(file_path)
        if not file_path or self.object_type(path, sha, file_path) != "blob":
            raise FileNotFoundInRevisionError(repr(file_path))

        result = self._check(
            self._run(["cat-file", "blob", f"{sha}:{file_path}"], cwd=path, text=False),
            f"failed to read {file_path!r} at {sha}",
        )
        return result.stdout

    def list_tree(self, path: str, sha: str, dir_path: str) -> List[TreeEntry]:
        """
        List a directory as it is stored in a commit.

        Raises:
            FolderNotFoundError: dir_path is not a directory in sha
        """
        dir_path = normalize_tree_path(dir_path)
        if dir_path and self.object_type(path, sha, dir_path) != "tree":
            raise FolderNotFoundError(repr(dir_path))

        treeish = f"{sha}:{dir_path}" if dir_path else sha
        result = self._check(
            self._run(["ls-tree", "-z", "-l", treeish], cwd=path),
            f"failed to list {dir_path or '.'!r} at {sha}",
        )

        entries = []
        for record in result.stdout.split("\0"):
            if not record or "\t" not in record:
                continue
            meta, name = record.split("\t", 1)
            parts = meta.split()
            if len(parts) < 4:
                continue
            mode, obj_type, _, size = parts[:4]
            entries.append(TreeEntry(
                name=name,
                path=f"{dir_path}/{name}" if dir_path else name,
                type=obj_type,
                mode=mode,
                size=int(size) if size.isdigit() else None,
            ))
        return entries

    # ------------------------------------------------------------------
    # Remote
    # ------------------------------------------------------------------

    @staticmethod
    def auth_config(token: Optional[str]) -> Optional[Dict[str, str]]:
        """One-shot git config for HTTP basic auth with a token."""
        if not token:
            return None
        credentials = base64.b64encode(f"{BASIC_AUTH_USERNAME}:{token}".encode()).decode()
        return {"http.extraHeader": f"Authorization: Basic {credentials}"}

    def _raise_for_remote(self, result: GitResult, url: str, what: str) -> None:
        if result.ok:
            return
        stderr = result.stderr.lower()
        if any(marker in stderr for marker in REPOSITORY_NOT_FOUND_MARKERS):
            raise RepositoryNotFoundError(repr(url))
        raise ExecutionFailedError(f"{what} {url!r}: {result.error_text()}")

    def clone(self, url: str, path: str, no_checkout: bool = False, token: Optional[str] = None) -> None:
        """
        Clone url into path.

        A failed or timed out clone leaves nothing behind: the directory
        is removed when the clone created it, otherwise only the .git it
        created is.

        Raises:
            RepositoryNotFoundError: Remote repository does not exist
            ExecutionFailedError: Clone failed for another reason
        """
        path_existed = os.path.exists(path)
        git_existed = os.path.exists(os.path.join(path, ".git"))

        args = ["clone", "--quiet"]
        if no_checkout:
            args.append("--no-checkout")
        args += ["--", url, path]
        try:
            result = self._run(args, extra_config=self.auth_config(token), remote=True)
        except ExecutionFailedError:
            self._remove_partial_clone(path, path_existed, git_existed)
            raise
        if not result.ok:
            self._remove_partial_clone(path, path_existed, git_existed)
        self._raise_for_remote(result, url, "failed to clone")

    @staticmethod
    def _remove_partial_clone(path: str, path_existed: bool, git_existed: bool) -> None:
        if not path_existed:
            target = path
        elif not git_existed:
            target = os.path.join(path, ".git")
        else:
            return
        if os.path.lexists(target):
            logger.info(f"Removing incomplete clone at {target}")
            shutil.rmtree(target, ignore_errors=True)

    def fetch(self, path: str, url: str, remote: str = "origin", token: Optional[str] = None) -> None:
        """
        Force-fetch all branches and tags from remote.

        Raises:
            RepositoryNotFoundError: Remote repository does not exist
            ExecutionFailedError: Fetch failed for another reason
        """
        args = [
            "fetch", "--quiet", "--force", "--tags", "--prune", remote,
            f"+refs/heads/*:refs/remotes/{remote}/*",
        ]
        result = self._run(args, cwd=path, extra_config=self.auth_config(token), remote=True)
        self._raise_for_remote(result, url, "failed to fetch")


def normalize_tree_path(path: str) -> str:
    """Turn "./a/b/", "/a/b" or "." into the tree path git expects ("a/b" or "")."""
    parts = [p for p in path.replace("\\", "/").split("/") if p and p != "."]
    return "/".join(parts)
