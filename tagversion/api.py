"""
High-level Python API for tagversion.

Example:
    import tagversion

    # Clone (or update) a repository and ask for versions
    repo = tagversion.Repo(tagversion.RepoConfig(
        dir="/tmp/checkouts/myproject",
        url="https://github.com/org/myproject.git",
    ))
    repo.ensure_up_to_date()

    repo.resolve_version("v1.0.0")                # "1.0.0"
    repo.resolve_version("origin/feature-x")      # "1.0.0-<sha>"

    # Monorepo module versions ("module-a/v0.3.0")
    repo.resolve_version("HEAD", tag_prefix="module-a")

    # Existing clone, URL taken from the origin remote
    repo = tagversion.create("/path/to/clone")
    repo.head_branch(), repo.head_sha(), repo.head_tag()

    # Content at a revision, read from the object store
    repo.get_file_content("README.md", ref="v1.0.0")
    repo.get_folder_content(".", ref="origin/main")
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .config import load_config
from .domain.version import ResolvedVersion, TreeEntry
from .errors import InvalidConfigError
from .infra.git_client import GitClient
from .services.version_service import VersionService

logger = logging.getLogger(__name__)


@dataclass
class RepoConfig:
    """
    Where a repository lives and where it comes from.

    Attributes:
        dir: Local directory of the clone (required)
        url: Remote URL; when empty the clone must exist and its
             origin remote is used
        auth_basic_token: Token for HTTP basic auth on clone/fetch
    """
    dir: str = ""
    url: str = ""
    auth_basic_token: str = ""


class Repo:
    """
    A local clone of a remote repository.

    Version queries read tags and history at call time and never modify
    the clone. ensure_up_to_date() is the only method writing to it;
    callers running it concurrently with queries must serialize them.
    """

    def __init__(
        self,
        config: RepoConfig,
        settings: Optional[Dict[str, Any]] = None,
        git_client: Optional[GitClient] = None
    ):
        """
        Initialize Repo.

        Args:
            config: Repository location
            settings: Configuration dict (loads default if None)
            git_client: GitClient instance (creates new if None)

        Raises:
            InvalidConfigError: dir is empty, or url is empty and dir holds
                no clone with an origin remote
        """
        if not config.dir:
            raise InvalidConfigError("RepoConfig.dir must not be empty")

        self.settings = settings or load_config()
        self.git = git_client or GitClient.from_config(self.settings)
        self.dir = os.path.abspath(config.dir)
        self.token = config.auth_basic_token or self.settings.get('auth', {}).get('basic_token', '')

        url = config.url
        if not url:
            if not self.git.is_git_repo(self.dir):
                raise InvalidConfigError(
                    f"RepoConfig.url not set and failed to open repository at {self.dir!r}"
                )
            url = self.git.remote_url(self.dir, "origin")
            if not url:
                raise InvalidConfigError(
                    f"RepoConfig.url not set and failed to find remote with name 'origin' in {self.dir!r}"
                )
        self.url = url

        self.versions = VersionService(self.dir, config=self.settings, git_client=self.git)

    def ensure_up_to_date(self) -> None:
        """
        Fetch latest changes from the remote, cloning first if needed.

        Raises:
            RepositoryNotFoundError: The remote repository does not exist.
                Also raised on repeated calls after a failed clone left the
                directory behind.
        """
        if not self.git.is_git_repo(self.dir):
            # Only a fresh directory gets a working tree checked out.
            no_checkout = os.path.exists(self.dir)
            logger.info(f"Cloning {self.url} into {self.dir}")
            self.git.clone(self.url, self.dir, no_checkout=no_checkout, token=self.token)

        logger.info(f"Fetching {self.url}")
        self.git.fetch(self.dir, self.url, token=self.token)

    def head_branch(self) -> str:
        return self.versions.head_branch()

    def head_sha(self) -> str:
        return self.versions.head_sha()

    def head_tag(self, tag_prefix: Optional[str] = None) -> str:
        return self.versions.head_tag(tag_prefix)

    def resolve(self, ref: str, tag_prefix: Optional[str] = None) -> ResolvedVersion:
        return self.versions.resolve(ref, tag_prefix)

    def resolve_version(self, ref: str, tag_prefix: Optional[str] = None) -> str:
        """
        Resolve the version of a reference.

        "X.Y.Z" when the reference is tagged "vX.Y.Z", otherwise the
        pseudo-version "X.Y.Z-SHA" of the most recent tagged ancestor
        ("0.0.0-SHA" if there is none).
        """
        return self.versions.resolve_version(ref, tag_prefix)

    def get_file_content(self, path: str, ref: str = "") -> bytes:
        """
        Content of the file at path in ref (HEAD when empty).

        Raises:
            ReferenceNotFoundError: ref does not resolve
            FileNotFoundInRevisionError: No such file in ref
        """
        sha = self.git.resolve_revision(self.dir, ref or "HEAD")
        return self.git.show_file(self.dir, sha, path)

    def get_folder_content(self, path: str, ref: str = "") -> List[TreeEntry]:
        """
        Entries of the directory at path in ref (HEAD when empty).

        Raises:
            ReferenceNotFoundError: ref does not resolve
            FolderNotFoundError: No such directory in ref
        """
        sha = self.git.resolve_revision(self.dir, ref or "HEAD")
        return self.git.list_tree(self.dir, sha, path)


def create(dir: str, url: str = "", auth_basic_token: str = "", **kwargs) -> Repo:
    """
    Create a Repo instance.

    Convenience function equivalent to Repo(RepoConfig(...)).
    """
    return Repo(RepoConfig(dir=dir, url=url, auth_basic_token=auth_basic_token), **kwargs)
