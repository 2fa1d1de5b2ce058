"""
Version service for tagversion.

Connects the git plumbing (GitClient) with the pure resolution functions
in tagversion.versioning. Every call rebuilds the tag index and the
version map from the repository, so results always reflect the tags as
they are at call time.
"""

import logging
from typing import Any, Dict, List, Optional

from ..config import load_config, get_tag_prefix
from ..domain.version import ResolvedVersion, TagRef
from ..infra.git_client import GitClient
from ..versioning import (
    DEFAULT_VERSION,
    TagIndex,
    build_tag_index,
    filter_version_tags,
    find_nearest_version,
    format_resolved_version,
    select_head_tag,
)

logger = logging.getLogger(__name__)


class VersionService:
    """
    Resolve versions and answer HEAD queries for one repository.

    The tag prefix of each call is, in order: the explicit tag_prefix
    argument, the TAGVERSION_TAG_PREFIX environment variable read at call
    time, the configured versioning.tag_prefix.

    Example:
        service = VersionService("/path/to/repo")
        service.resolve_version("v1.0.0")                       # "1.0.0"
        service.resolve_version("main")                         # "1.0.0-<sha>"
        service.resolve_version("HEAD", tag_prefix="module-a")  # "0.3.0"
    """

    def __init__(
        self,
        path: str,
        config: Optional[Dict[str, Any]] = None,
        git_client: Optional[GitClient] = None
    ):
        """
        Initialize VersionService.

        Args:
            path: Working tree (or bare repository) to read
            config: Configuration dict (loads default if None)
            git_client: GitClient instance (creates new if None)
        """
        self.path = path
        self.config = config or load_config()
        self.git = git_client or GitClient.from_config(self.config)

    def active_prefix(self, tag_prefix: Optional[str] = None) -> str:
        """The tag prefix a call with tag_prefix would use."""
        if tag_prefix is not None:
            return tag_prefix.strip()
        return get_tag_prefix(self.config)

    @property
    def default_version(self) -> str:
        version = self.config.get('versioning', {}).get('default_version')
        if version is None or version == "":
            return DEFAULT_VERSION
        return str(version)

    def tag_refs(self) -> List[TagRef]:
        """All lightweight and annotated tags."""
        return self.git.tags(self.path)

    def tag_index(self) -> TagIndex:
        """Commit id to the names of all tags pointing at it."""
        return build_tag_index(self.tag_refs())

    def versions(self, tag_prefix: Optional[str] = None) -> Dict[str, str]:
        """
        Commit id to bare version under the active prefix.

        Raises:
            ExecutionFailedError: A commit has more than one version tag
        """
        return filter_version_tags(self.tag_index(), self.active_prefix(tag_prefix))

    def resolve(self, ref: str, tag_prefix: Optional[str] = None) -> ResolvedVersion:
        """
        Resolve the version of a reference.

        It is "X.Y.Z" when the referenced commit is tagged "vX.Y.Z" (or
        "<prefix>/vX.Y.Z"), otherwise "X.Y.Z-SHA" where X.Y.Z comes from
        the most recent tagged ancestor, or the default version when there
        is none.

        Raises:
            ReferenceNotFoundError: ref does not resolve to a commit
            ExecutionFailedError: Ambiguous version tags
        """
        prefix = self.active_prefix(tag_prefix)
        versions = filter_version_tags(self.tag_index(), prefix)
        sha = self.git.resolve_revision(self.path, ref)

        # When the commit is tagged there is no need to walk the history.
        exact = sha in versions
        if exact:
            nearest = versions[sha]
        else:
            graph = self.git.commit_graph(self.path, sha)
            nearest = find_nearest_version(sha, versions, graph, default=self.default_version)
            logger.debug(f"Resolved {ref!r} ({sha}) to base version {nearest} with prefix {prefix!r}")

        return ResolvedVersion(
            value=format_resolved_version(sha, versions, nearest),
            base_version=nearest,
            commit=sha,
            exact=exact,
            ref=ref,
            prefix=prefix,
        )

    def resolve_version(self, ref: str, tag_prefix: Optional[str] = None) -> str:
        """Resolve the version of a reference as a string."""
        return self.resolve(ref, tag_prefix).value

    def head_branch(self) -> str:
        """Short name of the checked out branch."""
        return self.git.head_branch(self.path)

    def head_sha(self) -> str:
        """Commit id of HEAD."""
        return self.git.head_sha(self.path)

    def head_tag(self, tag_prefix: Optional[str] = None) -> str:
        """
        The tag of HEAD.

        With a prefix (e.g. "module-a") only tags under "module-a/" are
        considered. Without one, namespaced version tags such as
        "module-a/v1.2.0" are ignored.

        Raises:
            ReferenceNotFoundError: HEAD is not tagged
            ExecutionFailedError: HEAD has more than one qualifying tag
        """
        sha = self.head_sha()
        tags = self.tag_index().get(sha, [])
        return select_head_tag(tags, self.active_prefix(tag_prefix))
