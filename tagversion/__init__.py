"""
tagversion - Semantic versions for any git commit, derived from tags.

A commit carrying a version tag ("v1.2.0") resolves to that version
("1.2.0"). Any other commit resolves to the version of its nearest tagged
ancestor, suffixed with its own commit id ("1.2.0-<sha>"). Commits without
a tagged ancestor resolve to "0.0.0-<sha>".

Quick Start:
    import tagversion

    repo = tagversion.create("/path/to/clone")
    repo.resolve_version("HEAD")

    # Clone or update from a remote first
    repo = tagversion.Repo(tagversion.RepoConfig(
        dir="/tmp/checkouts/app",
        url="https://github.com/org/app.git",
    ))
    repo.ensure_up_to_date()

    # Monorepos: versions namespaced as "module-a/v1.2.0"
    repo.resolve_version("origin/main", tag_prefix="module-a")

Pure functions (no I/O):
    build_tag_index       - commit -> tag names
    filter_version_tags   - commit -> version, for one namespace
    find_nearest_version  - best-first search over the commit graph
    format_resolved_version

Errors:
    Every failure is a TagVersionError carrying an ErrorKind; use the
    is_* predicates to classify them.
"""

__version__ = "0.4.0"

# High-level API
from .api import Repo, RepoConfig, create

# Domain objects
from .domain import (
    Commit,
    CommitGraph,
    TagRef,
    ResolvedVersion,
    TreeEntry,
)

# Services (for advanced use)
from .services import VersionService

# Core algorithm
from .versioning import (
    DEFAULT_VERSION,
    build_tag_index,
    filter_version_tags,
    find_nearest_version,
    format_resolved_version,
    select_head_tag,
)

# Errors
from .errors import (
    ErrorKind,
    TagVersionError,
    InvalidConfigError,
    ReferenceNotFoundError,
    RepositoryNotFoundError,
    FileNotFoundInRevisionError,
    FolderNotFoundError,
    ExecutionFailedError,
    is_invalid_config,
    is_reference_not_found,
    is_repository_not_found,
    is_file_not_found,
    is_folder_not_found,
    is_execution_failed,
)

# Configuration
from .config import load_config, save_config

# Utilities
from .utils import top_level

__all__ = [
    # Version
    "__version__",
    # High-level API
    "Repo",
    "RepoConfig",
    "create",
    # Domain objects
    "Commit",
    "CommitGraph",
    "TagRef",
    "ResolvedVersion",
    "TreeEntry",
    # Services
    "VersionService",
    # Core algorithm
    "DEFAULT_VERSION",
    "build_tag_index",
    "filter_version_tags",
    "find_nearest_version",
    "format_resolved_version",
    "select_head_tag",
    # Errors
    "ErrorKind",
    "TagVersionError",
    "InvalidConfigError",
    "ReferenceNotFoundError",
    "RepositoryNotFoundError",
    "FileNotFoundInRevisionError",
    "FolderNotFoundError",
    "ExecutionFailedError",
    "is_invalid_config",
    "is_reference_not_found",
    "is_repository_not_found",
    "is_file_not_found",
    "is_folder_not_found",
    "is_execution_failed",
    # Configuration
    "load_config",
    "save_config",
    # Utilities
    "top_level",
]
