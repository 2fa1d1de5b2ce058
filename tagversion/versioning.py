"""
Version resolution for git histories.

Pure functions over tags and a CommitGraph; no git invocations here (a
graph may load more history through its loader as the search asks for it).

    tag_index = build_tag_index(tag_refs)                 # commit -> tag names
    versions = filter_version_tags(tag_index, prefix)     # commit -> "1.2.3"
    nearest = find_nearest_version(sha, versions, graph)  # "1.2.3" or "0.0.0"
    format_resolved_version(sha, versions, nearest)       # "1.2.3-<sha>"

Version tags are "vX.Y.Z..." for plain repositories and
"<namespace>/vX.Y.Z..." for monorepo modules. Without a prefix only plain
tags count, so module tags never leak into the repository-wide version.
"""

import heapq
import logging
import re
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from packaging.version import Version, InvalidVersion

from .domain.commit import CommitGraph
from .domain.version import TagRef
from .errors import ExecutionFailedError, ReferenceNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "0.0.0"

VERSION_TAG_RE = re.compile(r'^v[0-9]+\.[0-9]+\.[0-9]+')
PREFIXED_VERSION_TAG_RE = re.compile(r'^[A-Za-z0-9_-]+/v[0-9]+\.[0-9]+\.[0-9]+')

TagIndex = Dict[str, List[str]]


def build_tag_index(tag_refs: Iterable[TagRef]) -> TagIndex:
    """
    Group tag names by the commit they point at.

    Args:
        tag_refs: Lightweight and annotated tags, annotated ones already
                  dereferenced to their commit

    Returns:
        Dict mapping commit id to tag names in enumeration order
    """
    index: TagIndex = {}
    for tag in tag_refs:
        names = index.setdefault(tag.commit, [])
        if tag.name not in names:
            names.append(tag.name)
    return index


def version_from_tag(tag: str, prefix: str = "") -> Optional[str]:
    """
    Extract the bare version from a tag name.

    Examples:
        version_from_tag("v1.2.3")                        -> "1.2.3"
        version_from_tag("module-a/v1.2.3")               -> None
        version_from_tag("module-a/v1.2.3", "module-a")   -> "1.2.3"
        version_from_tag("v1.2", "")                      -> None

    Returns:
        Version string, or None if the tag is not a version tag under prefix
    """
    if prefix:
        namespace = prefix + "/"
        if PREFIXED_VERSION_TAG_RE.match(tag) and tag.startswith(namespace):
            return tag[len(namespace):][1:]
        return None

    if VERSION_TAG_RE.match(tag) and not PREFIXED_VERSION_TAG_RE.match(tag):
        return tag[1:]
    return None


def filter_version_tags(tag_index: Mapping[str, Sequence[str]], prefix: str = "") -> Dict[str, str]:
    """
    Select the version of every tagged commit.

    Args:
        tag_index: Commit id to tag names
        prefix: Tag namespace ("" selects plain "vX.Y.Z" tags)

    Returns:
        Dict mapping commit id to bare version

    Raises:
        ExecutionFailedError: A commit carries more than one version tag
            under the active prefix
    """
    versions: Dict[str, str] = {}

    for sha, tags in tag_index.items():
        version_tags = [t for t in tags if version_from_tag(t, prefix) is not None]
        if not version_tags:
            continue
        if len(version_tags) > 1:
            raise ExecutionFailedError(
                f"multiple version tags {version_tags} found for commit {sha!r} "
                f"(filtered for prefix: {prefix!r})"
            )
        versions[sha] = version_from_tag(version_tags[0], prefix)

    return versions


def find_nearest_version(
    start: str,
    versions: Mapping[str, str],
    graph: CommitGraph,
    default: str = DEFAULT_VERSION,
) -> str:
    """
    Find the version of the nearest tagged ancestor of a commit.

    The start commit itself is checked first. Ancestors are then visited
    most recently committed first; among several reachable tagged
    ancestors the one with the latest commit date wins. Ties on the
    commit date go to the commit that was reached first.

    Every commit enters the queue at most once.

    Args:
        start: Commit id to start from
        versions: Commit id to bare version, for the active prefix
        graph: Ancestry of start
        default: Returned when no tagged ancestor exists

    Returns:
        Bare version of the nearest tagged ancestor, or default
    """
    # Heap entries are (-committed_at, enqueue order, sha).
    order = 0
    queue = [(-graph.get(start).committed_at, order, start)]
    seen = {start}
    visited = 0

    while queue:
        _, _, sha = heapq.heappop(queue)
        visited += 1

        version = versions.get(sha)
        if version is not None:
            logger.debug(f"Found version {version} on {sha} after visiting {visited} commits")
            return version

        for parent in graph.get(sha).parents:
            if parent in seen:
                continue
            seen.add(parent)
            order += 1
            heapq.heappush(queue, (-graph.get(parent).committed_at, order, parent))

    logger.debug(f"No tagged ancestor of {start} among {len(seen)} commits")
    return default


def format_resolved_version(target: str, versions: Mapping[str, str], nearest: str) -> str:
    """
    Format the version of a commit.

    Returns the commit's own version when it is tagged, otherwise the
    pseudo-version "<nearest>-<target>".
    """
    version = versions.get(target)
    if version is not None:
        return version
    return f"{nearest}-{target}"


def select_head_tag(tags: Sequence[str], prefix: str = "") -> str:
    """
    Pick the single tag of HEAD under the active prefix.

    Without a prefix every tag that is not a namespaced version tag
    qualifies. With a prefix, tags inside "<prefix>/" qualify.

    Raises:
        ReferenceNotFoundError: No tag qualifies
        ExecutionFailedError: More than one tag qualifies
    """
    if prefix:
        filtered = [t for t in tags if t.startswith(prefix + "/")]
    else:
        filtered = [t for t in tags if not PREFIXED_VERSION_TAG_RE.match(t)]

    if not filtered:
        raise ReferenceNotFoundError(f"HEAD ref is not tagged (filtered for prefix: {prefix!r})")
    if len(filtered) > 1:
        raise ExecutionFailedError(f"HEAD ref has multiple tags {filtered} (filtered for prefix: {prefix!r})")

    return filtered[0]


def version_sort_key(version: str) -> Tuple:
    """
    Sort key ordering bare versions semantically ("1.9.0" < "1.10.0").

    Versions packaging cannot parse sort after all others, by string.
    """
    try:
        return (0, Version(version), version)
    except InvalidVersion:
        return (1, version)
