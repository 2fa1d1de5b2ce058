"""
Shared utility functions for tagversion.
"""
import os
from pathlib import Path

from .errors import ExecutionFailedError


def is_git_repo(path):
    """
    Checks if a directory is the top level of a git working tree.

    Args:
        path (str): Path to check.

    Returns:
        bool: True if path contains a .git directory (or a .git file,
            as in linked worktrees and submodules).
    """
    return os.path.exists(os.path.join(path, ".git"))


def top_level(path="."):
    """
    Finds the absolute path of the top-level directory of the working tree
    containing path. Same answer as `git rev-parse --show-toplevel`, found
    without running git.

    Args:
        path (str): File or directory inside a working tree.

    Returns:
        str: Absolute path of the top-level directory.

    Raises:
        ExecutionFailedError: path is not inside a git working tree.
        FileNotFoundError: path does not exist.
    """
    p = Path(os.path.abspath(path))
    if not p.exists():
        raise FileNotFoundError(str(p))
    if not p.is_dir():
        p = p.parent

    while True:
        if is_git_repo(p):
            return str(p)
        if p.parent == p:
            break
        p = p.parent

    raise ExecutionFailedError(f"path {str(path)!r} is not inside git repository")
