"""
Shared fixtures: throwaway git repositories with deterministic history.
"""
import logging
import os
import shutil
import subprocess

import pytest

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

BASE_TIMESTAMP = 1_600_000_000


class GitRepoBuilder:
    """Build a repository commit by commit with controlled timestamps."""

    def __init__(self, path, bare=False):
        self.path = str(path)
        self.clock = BASE_TIMESTAMP
        os.makedirs(self.path, exist_ok=True)
        if bare:
            self.git("init", "--quiet", "--bare")
        else:
            self.git("init", "--quiet")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")
        self.git("config", "user.name", "Test User")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")

    def git(self, *args, timestamp=None):
        env = os.environ.copy()
        env["LC_ALL"] = "C"
        env["GIT_TERMINAL_PROMPT"] = "0"
        if timestamp is not None:
            env["GIT_AUTHOR_DATE"] = f"{timestamp} +0000"
            env["GIT_COMMITTER_DATE"] = f"{timestamp} +0000"
        result = subprocess.run(
            ["git"] + list(args),
            cwd=self.path,
            capture_output=True,
            text=True,
            env=env,
            check=True,
        )
        return result.stdout.strip()

    def _tick(self, timestamp):
        if timestamp is None:
            self.clock += 60
            return self.clock
        return timestamp

    def write(self, name, content):
        full_path = os.path.join(self.path, name)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "w") as f:
            f.write(content)

    def commit(self, message, timestamp=None, files=None):
        """Commit files (default: one file named after the message) and return the sha."""
        for name, content in (files or {f"{message}.txt": message}).items():
            self.write(name, content)
        self.git("add", "-A")
        self.git("commit", "--quiet", "-m", message, timestamp=self._tick(timestamp))
        return self.head()

    def merge(self, branch, message, timestamp=None):
        self.git("merge", "--quiet", "--no-ff", "--no-edit", "-m", message, branch,
                 timestamp=self._tick(timestamp))
        return self.head()

    def tag(self, name, ref="HEAD", annotated=False):
        if annotated:
            self.git("tag", "-a", name, "-m", f"release {name}", ref, timestamp=self._tick(None))
        else:
            self.git("tag", name, ref)

    def branch(self, name, start="HEAD"):
        self.git("checkout", "--quiet", "-b", name, start)

    def checkout(self, ref):
        self.git("checkout", "--quiet", ref)

    def head(self):
        return self.git("rev-parse", "HEAD")


@pytest.fixture
def git_repo(tmp_path):
    """An empty non-bare repository on branch main."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    return GitRepoBuilder(tmp_path / "repo")


@pytest.fixture
def settings():
    """Default configuration, isolated from the environment."""
    from tagversion.config import get_default_config
    return get_default_config()


@pytest.fixture(autouse=True)
def clean_tagversion_env(monkeypatch):
    """Keep TAGVERSION_* variables of the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("TAGVERSION_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def restore_tagversion_logger():
    """The CLI installs a handler on stderr; drop it after each test."""
    logger = logging.getLogger("tagversion")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers = handlers
    logger.setLevel(level)
