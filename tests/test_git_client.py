"""
Tests for tagversion.infra.git_client with subprocess mocked out.

Output parsing and error mapping are checked here; behavior against a real
git executable is covered in test_integration.py.
"""
import base64
import subprocess
from unittest.mock import patch, MagicMock

import pytest

from tagversion.domain import TagRef
from tagversion.errors import (
    ExecutionFailedError,
    FileNotFoundInRevisionError,
    FolderNotFoundError,
    ReferenceNotFoundError,
    RepositoryNotFoundError,
)
from tagversion.infra.git_client import (
    BASIC_AUTH_USERNAME,
    GitClient,
    normalize_tree_path,
)

SHA_A = "a" * 40
SHA_B = "b" * 40
SHA_T = "f" * 40


def completed(stdout=b"", stderr=b"", returncode=0):
    result = MagicMock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


@pytest.fixture
def mock_run():
    with patch("tagversion.infra.git_client.subprocess.run") as run:
        run.return_value = completed()
        yield run


def called_args(mock_run, index=-1):
    return mock_run.call_args_list[index][0][0]


class TestRun:
    """Tests for GitClient._run."""

    def test_runs_git_with_timeout_and_env(self, mock_run):
        client = GitClient(timeout=7)
        client._run(["status"], cwd="/repo")

        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "status"]
        assert kwargs["cwd"] == "/repo"
        assert kwargs["timeout"] == 7
        assert kwargs["env"]["GIT_TERMINAL_PROMPT"] == "0"
        assert kwargs["env"]["LC_ALL"] == "C"
        assert "GIT_CONFIG_COUNT" not in kwargs["env"]

    def test_extra_config_goes_through_environment(self, mock_run):
        GitClient()._run(["fetch"], extra_config={"http.extraHeader": "X: y"})

        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "fetch"]
        assert kwargs["env"]["GIT_CONFIG_COUNT"] == "1"
        assert kwargs["env"]["GIT_CONFIG_KEY_0"] == "http.extraHeader"
        assert kwargs["env"]["GIT_CONFIG_VALUE_0"] == "X: y"

    def test_timeout_raises_execution_failed(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="git log", timeout=1)
        with pytest.raises(ExecutionFailedError, match="timed out"):
            GitClient(timeout=1)._run(["log"])

    def test_missing_executable_raises_execution_failed(self, mock_run):
        mock_run.side_effect = FileNotFoundError("git")
        with pytest.raises(ExecutionFailedError):
            GitClient(git="/nope/git")._run(["log"])

    def test_text_and_bytes_output(self, mock_run):
        mock_run.return_value = completed(stdout=b"\xff\xfebinary")
        assert GitClient()._run(["cat-file"], text=False).stdout == b"\xff\xfebinary"
        assert isinstance(GitClient()._run(["cat-file"]).stdout, str)


class TestTags:
    """Tests for tag enumeration."""

    def rows(self, *rows):
        return "".join("\0".join(row) + "\n" for row in rows).encode()

    def test_lightweight_and_annotated(self, mock_run):
        mock_run.return_value = completed(stdout=self.rows(
            ("commit", SHA_A, "refs/tags/v1.0.0", "", ""),
            ("tag", SHA_T, "refs/tags/v1.1.0", "commit", SHA_B),
            ("tag", SHA_T, "refs/tags/tree-tag", "tree", SHA_A),
            ("blob", SHA_A, "refs/tags/blob-tag", "", ""),
        ))
        client = GitClient()

        assert client.lightweight_tags("/repo") == [TagRef("v1.0.0", SHA_A)]
        assert client.annotated_tags("/repo") == [TagRef("v1.1.0", SHA_B, annotated=True)]
        assert [t.name for t in client.tags("/repo")] == ["v1.0.0", "v1.1.0"]

    def test_for_each_ref_format(self, mock_run):
        GitClient().lightweight_tags("/repo")
        args = called_args(mock_run)
        assert args[:2] == ["git", "for-each-ref"]
        assert args[-1] == "refs/tags"
        assert "%(*objectname)" in args[2]

    def test_tag_of_tag_is_followed_to_commit(self, mock_run):
        mock_run.side_effect = [
            completed(stdout=self.rows(("tag", SHA_T, "refs/tags/nested", "tag", "e" * 40))),
            completed(stdout=(SHA_B + "\n").encode()),
        ]
        assert GitClient().annotated_tags("/repo") == [TagRef("nested", SHA_B, annotated=True)]
        assert called_args(mock_run)[-1] == "refs/tags/nested^{commit}"

    def test_tag_of_tag_without_commit_is_skipped(self, mock_run):
        mock_run.side_effect = [
            completed(stdout=self.rows(("tag", SHA_T, "refs/tags/nested", "tag", "e" * 40))),
            completed(returncode=1),
        ]
        assert GitClient().annotated_tags("/repo") == []

    def test_tag_names_keep_slashes(self, mock_run):
        mock_run.return_value = completed(stdout=self.rows(
            ("commit", SHA_A, "refs/tags/module-a/v0.1.0", "", ""),
        ))
        assert GitClient().lightweight_tags("/repo")[0].name == "module-a/v0.1.0"

    def test_enumeration_failure(self, mock_run):
        mock_run.return_value = completed(stderr=b"fatal: not a git repository", returncode=128)
        with pytest.raises(ExecutionFailedError, match="not a git repository"):
            GitClient().tags("/repo")


class TestRevisions:
    """Tests for revision resolution and HEAD queries."""

    def test_resolve_revision(self, mock_run):
        mock_run.return_value = completed(stdout=(SHA_A + "\n").encode())
        assert GitClient().resolve_revision("/repo", "v1.0.0") == SHA_A
        assert called_args(mock_run) == ["git", "rev-parse", "--verify", "--quiet", "v1.0.0^{commit}"]

    def test_unknown_revision(self, mock_run):
        mock_run.return_value = completed(returncode=1)
        with pytest.raises(ReferenceNotFoundError, match="origin/nope"):
            GitClient().resolve_revision("/repo", "origin/nope")

    @pytest.mark.parametrize("ref", ["", "--all", "-n"])
    def test_rejects_empty_and_option_like_refs(self, mock_run, ref):
        with pytest.raises(ReferenceNotFoundError):
            GitClient().resolve_revision("/repo", ref)
        mock_run.assert_not_called()

    def test_head_branch(self, mock_run):
        mock_run.return_value = completed(stdout=b"main\n")
        assert GitClient().head_branch("/repo") == "main"
        assert called_args(mock_run) == ["git", "symbolic-ref", "--quiet", "--short", "HEAD"]

    def test_detached_head(self, mock_run):
        mock_run.return_value = completed(returncode=1)
        with pytest.raises(ReferenceNotFoundError, match="detached"):
            GitClient().head_branch("/repo")

    def test_head_branch_other_failure(self, mock_run):
        mock_run.return_value = completed(stderr=b"fatal: not a git repository", returncode=128)
        with pytest.raises(ExecutionFailedError):
            GitClient().head_branch("/repo")


class TestConstruction:
    """Tests for GitClient.from_config and is_git_repo."""

    def test_from_config(self):
        client = GitClient.from_config({"general": {"git_timeout": 5, "remote_timeout": 600}})
        assert client.timeout == 5
        assert client.remote_timeout == 600

    def test_from_config_zero_means_no_limit(self):
        client = GitClient.from_config({"general": {"git_timeout": 0, "remote_timeout": 0}})
        assert client.timeout is None
        assert client.remote_timeout is None

    def test_from_config_defaults(self):
        client = GitClient.from_config(None)
        assert client.timeout == 60
        assert client.remote_timeout is None

    def test_is_git_repo_accepts_git_file(self, tmp_path):
        (tmp_path / "worktree").mkdir()
        (tmp_path / "worktree" / ".git").write_text("gitdir: /elsewhere/.git/worktrees/w\n")
        assert GitClient().is_git_repo(str(tmp_path / "worktree"))
        assert not GitClient().is_git_repo(str(tmp_path))


class TestCommitGraph:
    """Tests for commit_graph parsing."""

    def test_parses_log(self, mock_run):
        mock_run.return_value = completed(stdout=(
            f"{SHA_B}\t200\t{SHA_A}\n"
            f"{SHA_A}\t100\t\n"
        ).encode())
        graph = GitClient().commit_graph("/repo", SHA_B)

        assert len(graph) == 2
        assert graph.get(SHA_B).parents == (SHA_A,)
        assert graph.get(SHA_B).committed_at == 200
        assert graph.get(SHA_A).is_root
        assert called_args(mock_run) == [
            "git", "log", "--no-color", "--max-count=256", "--format=%H%x09%ct%x09%P", SHA_B, "--",
        ]

    def test_merge_commit_parent_order(self, mock_run):
        mock_run.return_value = completed(stdout=f"{SHA_T}\t300\t{SHA_B} {SHA_A}\n".encode())
        assert GitClient().commit_graph("/repo", SHA_T).get(SHA_T).parents == (SHA_B, SHA_A)

    def test_loads_next_batch_on_demand(self, mock_run):
        mock_run.side_effect = [
            completed(stdout=f"{SHA_T}\t300\t{SHA_B}\n{SHA_B}\t200\t{SHA_A}\n".encode()),
            completed(stdout=f"{SHA_A}\t100\t\n".encode()),
        ]
        graph = GitClient(history_batch_size=2).commit_graph("/repo", SHA_T)
        assert mock_run.call_count == 1
        assert len(graph) == 2

        assert graph.get(SHA_B).parents == (SHA_A,)
        assert mock_run.call_count == 1

        assert graph.get(SHA_A).committed_at == 100
        assert mock_run.call_count == 2
        assert SHA_A in called_args(mock_run)
        assert "--max-count=2" in called_args(mock_run)

    def test_unreadable_parent_is_a_root(self, mock_run):
        mock_run.side_effect = [
            completed(stdout=f"{SHA_B}\t200\t{SHA_A}\n".encode()),
            completed(stderr=b"fatal: bad object", returncode=128),
        ]
        graph = GitClient().commit_graph("/repo", SHA_B)
        assert graph.get(SHA_A).is_root
        assert graph.get(SHA_A).is_root
        assert mock_run.call_count == 2

    def test_failure(self, mock_run):
        mock_run.return_value = completed(stderr=b"fatal: bad object", returncode=128)
        with pytest.raises(ExecutionFailedError, match="bad object"):
            GitClient().commit_graph("/repo", SHA_A)


class TestContent:
    """Tests for reading files and directories at a revision."""

    def test_show_file(self, mock_run):
        mock_run.side_effect = [completed(stdout=b"blob\n"), completed(stdout=b"hello\n")]
        assert GitClient().show_file("/repo", SHA_A, "./docs/README.md") == b"hello\n"
        assert called_args(mock_run, 0) == ["git", "cat-file", "-t", f"{SHA_A}:docs/README.md"]
        assert called_args(mock_run, 1) == ["git", "cat-file", "blob", f"{SHA_A}:docs/README.md"]

    def test_show_missing_file(self, mock_run):
        mock_run.return_value = completed(returncode=128)
        with pytest.raises(FileNotFoundInRevisionError, match="nope.txt"):
            GitClient().show_file("/repo", SHA_A, "nope.txt")

    def test_show_directory_is_not_a_file(self, mock_run):
        mock_run.return_value = completed(stdout=b"tree\n")
        with pytest.raises(FileNotFoundInRevisionError):
            GitClient().show_file("/repo", SHA_A, "docs")

    def test_list_tree(self, mock_run):
        listing = (
            "100644 blob " + SHA_A + "      12\tREADME.md\0"
            "040000 tree " + SHA_B + "       -\tdocs\0"
        )
        mock_run.side_effect = [completed(stdout=b"tree\n"), completed(stdout=listing.encode())]
        entries = GitClient().list_tree("/repo", SHA_A, "sub/")

        assert [e.path for e in entries] == ["sub/README.md", "sub/docs"]
        assert entries[0].size == 12
        assert entries[1].size is None
        assert entries[1].is_dir
        assert called_args(mock_run) == ["git", "ls-tree", "-z", "-l", f"{SHA_A}:sub"]

    def test_list_root_skips_type_check(self, mock_run):
        mock_run.return_value = completed(stdout=b"")
        assert GitClient().list_tree("/repo", SHA_A, ".") == []
        assert called_args(mock_run) == ["git", "ls-tree", "-z", "-l", SHA_A]

    def test_list_missing_folder(self, mock_run):
        mock_run.return_value = completed(stdout=b"blob\n")
        with pytest.raises(FolderNotFoundError, match="README.md"):
            GitClient().list_tree("/repo", SHA_A, "README.md")


class TestRemote:
    """Tests for clone and fetch."""

    def test_auth_config(self):
        assert GitClient.auth_config("") is None
        header = GitClient.auth_config("token123")["http.extraHeader"]
        assert header.startswith("Authorization: Basic ")
        decoded = base64.b64decode(header.split()[-1]).decode()
        assert decoded == f"{BASIC_AUTH_USERNAME}:token123"

    def test_clone(self, mock_run):
        GitClient().clone("https://example.com/repo.git", "/tmp/repo", no_checkout=True, token="t")
        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "clone", "--quiet", "--no-checkout", "--",
                           "https://example.com/repo.git", "/tmp/repo"]
        assert kwargs["env"]["GIT_CONFIG_KEY_0"] == "http.extraHeader"
        assert "t" not in args[0]

    def test_fetch_refspecs(self, mock_run):
        GitClient().fetch("/tmp/repo", "https://example.com/repo.git")
        args = called_args(mock_run)
        assert args[:2] == ["git", "fetch"]
        assert "--tags" in args and "--force" in args
        assert args[-1] == "+refs/heads/*:refs/remotes/origin/*"

    def test_clone_and_fetch_use_remote_timeout(self, mock_run):
        client = GitClient(timeout=7, remote_timeout=300)
        client.clone("https://example.com/repo.git", "/tmp/repo")
        assert mock_run.call_args[1]["timeout"] == 300
        client.fetch("/tmp/repo", "https://example.com/repo.git")
        assert mock_run.call_args[1]["timeout"] == 300
        client.remote_url("/tmp/repo")
        assert mock_run.call_args[1]["timeout"] == 7

    def test_remote_commands_wait_by_default(self, mock_run):
        GitClient(timeout=7).fetch("/tmp/repo", "https://example.com/repo.git")
        assert mock_run.call_args[1]["timeout"] is None

    def test_failed_clone_removes_created_directory(self, mock_run, tmp_path):
        target = tmp_path / "clone"

        def partial_clone(cmd, **kwargs):
            (target / ".git").mkdir(parents=True)
            return completed(stderr=b"fatal: early EOF", returncode=128)

        mock_run.side_effect = partial_clone
        with pytest.raises(ExecutionFailedError, match="early EOF"):
            GitClient().clone("https://example.com/repo.git", str(target))
        assert not target.exists()

    def test_timed_out_clone_keeps_existing_directory(self, mock_run, tmp_path):
        target = tmp_path / "clone"
        target.mkdir()
        (target / "keep.txt").write_text("mine")

        def killed_clone(cmd, **kwargs):
            (target / ".git").mkdir()
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        mock_run.side_effect = killed_clone
        with pytest.raises(ExecutionFailedError, match="timed out"):
            GitClient(remote_timeout=1).clone("https://example.com/repo.git", str(target))
        assert (target / "keep.txt").read_text() == "mine"
        assert not (target / ".git").exists()

    @pytest.mark.parametrize("stderr", [
        b"remote: Repository not found.\nfatal: repository 'https://x/y.git/' not found",
        b"fatal: '/tmp/nope' does not appear to be a git repository",
        b"fatal: repository '/tmp/nope' does not exist",
    ])
    def test_repository_not_found(self, mock_run, stderr, tmp_path):
        mock_run.return_value = completed(stderr=stderr, returncode=128)
        with pytest.raises(RepositoryNotFoundError):
            GitClient().clone("https://x/y.git", str(tmp_path / "repo"))
        with pytest.raises(RepositoryNotFoundError):
            GitClient().fetch("/tmp/repo", "https://x/y.git")

    def test_other_remote_failure(self, mock_run):
        mock_run.return_value = completed(stderr=b"fatal: unable to access: Could not resolve host", returncode=128)
        with pytest.raises(ExecutionFailedError, match="Could not resolve host"):
            GitClient().fetch("/tmp/repo", "https://x/y.git")


class TestNormalizeTreePath:
    """Tests for normalize_tree_path."""

    @pytest.mark.parametrize("path,expected", [
        (".", ""),
        ("", ""),
        ("./", ""),
        ("/a/b/", "a/b"),
        ("./a//b", "a/b"),
        ("a\\b", "a/b"),
    ])
    def test_normalize(self, path, expected):
        assert normalize_tree_path(path) == expected
