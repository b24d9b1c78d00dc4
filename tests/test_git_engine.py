"""
Unit tests for the git collaborator.

Repository tests run against a throwaway repository in a temp directory
and are skipped when git is not installed.
"""

import os
import shutil
import subprocess
import tempfile

import pytest

from _engine.errors import GitCommandError
from _engine.git.command import run_git_command
from _engine.git.engine import (
    collect_changed_files,
    get_changed_files,
    get_commits,
    get_file_diff,
    get_latest_commit_hash,
    parse_name_status,
)
from _types.model import FileStatus

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def temp_repo():
    """Create a small repository with three commits and a staged change."""
    tmpdir = tempfile.mkdtemp()
    env = {**os.environ, "GIT_AUTHOR_NAME": "Test User", "GIT_AUTHOR_EMAIL": "test@example.com",
           "GIT_COMMITTER_NAME": "Test User", "GIT_COMMITTER_EMAIL": "test@example.com"}

    def run(*cmd):
        subprocess.run(list(cmd), cwd=tmpdir, env=env, capture_output=True, check=True)

    def write(name, content):
        with open(os.path.join(tmpdir, name), "w") as f:
            f.write(content)

    run("git", "init")
    run("git", "config", "user.email", "test@example.com")
    run("git", "config", "user.name", "Test User")
    run("git", "config", "commit.gpgsign", "false")

    write("README.md", "# Test Repo\n")
    run("git", "add", ".")
    run("git", "commit", "-m", "initial commit")

    write("main.py", "print('hello')\n")
    write("README.md", "# Test Repo\nMore content\n")
    run("git", "add", ".")
    run("git", "commit", "-m", "add main.py")

    os.remove(os.path.join(tmpdir, "main.py"))
    run("git", "add", "--all")
    run("git", "commit", "-m", "remove main.py")

    write("staged.txt", "staged line\n")
    run("git", "add", "staged.txt")

    yield tmpdir
    shutil.rmtree(tmpdir)


# ---------------------------------------------------------------------------
# parse_name_status
# ---------------------------------------------------------------------------

class TestParseNameStatus:
    def test_statuses(self):
        output = "A\tnew.py\nM\tchanged.py\nD\tgone.py\nR087\told.py\tmoved.py\n"
        assert parse_name_status(output) == [
            (FileStatus.ADDED, "new.py"),
            (FileStatus.MODIFIED, "changed.py"),
            (FileStatus.DELETED, "gone.py"),
            (FileStatus.MODIFIED, "moved.py"),
        ]

    def test_blank_and_malformed_lines_are_ignored(self):
        assert parse_name_status("\n\nM\n") == []


class TestRunGitCommand:
    def test_missing_binary_is_reported_not_raised(self):
        returncode, stdout, stderr = run_git_command(["definitely-not-a-binary-xyz"])
        assert returncode == 1
        assert stdout == ""
        assert stderr


# ---------------------------------------------------------------------------
# Repository operations
# ---------------------------------------------------------------------------

@requires_git
class TestRepository:
    def _sha(self, temp_repo, rev):
        return subprocess.run(
            ["git", "rev-parse", rev], cwd=temp_repo, capture_output=True, text=True, check=True
        ).stdout.strip()

    def test_latest_commit_hash(self, temp_repo):
        assert get_latest_commit_hash(cwd=temp_repo) == self._sha(temp_repo, "HEAD")

    def test_changed_files_for_commit(self, temp_repo):
        sha = self._sha(temp_repo, "HEAD~1")
        assert get_changed_files(sha, cwd=temp_repo) == [
            (FileStatus.MODIFIED, "README.md"),
            (FileStatus.ADDED, "main.py"),
        ]

    def test_changed_files_for_root_commit(self, temp_repo):
        sha = self._sha(temp_repo, "HEAD~2")
        assert get_changed_files(sha, cwd=temp_repo) == [(FileStatus.ADDED, "README.md")]

    def test_changed_files_staged(self, temp_repo):
        assert get_changed_files(cwd=temp_repo) == [(FileStatus.ADDED, "staged.txt")]

    def test_diff_of_root_commit(self, temp_repo):
        diff = get_file_diff("README.md", self._sha(temp_repo, "HEAD~2"), cwd=temp_repo)
        assert "+# Test Repo" in diff

    def test_diff_of_deleted_file(self, temp_repo):
        diff = get_file_diff("main.py", self._sha(temp_repo, "HEAD"), cwd=temp_repo)
        assert "-print('hello')" in diff

    def test_unknown_commit_raises(self, temp_repo):
        with pytest.raises(GitCommandError):
            get_changed_files("0" * 40, cwd=temp_repo)

    def test_collect_changed_files(self, temp_repo):
        files = collect_changed_files(self._sha(temp_repo, "HEAD~1"), max_workers=2, cwd=temp_repo)
        assert [f.filename for f in files] == ["README.md", "main.py"]
        assert files[1].status == FileStatus.ADDED
        assert "+More content" in files[0].diff

    def test_get_commits(self, temp_repo):
        commits = get_commits(0, 15, cwd=temp_repo)
        assert [c.message for c in commits] == ["remove main.py", "add main.py", "initial commit"]
        assert commits[0].sha_short == commits[0].sha_full[:7]

    def test_get_commits_paging(self, temp_repo):
        commits = get_commits(skip=2, limit=15, cwd=temp_repo)
        assert [c.message for c in commits] == ["initial commit"]
