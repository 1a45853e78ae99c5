"""End-to-end tests against a real git binary."""

import os
import shutil
import subprocess

import pytest

from gitscribe.errors import CommandFailedError
from gitscribe.git.repository import GitRepository

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(cwd, *args, input=None):
    proc = subprocess.run(
        ["git", *args],
        cwd=cwd,
        input=input,
        check=True,
        capture_output=True,
        text=True,
        env={
            "GIT_AUTHOR_NAME": "Test",
            "GIT_AUTHOR_EMAIL": "test@example.com",
            "GIT_COMMITTER_NAME": "Test",
            "GIT_COMMITTER_EMAIL": "test@example.com",
            "HOME": str(cwd),
            "PATH": os.environ.get("PATH", ""),
        },
    )
    return proc.stdout


@pytest.fixture
def real_repo(temp_dir, test_settings):
    path = temp_dir / "project"
    path.mkdir()
    git(path, "init", "--quiet", "--initial-branch=main")
    git(path, "config", "user.name", "Test")
    git(path, "config", "user.email", "test@example.com")
    (path / "old.txt").write_text("one\ntwo\nthree\n")
    git(path, "add", "old.txt")
    git(path, "commit", "--quiet", "-m", "first")
    return GitRepository(path, settings=test_settings)


class TestRealRepository:
    """Tests running the real git binary."""

    def test_branches(self, real_repo):
        branches = real_repo.branches()
        assert branches["main"].current
        assert branches.current.full == "refs/heads/main"

    def test_rename_diff(self, real_repo):
        git(real_repo.path, "mv", "old.txt", "new.txt")
        (real_repo.path / "new.txt").write_text("one\ntwo\nthree\nfour\n")
        git(real_repo.path, "add", "-A")
        git(real_repo.path, "commit", "--quiet", "-m", "rename")

        stats = real_repo.diff_stats("HEAD~1", "HEAD")
        assert stats.insertions == 1
        assert stats.files["new.txt"].src_path == "old.txt"

    def test_log_and_worktrees(self, real_repo):
        log = real_repo.log(5)
        assert log.size == 1
        worktrees = real_repo.worktrees()
        assert len(worktrees) == 1
        assert next(iter(worktrees)).commit == log.first

    def test_tags(self, real_repo):
        git(real_repo.path, "tag", "light")
        git(real_repo.path, "tag", "-a", "heavy", "-m", "Annotated\n\nbody")

        tags = {t.name: t for t in real_repo.tags()}
        assert tags["light"].lightweight
        assert tags["heavy"].annotated
        assert tags["heavy"].message == "Annotated\n\nbody"
        assert tags["heavy"].tagger_email == "test@example.com"

        result = real_repo.tag_delete("light", "missing")
        assert result.deleted == ("light",)
        assert [f.name for f in result.not_deleted] == ["missing"]

    def test_failure_keeps_stderr(self, real_repo):
        with pytest.raises(CommandFailedError) as exc_info:
            real_repo.rev_parse("no-such-ref")
        assert exc_info.value.returncode != 0
        assert exc_info.value.stderr

    def test_tag_object_without_tagger(self, real_repo):
        """Test an annotated tag with no tagger header is listed."""
        commit = real_repo.rev_parse("HEAD")
        tag_object = f"object {commit}\ntype commit\ntag old\n\nold style tag\n"
        tag_sha = git(
            real_repo.path, "hash-object", "-t", "tag", "-w", "--literally", "--stdin",
            input=tag_object,
        ).strip()
        git(real_repo.path, "update-ref", "refs/tags/old", tag_sha)
        git(real_repo.path, "tag", "light")

        tags = {t.name: t for t in real_repo.tags()}

        assert set(tags) == {"light", "old"}
        old = tags["old"]
        assert old.annotated
        assert old.sha == tag_sha
        assert old.target_sha == commit
        assert old.message == "old style tag"
        assert old.tagger_name is None
        assert old.tagger_email is None
        assert old.tagger_date is None
        assert old.tagger is None
