"""Tests for repository discovery helpers."""

from gitscribe.git.utils import find_git_root, is_git_repository


class TestFindGitRoot:
    """Tests for find_git_root function."""

    def test_find_git_root_in_repo(self, repo_dir):
        """Test finding git root from the repo root."""
        assert find_git_root(repo_dir) == repo_dir.resolve()

    def test_find_git_root_in_subdirectory(self, repo_dir):
        """Test finding git root from a subdirectory."""
        subdir = repo_dir / "src" / "pkg"
        subdir.mkdir(parents=True)
        assert find_git_root(subdir) == repo_dir.resolve()

    def test_find_git_root_linked_worktree(self, temp_dir):
        """Test that a .git file marks a linked worktree."""
        (temp_dir / ".git").write_text("gitdir: /elsewhere/.git/worktrees/wt\n")
        assert find_git_root(temp_dir) == temp_dir.resolve()

    def test_find_git_root_not_found(self, temp_dir):
        """Test returning None outside any repository."""
        assert find_git_root(temp_dir) is None


class TestIsGitRepository:
    """Tests for is_git_repository function."""

    def test_is_git_repository_true(self, repo_dir):
        assert is_git_repository(repo_dir) is True

    def test_is_git_repository_false(self, temp_dir):
        assert is_git_repository(temp_dir) is False
