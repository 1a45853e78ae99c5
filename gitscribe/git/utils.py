"""Locating git repositories on disk."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


def find_git_root(start_path: Path | str) -> Optional[Path]:
    """Find the root of a git repository.

    Walks up the directory tree from start_path looking for a .git entry,
    which is a directory in a normal clone and a file in a linked worktree
    or submodule.

    Args:
        start_path: Path to start searching from.

    Returns:
        Path to the repository root, or None if not in a git repository.
    """
    path = Path(start_path).resolve()

    for parent in [path] + list(path.parents):
        if (parent / ".git").exists():
            return parent

    return None


def is_git_repository(path: Path | str) -> bool:
    """Check if a path is inside a git repository."""
    return find_git_root(path) is not None
